"""
Outreach API route modules.

Each module handles a specific area of functionality.
"""

from .contact_results import router as contact_results_router
from .history import router as history_router
from .messaging import router as messaging_router
from .run import router as run_router
from .sources import router as sources_router

__all__ = [
    "contact_results_router",
    "history_router",
    "messaging_router",
    "run_router",
    "sources_router",
]
