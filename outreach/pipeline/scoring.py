"""Contact confidence scoring."""

from typing import Optional

from outreach.pipeline.types import Contact, VerifiedDoc

BASE_SCORE = 0.5
POINTS_BONUS = 0.2
CONTACT_BONUS = 0.2
CONFIRMED_EMAIL_BONUS = 0.1
MAX_SCORE = 1.0


def calculate_confidence(verified: Optional[VerifiedDoc], contact: Optional[Contact]) -> float:
    """
    Score how much evidence backs an outreach target.

    0.5 base, +0.2 when verified points exist, +0.2 when a contact
    resolved, +0.1 when that contact's email was observed rather than
    inferred. Clamped to 1.0.
    """
    score = BASE_SCORE
    if verified is not None and verified.points:
        score += POINTS_BONUS
    if contact is not None:
        score += CONTACT_BONUS
        if contact.email and not contact.inferred:
            score += CONFIRMED_EMAIL_BONUS
    return round(min(score, MAX_SCORE), 2)
