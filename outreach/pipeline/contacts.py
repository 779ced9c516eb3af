"""
Contact resolution policy.

The same three-tier fallback is applied wherever contact data is persisted
or surfaced: primary contact, then secondary contact, then the legacy flat
contact. A tier is usable only when its name or title is real text rather
than a provider placeholder such as "N/A".
"""

from typing import Any, Dict, Optional

from outreach.pipeline.types import Contact, ContactInfo, Source

PLACEHOLDER_VALUES = {"", "n/a", "na", "none", "null", "unknown"}
PLACEHOLDER_PHRASES = ("not available", "no publicly available")

CONTACT_LABELS = {
    "primary": "Primary Contact",
    "secondary": "Secondary Contact",
    "legacy": "Contact",
}


def is_placeholder(value: Optional[str]) -> bool:
    """True for empty values, "N/A" and "... not available ..." style text."""
    if value is None:
        return True
    text = str(value).strip().lower()
    if text in PLACEHOLDER_VALUES:
        return True
    return any(phrase in text for phrase in PLACEHOLDER_PHRASES)


def is_usable(contact: Optional[Contact]) -> bool:
    if contact is None:
        return False
    return not is_placeholder(contact.name) or not is_placeholder(contact.title)


def resolve_contact_with_tier(info: Optional[ContactInfo]) -> tuple[Optional[Contact], Optional[str]]:
    """Return the first usable contact and the tier it came from."""
    if info is None:
        return None, None
    for tier, contact in (
        ("primary", info.primary_contact),
        ("secondary", info.secondary_contact),
        ("legacy", info.legacy),
    ):
        if is_usable(contact):
            return _clean(contact), tier
    return None, None


def resolve_contact(info: Optional[ContactInfo]) -> Optional[Contact]:
    contact, _ = resolve_contact_with_tier(info)
    return contact


def contact_label(tier: Optional[str], contact: Optional[Contact]) -> str:
    """Display label for a resolved contact."""
    if contact is not None and contact.contact_type == "hiring" and tier == "primary":
        return "Hiring Contact"
    if contact is not None and contact.contact_type == "leadership" and tier == "secondary":
        return "Leadership Contact"
    return CONTACT_LABELS.get(tier or "", "Contact")


def _clean(contact: Contact) -> Contact:
    """Blank out placeholder fields so they never reach the record."""
    updates = {}
    for field_name in ("name", "title", "email"):
        if is_placeholder(getattr(contact, field_name)):
            updates[field_name] = None
    return contact.model_copy(update=updates) if updates else contact


# ===== Raw dict coercion =====

def coerce_contact(raw: Any) -> Optional[Contact]:
    """Build a Contact from a loosely-shaped provider or stored dict."""
    if not isinstance(raw, dict):
        return None
    source = raw.get("source")
    if isinstance(source, str):
        source = {"url": source, "title": ""}
    if not isinstance(source, dict):
        source = None
    inferred = raw.get("inferred", raw.get("email_inferred", False))
    contact = Contact(
        name=_str_or_none(raw.get("name")),
        title=_str_or_none(raw.get("title")),
        email=_str_or_none(raw.get("email")),
        inferred=bool(inferred),
        source=Source(
            title=str(source.get("title") or ""), url=str(source.get("url") or "")
        ) if source else None,
        contact_type=_str_or_none(raw.get("contact_type")),
    )
    if contact.name is None and contact.title is None and contact.email is None:
        return None
    return contact


def coerce_contact_info(raw: Any) -> Optional[ContactInfo]:
    """
    Build a ContactInfo from either the tiered or the legacy flat shape.

    Accepts ``{"primary_contact": {...}, "secondary_contact": {...}}``,
    a flat ``{"name": ..., "title": ..., "email": ...}`` contact, or an
    already-serialized ContactInfo.
    """
    if isinstance(raw, ContactInfo):
        return raw
    if not isinstance(raw, dict):
        return None

    tiered = {"primary_contact", "secondary_contact", "legacy"} & raw.keys()
    if tiered:
        info = ContactInfo(
            primary_contact=coerce_contact(raw.get("primary_contact")),
            secondary_contact=coerce_contact(raw.get("secondary_contact")),
            legacy=coerce_contact(raw.get("legacy")),
        )
    else:
        info = ContactInfo(legacy=coerce_contact(raw))
    return None if info.is_empty() else info


def resolve_contact_from_data(research_data: Optional[Dict[str, Any]]) -> Optional[Contact]:
    """Resolve the contact stored in a record's research_data, if any."""
    if not research_data:
        return None
    return resolve_contact(coerce_contact_info(research_data.get("contact")))


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
