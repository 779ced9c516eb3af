"""
Response normalization at stage boundaries.

Research providers have answered in two shapes over time:

- structured: ``company_overview`` + ``key_business_points`` (each a
  ``{description, source_url}``) + ``contact_information`` with primary and
  secondary contacts
- flat: ``summary`` + ``points`` (strings or ``{claim, source}``) +
  ``sources`` + an optional single ``contact``

Both, and plain text, are mapped to ResearchDoc here. Nothing downstream of
this module looks at raw provider output.
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from outreach.pipeline.contacts import coerce_contact_info, is_placeholder
from outreach.pipeline.types import Claim, ResearchDoc, Source, VerifiedDoc

STRUCTURED_KEYS = ("company_overview", "key_business_points", "contact_information")

RawResponse = Union[Dict[str, Any], str, None]


def normalize_research(raw: RawResponse) -> ResearchDoc:
    """Map any known research response shape to a ResearchDoc."""
    if raw is None:
        return ResearchDoc()
    if isinstance(raw, str):
        return ResearchDoc(summary=raw.strip())
    if not isinstance(raw, dict):
        return ResearchDoc(summary=str(raw))

    if any(key in raw for key in STRUCTURED_KEYS):
        return _normalize_structured(raw)
    return _normalize_flat(raw, ResearchDoc)


def normalize_verified(raw: RawResponse) -> VerifiedDoc:
    """Map a verification response to a VerifiedDoc (unsourced points are dropped)."""
    if raw is None:
        return VerifiedDoc()
    if isinstance(raw, str):
        return VerifiedDoc(summary=raw.strip())
    if not isinstance(raw, dict):
        return VerifiedDoc(summary=str(raw))
    if any(key in raw for key in STRUCTURED_KEYS):
        return VerifiedDoc.model_validate(_normalize_structured(raw).model_dump())
    return _normalize_flat(raw, VerifiedDoc)


def _normalize_structured(raw: Dict[str, Any]) -> ResearchDoc:
    summary = _text(raw.get("company_overview")) or _text(raw.get("summary"))

    points: List[Claim] = []
    business_points = raw.get("key_business_points")
    if isinstance(business_points, dict):
        for key, value in business_points.items():
            claim = _business_point(key, value)
            if claim is not None:
                points.append(claim)
    points.extend(_coerce_points(raw.get("points")))

    contact = coerce_contact_info(raw.get("contact_information") or raw.get("contact"))
    sources = _collect_sources(points, raw.get("sources"))
    return ResearchDoc(summary=summary, points=points, contact=contact, sources=sources)


def _normalize_flat(raw: Dict[str, Any], doc_type):
    points = _coerce_points(raw.get("points"))
    return doc_type(
        summary=_text(raw.get("summary")),
        points=points,
        contact=coerce_contact_info(raw.get("contact")),
        sources=_collect_sources(points, raw.get("sources")),
    )


def _business_point(key: str, value: Any) -> Optional[Claim]:
    label = key.replace("_", " ").strip().capitalize()
    if isinstance(value, dict):
        description = _text(value.get("description"))
        url = _text(value.get("source_url") or value.get("url"))
    else:
        description, url = _text(value), ""
    if is_placeholder(description):
        return None
    source = Source(title=label, url=url) if url else None
    return Claim(claim=description, source=source)


def _coerce_points(raw_points: Any) -> List[Claim]:
    if not isinstance(raw_points, list):
        return []
    points = []
    for item in raw_points:
        if isinstance(item, str):
            if item.strip():
                points.append(Claim(claim=item.strip()))
        elif isinstance(item, dict):
            claim = _text(item.get("claim") or item.get("description"))
            if not claim:
                continue
            points.append(Claim(claim=claim, source=_coerce_source(item.get("source") or item.get("source_url"))))
    return points


def _coerce_source(raw: Any) -> Optional[Source]:
    if isinstance(raw, str):
        return Source(title="", url=raw.strip()) if raw.strip() else None
    if isinstance(raw, dict):
        url = _text(raw.get("url"))
        title = _text(raw.get("title"))
        if url or title:
            return Source(title=title, url=url)
    return None


def _collect_sources(points: Iterable[Claim], raw_sources: Any) -> List[Source]:
    """Explicit sources first, then point sources, deduplicated by URL."""
    seen = set()
    sources = []
    explicit = raw_sources if isinstance(raw_sources, list) else []
    candidates = [_coerce_source(s) for s in explicit] + [p.source for p in points]
    for source in candidates:
        if source is None or not source.url or source.url in seen:
            continue
        seen.add(source.url)
        sources.append(source)
    return sources


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
