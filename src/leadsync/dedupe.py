"""
LeadSync dedupe - keeps the accumulated lead set free of duplicate URLs.

The extractor dedupes within one scan; this module enforces the same
normalized-URL key across scans.
"""

from typing import Literal

from .models import Lead
from .urls import url_key


def lead_key(lead: Lead) -> str:
    """Dedup key for a lead (its normalized, lowercased URL)."""
    return url_key(lead.url)


def dedupe_leads(leads: list[Lead]) -> list[Lead]:
    """Drop later leads whose key was already seen. Order is kept."""
    by_key: dict[str, Lead] = {}
    for lead in leads:
        by_key.setdefault(lead_key(lead), lead)
    return list(by_key.values())


def merge_leads(existing: list[Lead], incoming: list[Lead]) -> tuple[list[Lead], list[Lead]]:
    """Merge newly scanned leads into an existing set.

    Existing leads win (their status and detection time are kept); incoming
    leads with a known key are dropped.

    Returns:
        (merged list, leads that were actually added)
    """
    merged = dedupe_leads(existing)
    seen = {lead_key(lead) for lead in merged}
    added: list[Lead] = []
    for lead in incoming:
        key = lead_key(lead)
        if key in seen:
            continue
        seen.add(key)
        added.append(lead)
    return merged + added, added


def sort_leads(leads: list[Lead], by: Literal["recent", "relevance"] = "recent") -> list[Lead]:
    """Display order: newest first, or highest relevance first (newest breaks ties)."""
    if by == "relevance":
        return sorted(leads, key=lambda lead: (lead.relevance_score, lead.detected_at), reverse=True)
    return sorted(leads, key=lambda lead: lead.detected_at, reverse=True)
