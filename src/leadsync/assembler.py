"""
LeadSync assembler - finalizes extractor candidates into Leads and Groups.
"""

import random
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from .models import DEFAULT_NICHE, Candidate, Group, Lead, Profile

RELEVANCE_MIN = 70
RELEVANCE_MAX = 99

Scorer = Callable[[Candidate], int]


class RelevanceScorer:
    """Advisory relevance score in [low, high].

    The score is synthetic (not derived from the post text); pass a seed for
    reproducible runs.
    """

    def __init__(self, seed: int | None = None, low: int = RELEVANCE_MIN, high: int = RELEVANCE_MAX):
        if low > high:
            raise ValueError(f"low ({low}) must not exceed high ({high})")
        self.low = low
        self.high = high
        self._rng = random.Random(seed)

    def __call__(self, candidate: Candidate) -> int:
        return self._rng.randint(self.low, self.high)


def new_id(prefix: str) -> str:
    """Unique record id like 'lead-3f2a...'."""
    return f"{prefix}-{uuid.uuid4().hex}"


def assemble_leads(
    candidates: list[Candidate],
    profile: Profile,
    scorer: Scorer | None = None,
    now: datetime | None = None,
) -> list[Lead]:
    """Build new Lead records for a profile from extractor candidates.

    Candidates are read, never modified. Each lead gets a fresh id, the
    detection time, file_id=profile.id, status to_be_outreached and a score
    clamped to the documented range.
    """
    score = scorer or RelevanceScorer()
    detected_at = now or datetime.now(UTC)

    leads = []
    for candidate in candidates:
        leads.append(
            Lead(
                id=new_id("lead"),
                url=candidate.url,
                platform=candidate.platform,
                title=candidate.title,
                snippet=candidate.snippet,
                author=candidate.author,
                relevance_score=min(RELEVANCE_MAX, max(RELEVANCE_MIN, int(score(candidate)))),
                detected_at=detected_at,
                file_id=profile.id,
                status="to_be_outreached",
            )
        )
    return leads


def assemble_groups(candidates: list[Candidate], niche: str = DEFAULT_NICHE) -> list[Group]:
    """Build Group records from community candidates."""
    groups = []
    for candidate in candidates:
        name = candidate.author or candidate.title or candidate.url
        groups.append(
            Group(
                id=new_id("group"),
                name=name,
                url=candidate.url,
                niche=niche,
            )
        )
    return groups
