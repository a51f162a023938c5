"""Pytest configuration and fixtures."""

from datetime import UTC, datetime

import pytest

from leadsync.models import Candidate, Citation, Lead, Profile, SearchResponse
from leadsync.search import StaticGroundedSearch
from leadsync.store import MemoryBlobStore, Workspace


@pytest.fixture
def sample_profile() -> Profile:
    """Create a sample profile."""
    return Profile(
        id="profile-plumbing",
        name="Austin Plumbing",
        keywords=["need a plumber"],
        exclude_keywords=["job"],
        niche="Home Services",
        location="Austin, TX",
    )


@pytest.fixture
def global_profile() -> Profile:
    """Create a profile without a concrete location."""
    return Profile(
        id="profile-saas",
        name="SaaS Leads",
        keywords=["CRM for startups", "marketing automation"],
        exclude_keywords=["jobs", "internship"],
        niche="B2B Software",
    )


@pytest.fixture
def sample_candidate() -> Candidate:
    """Create a sample candidate."""
    return Candidate(
        url="https://www.reddit.com/r/Austin/comments/abc",
        platform="Reddit",
        title="Jane Doe - Reddit",
        author="Jane Doe",
        snippet="Anyone know a plumber who can come out today?",
    )


@pytest.fixture
def sample_lead() -> Lead:
    """Create a sample lead."""
    return Lead(
        id="lead-1",
        url="https://www.reddit.com/r/Austin/comments/abc",
        platform="Reddit",
        title="Need a plumber in Austin",
        snippet="Anyone know a plumber who can come out today?",
        author="Jane Doe",
        relevance_score=88,
        detected_at=datetime(2026, 1, 15, 9, 30, tzinfo=UTC),
        file_id="profile-plumbing",
    )


@pytest.fixture
def sample_response() -> SearchResponse:
    """A grounded response with two citations and one extra URL in the text."""
    return SearchResponse(
        text=(
            "Here are recent posts. Jane asked for a plumber at "
            "https://www.reddit.com/r/Austin/comments/abc/ yesterday. "
            "Another homeowner posted in https://m.facebook.com/groups/austinhomes/posts/42?ref=share "
            "looking for a water heater fix. A blog https://example.com/plumbing-tips was also found."
        ),
        citations=[
            Citation(
                uri="https://reddit.com/r/Austin/comments/abc?utm_source=share",
                title="Jane Doe - Reddit",
            ),
            Citation(uri="https://nextdoor.com/p/xyz", title="Leaky pipe help | Nextdoor"),
        ],
    )


@pytest.fixture
def static_search(sample_response: SearchResponse) -> StaticGroundedSearch:
    """Search capability that always returns sample_response."""
    return StaticGroundedSearch([sample_response])


@pytest.fixture
def workspace() -> Workspace:
    """Workspace over an in-memory store."""
    return Workspace(MemoryBlobStore())
