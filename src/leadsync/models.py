"""
LeadSync data models - strict Pydantic schemas for organic lead discovery.

Design principles:
- extra="forbid" everywhere (fail fast on unexpected fields)
- Profiles are validated at input time; a profile without keywords never exists
- Lead URLs are normalized; the normalized URL is the dedup key
- Only Lead.status changes after a lead is created
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =============================================================================
# TYPE LITERALS
# =============================================================================

Platform = Literal[
    "Facebook",
    "Reddit",
    "Quora",
    "Instagram",
    "Nextdoor",
    "Twitter/X",
    "Threads",
    "Bluesky",
    "Telegram",
    "LinkedIn",
    "Web",
]

LeadStatus = Literal["to_be_outreached", "outreached", "followed_up", "replied"]

LEAD_STATUSES: tuple[LeadStatus, ...] = (
    "to_be_outreached",
    "outreached",
    "followed_up",
    "replied",
)

CandidateSource = Literal["citation", "text"]

DEFAULT_NICHE = "Business"
DEFAULT_LOCATION = "Global"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _clean_phrases(values: list[str]) -> list[str]:
    """Strip phrases, drop blanks and case-insensitive duplicates, keep order."""
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        phrase = value.strip()
        if not phrase or phrase.lower() in seen:
            continue
        seen.add(phrase.lower())
        out.append(phrase)
    return out


# =============================================================================
# PROFILE (saved search configuration)
# =============================================================================


class ProfileInput(BaseModel):
    """User-supplied profile fields. Rejects a profile with no usable keywords."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Display label")
    keywords: list[str] = Field(..., min_length=1, description="Inclusion phrases")
    exclude_keywords: list[str] = Field(default_factory=list, description="Exclusion phrases")
    niche: str = Field(default=DEFAULT_NICHE)
    location: str = Field(default=DEFAULT_LOCATION)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("keywords")
    @classmethod
    def _clean_keywords(cls, v: list[str]) -> list[str]:
        cleaned = _clean_phrases(v)
        if not cleaned:
            raise ValueError("at least one keyword is required")
        return cleaned

    @field_validator("exclude_keywords")
    @classmethod
    def _clean_excludes(cls, v: list[str]) -> list[str]:
        return _clean_phrases(v)

    @field_validator("niche")
    @classmethod
    def _default_niche(cls, v: str) -> str:
        return v.strip() or DEFAULT_NICHE

    @field_validator("location")
    @classmethod
    def _default_location(cls, v: str) -> str:
        return v.strip() or DEFAULT_LOCATION


class Profile(ProfileInput):
    """A saved keyword/niche/location search configuration."""

    id: str = Field(..., min_length=1, description="Stable identifier")
    created_at: datetime = Field(default_factory=_utcnow)

    def has_location(self) -> bool:
        """True when the profile targets a concrete place rather than the global sentinel."""
        return bool(self.location) and self.location.lower() != DEFAULT_LOCATION.lower()


# =============================================================================
# SEARCH RESPONSE (grounded generative search)
# =============================================================================


class Citation(BaseModel):
    """A grounding citation returned alongside generated text."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    uri: str | None = None


class SearchResponse(BaseModel):
    """Text plus grounding citations from one search call."""

    model_config = ConfigDict(extra="forbid")

    text: str = ""
    citations: list[Citation] = Field(default_factory=list)


# =============================================================================
# CANDIDATE (extractor output, pre-assembly)
# =============================================================================


class Candidate(BaseModel):
    """A deduplicated, not-yet-finalized lead or group."""

    model_config = ConfigDict(extra="forbid")

    url: str = Field(..., min_length=1)
    platform: Platform = "Web"
    title: str = ""
    author: str | None = None
    snippet: str = ""
    source: CandidateSource = "citation"


# =============================================================================
# LEAD
# =============================================================================


class Lead(BaseModel):
    """A discovered candidate opportunity tied to a normalized URL."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1, description="Normalized URL (dedup key)")
    platform: Platform = "Web"
    title: str = ""
    snippet: str = ""
    author: str | None = None
    relevance_score: int = Field(default=85, ge=0, le=100)
    detected_at: datetime = Field(default_factory=_utcnow)
    file_id: str | None = Field(default=None, description="Owning profile id")
    status: LeadStatus = "to_be_outreached"


# =============================================================================
# GROUP
# =============================================================================


class Group(BaseModel):
    """A discovered online community usable as a scan scope restriction."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    niche: str = DEFAULT_NICHE
    member_count: str | None = None


# =============================================================================
# PLATFORM CONNECTION
# =============================================================================


class PlatformConnection(BaseModel):
    """A user-linked platform account (e.g. a Nextdoor neighborhood feed)."""

    model_config = ConfigDict(extra="forbid")

    platform: Platform
    account_name: str | None = None
    neighborhood_url: str | None = None
    connected_at: datetime = Field(default_factory=_utcnow)


# =============================================================================
# RESULTS
# =============================================================================


class ScanResult(BaseModel):
    """Result of scanning one profile."""

    model_config = ConfigDict(extra="forbid")

    profile_id: str
    prompt: str = ""
    leads: list[Lead] = Field(default_factory=list)
    citations: list[Citation] = Field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class GroupResult(BaseModel):
    """Result of a community discovery call."""

    model_config = ConfigDict(extra="forbid")

    profile_id: str
    groups: list[Group] = Field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
