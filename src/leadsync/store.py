"""
LeadSync persistence - profiles, leads and groups in an opaque blob store.

The store is a plain string key/value interface. Each collection is one JSON
array under its own key. Loading never raises: a missing key means first
run, and malformed JSON or invalid records are logged and skipped.
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from .assembler import new_id
from .dedupe import dedupe_leads, merge_leads
from .logger import ProgressLogger
from .models import Group, Lead, LeadStatus, PlatformConnection, Profile, ProfileInput
from .urls import normalize_url, url_key

PROFILES_KEY = "lead_sync_files"
LEADS_KEY = "lead_sync_leads"
GROUPS_KEY = "lead_sync_groups"
CONNECTIONS_KEY = "lead_sync_connections"

DEFAULT_STORE_PATH = Path.home() / ".leadsync" / "store.json"

# camelCase keys written by the browser dashboard -> model field names
LEGACY_FIELDS = {
    "excludeKeywords": "exclude_keywords",
    "createdAt": "created_at",
    "relevanceScore": "relevance_score",
    "detectedAt": "detected_at",
    "fileId": "file_id",
    "memberCount": "member_count",
    "accountName": "account_name",
    "neighborhoodUrl": "neighborhood_url",
    "lastSyncedAt": "connected_at",
}


class NotFoundError(KeyError):
    """Raised when a profile or lead id is unknown."""


# =============================================================================
# BLOB STORES
# =============================================================================


class BlobStore(ABC):
    """Opaque string key/value store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a string under key."""


class MemoryBlobStore(BlobStore):
    """In-process store for tests and one-off runs."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileBlobStore(BlobStore):
    """All keys in one JSON object file.

    A corrupt file (bad JSON, bad encoding, not an object) reads as empty and
    is logged. Before the next write it is moved aside to `<name>.corrupt`
    so its contents are never silently overwritten.
    """

    def __init__(self, path: Path, logger: ProgressLogger | None = None):
        self.path = path
        self.logger = logger or ProgressLogger(quiet=True)
        self._warned = False

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + ".corrupt")

    def _load_file(self) -> dict[str, str]:
        """Parse the store file. Raises ValueError if it is unusable."""
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("top-level value is not an object")
        return data

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return self._load_file()
        except (OSError, ValueError) as e:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            if not self._warned:
                self.logger.warning(f"Store file {self.path} is unreadable ({e}); starting empty")
                self._warned = True
            return {}

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data: dict[str, str] = {}
        if self.path.exists():
            try:
                data = self._load_file()
            except (OSError, ValueError) as e:
                self.path.replace(self.corrupt_path)
                self.logger.warning(
                    f"Store file {self.path} is unreadable ({e}); moved to {self.corrupt_path}"
                )
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.path)


def get_store_path() -> Path:
    """Store file location (LEADSYNC_STORE overrides the default)."""
    env = os.getenv("LEADSYNC_STORE")
    return Path(env).expanduser() if env else DEFAULT_STORE_PATH


# =============================================================================
# MIGRATION
# =============================================================================


def migrate_record(raw: dict[str, Any], model: type[BaseModel]) -> dict[str, Any]:
    """Rename legacy keys, drop unknown ones and default missing collections."""
    data: dict[str, Any] = {}
    for key, value in raw.items():
        name = LEGACY_FIELDS.get(key, key)
        if name in model.model_fields and name not in data:
            data[name] = value
    for name, field in model.model_fields.items():
        if data.get(name) is None and field.annotation in (list[str],) and not field.is_required():
            data[name] = []
    return data


# =============================================================================
# WORKSPACE
# =============================================================================


class Workspace:
    """Profiles, leads, groups and connections on top of a BlobStore."""

    def __init__(self, store: BlobStore, logger: ProgressLogger | None = None):
        self.store = store
        self.logger = logger or ProgressLogger(quiet=True)

    # -- loading / saving ----------------------------------------------------

    def _load(self, key: str, model: type[BaseModel]) -> list[Any]:
        raw = self.store.get(key)
        if raw is None:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.warning(f"Stored {key} is not valid JSON ({e}); starting empty")
            return []
        if not isinstance(items, list):
            self.logger.warning(f"Stored {key} is not a list; starting empty")
            return []

        records = []
        for item in items:
            if not isinstance(item, dict):
                self.logger.warning(f"Skipping malformed {key} entry: {item!r:.60}")
                continue
            try:
                records.append(model.model_validate(migrate_record(item, model)))
            except ValidationError as e:
                self.logger.warning(f"Skipping invalid {key} entry: {e.error_count()} errors")
        return records

    def _save(self, key: str, records: list[BaseModel]) -> None:
        self.store.set(key, json.dumps([r.model_dump(mode="json") for r in records]))

    def load_profiles(self) -> list[Profile]:
        return self._load(PROFILES_KEY, Profile)

    def load_leads(self) -> list[Lead]:
        return dedupe_leads(self._load(LEADS_KEY, Lead))

    def load_groups(self) -> list[Group]:
        return self._load(GROUPS_KEY, Group)

    def load_connections(self) -> list[PlatformConnection]:
        return self._load(CONNECTIONS_KEY, PlatformConnection)

    # -- profiles ------------------------------------------------------------

    def get_profile(self, ref: str) -> Profile:
        """Find a profile by id, or by name (case-insensitive)."""
        profiles = self.load_profiles()
        for profile in profiles:
            if profile.id == ref:
                return profile
        for profile in profiles:
            if profile.name.lower() == ref.lower():
                return profile
        raise NotFoundError(f"Profile not found: {ref}")

    def create_profile(self, data: ProfileInput) -> Profile:
        """Persist a new profile from validated input."""
        profile = Profile(id=new_id("profile"), **data.model_dump())
        profiles = self.load_profiles()
        profiles.append(profile)
        self._save(PROFILES_KEY, profiles)
        return profile

    def update_profile(self, profile_id: str, data: ProfileInput) -> Profile:
        """Replace a profile's editable fields; id and created_at are kept."""
        profiles = self.load_profiles()
        for i, profile in enumerate(profiles):
            if profile.id == profile_id:
                updated = Profile(id=profile.id, created_at=profile.created_at, **data.model_dump())
                profiles[i] = updated
                self._save(PROFILES_KEY, profiles)
                return updated
        raise NotFoundError(f"Profile not found: {profile_id}")

    def delete_profile(self, profile_id: str) -> int:
        """Delete a profile and every lead that references it.

        Returns:
            Number of leads removed with it.
        """
        profiles = self.load_profiles()
        remaining = [p for p in profiles if p.id != profile_id]
        if len(remaining) == len(profiles):
            raise NotFoundError(f"Profile not found: {profile_id}")
        leads = self.load_leads()
        kept = [lead for lead in leads if lead.file_id != profile_id]
        self._save(PROFILES_KEY, remaining)
        self._save(LEADS_KEY, kept)
        return len(leads) - len(kept)

    # -- leads ---------------------------------------------------------------

    def leads_for_profile(self, profile_id: str) -> list[Lead]:
        return [lead for lead in self.load_leads() if lead.file_id == profile_id]

    def add_leads(self, leads: list[Lead]) -> list[Lead]:
        """Merge scanned leads into the stored set. Returns the ones added."""
        merged, added = merge_leads(self.load_leads(), leads)
        added_ids = {id(lead) for lead in added}
        for lead in leads:
            if id(lead) not in added_ids:
                self.logger.skip("duplicate", lead.url)
        self.logger.deduped(len(leads), len(added))
        self._save(LEADS_KEY, merged)
        return added

    def set_lead_status(self, lead_id: str, status: LeadStatus) -> Lead:
        """Move a lead to any status."""
        leads = self.load_leads()
        for i, lead in enumerate(leads):
            if lead.id == lead_id:
                updated = Lead.model_validate({**lead.model_dump(), "status": status})
                leads[i] = updated
                self._save(LEADS_KEY, leads)
                return updated
        raise NotFoundError(f"Lead not found: {lead_id}")

    # -- groups & connections ------------------------------------------------

    def save_groups(self, groups: list[Group]) -> list[Group]:
        """Add discovered groups, skipping URLs already stored. Returns the ones added."""
        stored = self.load_groups()
        seen = {url_key(g.url) for g in stored}
        added = []
        for group in groups:
            key = url_key(group.url)
            if key in seen:
                continue
            seen.add(key)
            added.append(group)
        self._save(GROUPS_KEY, stored + added)
        return added

    def connect_platform(self, connection: PlatformConnection) -> PlatformConnection:
        """Store a platform connection, replacing any previous one for that platform."""
        if connection.neighborhood_url:
            connection = connection.model_copy(
                update={"neighborhood_url": normalize_url(connection.neighborhood_url)}
            )
        others = [c for c in self.load_connections() if c.platform != connection.platform]
        self._save(CONNECTIONS_KEY, [*others, connection])
        return connection
