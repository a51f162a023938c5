"""
LeadSync profile files - share and version profiles as YAML.

A profile file looks like:

    name: Austin Plumbing
    keywords: [need a plumber, plumber recommendation]
    exclude_keywords: [job]
    niche: Home Services
    location: Austin, TX
"""

from pathlib import Path

import yaml

from .models import Profile, ProfileInput


def load_profile_file(path: Path) -> ProfileInput:
    """Load and validate a profile definition.

    Args:
        path: YAML file to read.

    Returns:
        The validated input (not yet saved).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file isn't a YAML mapping.
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Profile file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Profile file must contain a mapping: {path}")

    # Accept a comma-separated string as well as a list
    for field in ("keywords", "exclude_keywords"):
        if isinstance(data.get(field), str):
            data[field] = split_phrases(data[field])
    if data.get("exclude_keywords") is None:
        data.pop("exclude_keywords", None)

    return ProfileInput(**data)


def dump_profile(profile: Profile | ProfileInput, path: Path) -> Path:
    """Write a profile's editable fields to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = ProfileInput.model_validate(
        profile.model_dump(include=set(ProfileInput.model_fields))
    ).model_dump()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return path


def split_phrases(value: str) -> list[str]:
    """Split comma-separated input into trimmed, non-empty phrases."""
    return [p.strip() for p in value.split(",") if p.strip()]
