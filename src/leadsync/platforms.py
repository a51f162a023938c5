"""
LeadSync platform classifier - one labeling policy for every call site.
"""

from .models import Platform

# Ordered (label, markers): first match wins, so more specific markers come first.
# Threads precedes Instagram and "//t.me/" precedes the twitter/x markers.
PLATFORM_MARKERS: list[tuple[Platform, tuple[str, ...]]] = [
    ("Facebook", ("facebook.com", "fb.com", "fb.me")),
    ("Reddit", ("reddit.com", "redd.it")),
    ("Quora", ("quora.com",)),
    ("Threads", ("threads.net", "threads.com")),
    ("Instagram", ("instagram.com", "instagr.am")),
    ("Nextdoor", ("nextdoor.com", "nextdoor.co.uk")),
    ("Bluesky", ("bsky.app", "bsky.social")),
    ("Telegram", ("//t.me/", "telegram.me", "telegram.org")),
    ("LinkedIn", ("linkedin.com", "lnkd.in")),
    ("Twitter/X", ("twitter.com", "//x.com", ".x.com", "//t.co/")),
]

# Domain used in site: restrictions for each social platform
PLATFORM_SITES: dict[Platform, str] = {
    "Facebook": "facebook.com",
    "Reddit": "reddit.com",
    "Quora": "quora.com",
    "Instagram": "instagram.com",
    "Nextdoor": "nextdoor.com",
    "Twitter/X": "x.com",
    "Threads": "threads.net",
    "Bluesky": "bsky.app",
    "Telegram": "t.me",
    "LinkedIn": "linkedin.com",
}

SUPPORTED_PLATFORMS: tuple[Platform, ...] = tuple(PLATFORM_SITES)

ALL_PLATFORMS: tuple[Platform, ...] = (*SUPPORTED_PLATFORMS, "Web")


def classify_platform(url: str) -> Platform:
    """Map a URL (or any string) to a platform label. Never raises."""
    if not isinstance(url, str) or not url:
        return "Web"
    lowered = url.lower()
    if "://" not in lowered:
        lowered = f"//{lowered}"
    for label, markers in PLATFORM_MARKERS:
        if any(marker in lowered for marker in markers):
            return label
    return "Web"


def parse_platform(value: str) -> Platform:
    """Resolve a user-typed platform name (case-insensitive, 'x'/'twitter' aliases)."""
    lowered = value.strip().lower()
    if lowered in ("x", "twitter", "twitter/x"):
        return "Twitter/X"
    for label in ALL_PLATFORMS:
        if label.lower() == lowered:
            return label
    raise ValueError(f"Unknown platform: {value}")
