"""
LeadSync URL normalizer - stable dedup keys for AI-reported URLs.

URLs arrive from generated prose and citation metadata, so they carry
trailing punctuation, mobile/alternate hosts and share-tracking parameters.
normalize_url() canonicalizes all of that and never raises.
"""

import re
from urllib.parse import unquote_plus, urlsplit, urlunsplit

# Characters that leak onto the end of URLs written inside sentences
TRAILING_PUNCTUATION = ".,)]!?;:"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")

# =============================================================================
# HOST ALIASES (alternate/mobile host -> canonical host)
# =============================================================================

HOST_ALIASES: dict[str, str] = {
    # Facebook
    "facebook.com": "www.facebook.com",
    "m.facebook.com": "www.facebook.com",
    "web.facebook.com": "www.facebook.com",
    "mbasic.facebook.com": "www.facebook.com",
    "touch.facebook.com": "www.facebook.com",
    "fb.com": "www.facebook.com",
    "www.fb.com": "www.facebook.com",
    # Reddit
    "reddit.com": "www.reddit.com",
    "old.reddit.com": "www.reddit.com",
    "new.reddit.com": "www.reddit.com",
    "np.reddit.com": "www.reddit.com",
    "m.reddit.com": "www.reddit.com",
    "i.reddit.com": "www.reddit.com",
    # Twitter / X
    "www.twitter.com": "twitter.com",
    "mobile.twitter.com": "twitter.com",
    "m.twitter.com": "twitter.com",
    "www.x.com": "x.com",
    "mobile.x.com": "x.com",
    # Others
    "linkedin.com": "www.linkedin.com",
    "m.linkedin.com": "www.linkedin.com",
    "instagram.com": "www.instagram.com",
    "m.instagram.com": "www.instagram.com",
    "quora.com": "www.quora.com",
    "m.quora.com": "www.quora.com",
    "nextdoor.com": "www.nextdoor.com",
    "threads.net": "www.threads.net",
    "threads.com": "www.threads.net",
    "www.threads.com": "www.threads.net",
    "www.bsky.app": "bsky.app",
    "www.t.me": "t.me",
    "telegram.me": "t.me",
}

CANONICAL_HOSTS: set[str] = set(HOST_ALIASES.values())

# =============================================================================
# TRACKING PARAMETERS (explicit deny-list; extend in place)
# =============================================================================

TRACKING_PARAMS: set[str] = {
    "fbclid",
    "gclid",
    "dclid",
    "msclkid",
    "igshid",
    "igsh",
    "mibextid",
    "ref",
    "ref_src",
    "ref_url",
    "rdt",
    "share_id",
    "si",
    "trk",
    "trackingid",
    "__cft__",
    "__tn__",
    "_rdr",
}

TRACKING_PARAM_PREFIXES: set[str] = {"utm_"}

# Parameters that are only tracking on specific hosts
HOST_TRACKING_PARAMS: dict[str, set[str]] = {
    "twitter.com": {"s", "t"},
    "x.com": {"s", "t"},
}


def _strip_trailing(raw: str) -> str:
    """Trim whitespace and trailing sentence punctuation until stable."""
    value = raw
    while True:
        trimmed = value.strip().rstrip(TRAILING_PUNCTUATION)
        if trimmed == value:
            return value
        value = trimmed


def _is_tracking_param(name: str, host: str) -> bool:
    key = name.lower()
    if key in TRACKING_PARAMS:
        return True
    if any(key.startswith(prefix) for prefix in TRACKING_PARAM_PREFIXES):
        return True
    return key in HOST_TRACKING_PARAMS.get(host, set())


def _clean_query(query: str, host: str) -> str:
    """Drop tracking parameters, keeping the remaining pairs verbatim and in order."""
    if not query:
        return ""
    kept = []
    for pair in query.split("&"):
        if not pair:
            continue
        name = unquote_plus(pair.split("=", 1)[0])
        if not _is_tracking_param(name, host):
            kept.append(pair)
    return "&".join(kept)


def _normalize_once(raw: str) -> str:
    stripped = _strip_trailing(raw or "")
    if not stripped:
        return ""

    candidate = stripped if _SCHEME_RE.match(stripped) else f"https://{stripped}"
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return stripped
    if not host:
        return stripped

    host = HOST_ALIASES.get(host, host)
    scheme = parts.scheme.lower()
    if host in CANONICAL_HOSTS:
        scheme = "https"

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and not (
        (scheme == "https" and port == 443) or (scheme == "http" and port == 80)
    ):
        netloc = f"{netloc}:{port}"

    path = parts.path.rstrip("/")
    query = _clean_query(parts.query, host)
    return _strip_trailing(urlunsplit((scheme, netloc, path, query, "")))


def normalize_url(raw: str) -> str:
    """Canonicalize a raw URL string into a stable form.

    Trims whitespace and trailing punctuation, adds https:// when no scheme is
    present, collapses alternate platform hosts, removes deny-listed tracking
    parameters, drops the fragment and any trailing slash. Unparseable input
    comes back punctuation-stripped rather than raising.
    """
    current = _normalize_once(raw)
    # Dropping a parameter can expose new trailing punctuation; converges in a pass or two.
    for _ in range(3):
        again = _normalize_once(current)
        if again == current:
            break
        current = again
    return current


def url_key(raw: str) -> str:
    """Case-insensitive dedup key for a URL."""
    return normalize_url(raw).lower()


def url_host(url: str) -> str:
    """Lowercased host of a URL, or empty string when it has none."""
    try:
        return (urlsplit(normalize_url(url)).hostname or "").lower()
    except ValueError:
        return ""


def site_restriction(url: str) -> str:
    """host + path of a normalized URL, suitable for a site: search operator."""
    normalized = normalize_url(url)
    try:
        parts = urlsplit(normalized)
    except ValueError:
        return _SCHEME_RE.sub("", normalized)
    if not parts.netloc:
        return _SCHEME_RE.sub("", normalized)
    return f"{parts.netloc}{parts.path}"
