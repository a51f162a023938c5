"""
LeadSync extractor - turns a grounded search answer into candidate records.

Key design:
- Two passes into one map keyed by url_key(): citations first, then URLs
  found in the free text
- First write wins, so a citation always beats a text match for the same URL
- Fail-soft: malformed citations are skipped, unparseable URLs are kept
- Deterministic for fixed (text, citations) input; no sorting here
"""

import re
from typing import Any

from .models import Candidate, Citation, Platform
from .platforms import SUPPORTED_PLATFORMS, classify_platform
from .urls import normalize_url, url_key

# Titles split on these; the first segment is the author when it's short
TITLE_SEPARATORS_RE = re.compile(r"\s[-|–—]\s|\s?\|\s?|\s-\s?")
AUTHOR_MAX_LEN = 40

SNIPPET_MAX_LEN = 280

URL_RE = re.compile(r"""(?:https?://|www\.)[^\s<>"'`\[\]()]+""", re.IGNORECASE)

# Markdown emphasis and sentence punctuation the URL regex can swallow
_URL_TAIL_RE = re.compile(r"[*_.,!?;:]+$")

_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+|\n+")

# Path markers of community pages (groups, subreddits, channels)
GROUP_PATH_MARKERS = (
    "/groups/",
    "/r/",
    "/communities/",
    "/community/",
    "/c/",
    "//t.me/",
    "nextdoor.com/neighborhood/",
    "/spaces/",
)


def derive_author(title: str | None) -> str | None:
    """Best-effort author/name from a citation title like 'Jane D. - Reddit'."""
    if not title:
        return None
    first = TITLE_SEPARATORS_RE.split(title.strip(), maxsplit=1)[0].strip()
    if not first or first == title.strip() or len(first) >= AUTHOR_MAX_LEN:
        return None
    return first


def citations_from_chunks(chunks: Any) -> list[Citation]:
    """Read citations out of raw grounding chunks ([{web: {uri, title}}]).

    Anything that isn't shaped like a chunk is skipped.
    """
    citations: list[Citation] = []
    if not isinstance(chunks, list | tuple):
        return citations
    for chunk in chunks:
        web = chunk.get("web") if isinstance(chunk, dict) else getattr(chunk, "web", None)
        if web is None:
            continue
        if isinstance(web, dict):
            uri, title = web.get("uri"), web.get("title")
        else:
            uri, title = getattr(web, "uri", None), getattr(web, "title", None)
        if not isinstance(uri, str) or not uri.strip():
            continue
        citations.append(Citation(uri=uri, title=title if isinstance(title, str) else None))
    return citations


def _surrounding_sentence(text: str, start: int, end: int) -> str:
    """The sentence/line around a match, with the URL itself removed."""
    left = max(
        (m.end() for m in _SENTENCE_END_RE.finditer(text, 0, start)),
        default=0,
    )
    right_match = _SENTENCE_END_RE.search(text, end)
    right = right_match.start() if right_match else len(text)
    sentence = (text[left:start] + text[end:right]).strip(" \t-*:•")
    sentence = " ".join(sentence.split())
    if len(sentence) > SNIPPET_MAX_LEN:
        sentence = sentence[: SNIPPET_MAX_LEN - 3].rstrip() + "..."
    return sentence


def find_urls(text: str) -> list[tuple[str, int, int]]:
    """All URL-looking substrings in text as (url, start, end)."""
    found = []
    for match in URL_RE.finditer(text or ""):
        url = _URL_TAIL_RE.sub("", match.group(0))
        if url:
            found.append((url, match.start(), match.start() + len(url)))
    return found


class CandidateMap:
    """Insertion-ordered candidate map keyed by url_key(); first write wins."""

    def __init__(self) -> None:
        self._by_key: dict[str, Candidate] = {}

    def add(self, candidate: Candidate) -> bool:
        """Insert unless the key exists. Returns True if inserted."""
        key = url_key(candidate.url)
        if key in self._by_key:
            return False
        self._by_key[key] = candidate
        return True

    def values(self) -> list[Candidate]:
        return list(self._by_key.values())


def _citation_candidate(citation: Citation) -> Candidate | None:
    uri = (citation.uri or "").strip()
    if not uri:
        return None
    url = normalize_url(uri)
    if not url:
        return None
    platform = classify_platform(url)
    title = (citation.title or "").strip()
    return Candidate(
        url=url,
        platform=platform,
        title=title or f"Potential lead from {platform}",
        author=derive_author(title),
        snippet=title,
        source="citation",
    )


def extract_candidates(
    text: str,
    citations: list[Citation],
    platforms: list[Platform] | None = None,
) -> list[Candidate]:
    """Extract deduplicated candidates from a grounded search answer.

    Args:
        text: The generated free text.
        citations: Grounding citations returned with the text.
        platforms: Platforms the scan is scoped to; text matches outside them
            are dropped. None means every supported social platform.
            Citations are never filtered.

    Returns:
        Candidates in insertion order: citations first, then text matches.
    """
    found = CandidateMap()

    # Phase A: citations
    for citation in citations or []:
        if not isinstance(citation, Citation):
            continue
        candidate = _citation_candidate(citation)
        if candidate is not None:
            found.add(candidate)

    # Phase B: URLs in free text
    allowed = set(platforms) if platforms else set(SUPPORTED_PLATFORMS)
    text = text or ""
    for raw, start, end in find_urls(text):
        url = normalize_url(raw)
        if not url:
            continue
        platform = classify_platform(url)
        if platform not in allowed:
            continue
        snippet = _surrounding_sentence(text, start, end)
        found.add(
            Candidate(
                url=url,
                platform=platform,
                title=snippet[:80] or f"Potential lead from {platform}",
                snippet=snippet,
                source="text",
            )
        )

    return found.values()


def is_group_url(url: str) -> bool:
    """True for URLs that point at a community rather than a single post."""
    lowered = url.lower()
    if not any(marker in lowered for marker in GROUP_PATH_MARKERS):
        return False
    # A post inside a group is not the group itself
    return not any(part in lowered for part in ("/posts/", "/permalink/", "/comments/"))


def extract_groups(
    text: str,
    citations: list[Citation],
    platforms: list[Platform] | None = None,
) -> list[Candidate]:
    """Like extract_candidates(), restricted to community URLs."""
    return [c for c in extract_candidates(text, citations, platforms) if is_group_url(c.url)]
