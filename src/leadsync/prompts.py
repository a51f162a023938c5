"""
LeadSync prompt builder - deterministic search directives from profiles.

All builders are pure: identical inputs give byte-identical prompts, with no
timestamps or randomness embedded.
"""

import os

from .models import Group, Lead, Platform, Profile
from .platforms import PLATFORM_SITES, SUPPORTED_PLATFORMS
from .urls import site_restriction

# Recency window for scans, in days (override with LEADSYNC_LOOKBACK_DAYS)
DEFAULT_LOOKBACK_DAYS = 30
LOOKBACK_DAYS = int(os.getenv("LEADSYNC_LOOKBACK_DAYS", str(DEFAULT_LOOKBACK_DAYS)))

SCAN_PROMPT = """Find organic leads: recent public social media posts and discussions where people are looking for help related to this business profile.

=== BUSINESS PROFILE ===
Niche: {niche}
Target location: {location}

=== SEARCH ===
Query: {query}
Scope: {scope}
Recency: only posts published in the last {days} days.

=== INSTRUCTIONS ===
Focus on people asking for recommendations, expressing pain points, or seeking services related to the query.
{exclusions}For each post found, give the direct URL to the post, the author's name if visible, and a one-sentence summary of what they need.
"""

GROUP_PROMPT = """Find active {platform} communities where people in {location} discuss {niche}.

Scope: {scope}
Topics: {topics}

List 5-10 communities. For each one give the community name, its direct URL, and the approximate member count if shown.
"""

OUTREACH_PROMPT = """Analyze this potential customer post and suggest a high-converting, personalized response.

Platform: {platform}
Title: {title}
Post: "{snippet}"

Reply with a short outreach strategy (2-3 sentences) followed by a suggested first message.
"""


def _quote(phrase: str) -> str:
    return '"{}"'.format(phrase.replace('"', "'"))


def build_keyword_query(keywords: list[str], exclude_keywords: list[str]) -> str:
    """Positive keyword disjunction followed by negated exclusions."""
    positive = " OR ".join(_quote(k) for k in keywords)
    if len(keywords) > 1:
        positive = f"({positive})"
    negative = " ".join(f"-{_quote(k)}" for k in exclude_keywords)
    return f"{positive} {negative}" if negative else positive


def build_scope(platform: Platform | None = None, groups: list[Group] | None = None) -> str:
    """site: restriction for groups, one platform, or every supported platform."""
    if groups:
        sites = [f"site:{site_restriction(g.url)}" for g in groups if g.url]
        if sites:
            return " OR ".join(sites)
    if platform and platform in PLATFORM_SITES:
        return f"site:{PLATFORM_SITES[platform]}"
    return " OR ".join(f"site:{PLATFORM_SITES[p]}" for p in SUPPORTED_PLATFORMS)


def build_scan_prompt(
    profile: Profile,
    platform: Platform | None = None,
    groups: list[Group] | None = None,
    lookback_days: int = LOOKBACK_DAYS,
) -> str:
    """Assemble the lead-scan directive for a profile.

    Args:
        profile: The saved search configuration.
        platform: Restrict the scan to one platform's site.
        groups: Restrict the scan to these communities (takes precedence over platform).
        lookback_days: Recency window.

    Returns:
        The prompt string.
    """
    exclusions = ""
    if profile.exclude_keywords:
        excluded = ", ".join(_quote(k) for k in profile.exclude_keywords)
        exclusions = f"Exclude any post matching these terms: {excluded}.\n"

    return SCAN_PROMPT.format(
        niche=profile.niche,
        location=profile.location,
        query=build_keyword_query(profile.keywords, profile.exclude_keywords),
        scope=build_scope(platform, groups),
        days=lookback_days,
        exclusions=exclusions,
    )


def build_group_prompt(profile: Profile, platform: Platform = "Facebook") -> str:
    """Community discovery directive for a profile's niche and location."""
    if platform == "Facebook":
        scope = "site:facebook.com/groups"
    elif platform == "Reddit":
        scope = "site:reddit.com/r"
    else:
        scope = build_scope(platform)
    return GROUP_PROMPT.format(
        platform=platform,
        location=profile.location,
        niche=profile.niche,
        scope=scope,
        topics=", ".join(profile.keywords),
    )


def build_outreach_prompt(lead: Lead) -> str:
    """Outreach-strategy request for a single lead."""
    return OUTREACH_PROMPT.format(
        platform=lead.platform,
        title=lead.title or "Untitled",
        snippet=lead.snippet or lead.title,
    )
