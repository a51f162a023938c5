"""Tests for the prompt builders."""

from leadsync.models import Group, Lead
from leadsync.prompts import (
    build_group_prompt,
    build_keyword_query,
    build_outreach_prompt,
    build_scan_prompt,
    build_scope,
)


def _query_line(prompt: str) -> str:
    return next(line for line in prompt.splitlines() if line.startswith("Query:"))


class TestKeywordQuery:
    """Tests for build_keyword_query."""

    def test_single_keyword(self) -> None:
        assert build_keyword_query(["need a plumber"], []) == '"need a plumber"'

    def test_disjunction_and_exclusions(self) -> None:
        query = build_keyword_query(["a", "b"], ["x", "y"])
        assert query == '("a" OR "b") -"x" -"y"'

    def test_embedded_quotes_are_neutralized(self) -> None:
        assert build_keyword_query(['say "hi"'], []) == "\"say 'hi'\""


class TestScope:
    """Tests for build_scope."""

    def test_all_platforms(self) -> None:
        scope = build_scope()
        assert "site:facebook.com" in scope
        assert "site:reddit.com" in scope
        assert "site:linkedin.com" in scope
        assert " OR " in scope

    def test_single_platform(self) -> None:
        assert build_scope("Reddit") == "site:reddit.com"

    def test_groups_take_precedence(self) -> None:
        groups = [
            Group(id="g1", name="Austin Homes", url="https://m.facebook.com/groups/austinhomes/"),
            Group(id="g2", name="r/Austin", url="https://reddit.com/r/Austin"),
        ]
        scope = build_scope("Reddit", groups)
        assert scope == "site:www.facebook.com/groups/austinhomes OR site:www.reddit.com/r/Austin"


class TestScanPrompt:
    """Tests for build_scan_prompt."""

    def test_keywords_and_exclusions(self, sample_profile) -> None:
        prompt = build_scan_prompt(sample_profile)

        assert '"need a plumber"' in prompt
        assert '-"job"' in prompt
        positive = _query_line(prompt).split(" -", 1)[0]
        assert "job" not in positive

    def test_niche_location_and_recency(self, sample_profile) -> None:
        prompt = build_scan_prompt(sample_profile, lookback_days=14)

        assert "Niche: Home Services" in prompt
        assert "Target location: Austin, TX" in prompt
        assert "last 14 days" in prompt

    def test_default_location(self, global_profile) -> None:
        prompt = build_scan_prompt(global_profile)
        assert "Target location: Global" in prompt

    def test_no_exclusions_line_when_empty(self, sample_profile) -> None:
        profile = sample_profile.model_copy(update={"exclude_keywords": []})
        prompt = build_scan_prompt(profile)
        assert "Exclude any post" not in prompt
        assert " -" not in _query_line(prompt)

    def test_platform_scope(self, sample_profile) -> None:
        prompt = build_scan_prompt(sample_profile, platform="Reddit")
        assert "Scope: site:reddit.com\n" in prompt

    def test_deterministic(self, sample_profile) -> None:
        assert build_scan_prompt(sample_profile) == build_scan_prompt(sample_profile)


class TestGroupPrompt:
    """Tests for build_group_prompt."""

    def test_facebook_groups(self, sample_profile) -> None:
        prompt = build_group_prompt(sample_profile)
        assert "site:facebook.com/groups" in prompt
        assert "Austin, TX" in prompt
        assert "Home Services" in prompt

    def test_reddit_subreddits(self, sample_profile) -> None:
        prompt = build_group_prompt(sample_profile, platform="Reddit")
        assert "site:reddit.com/r" in prompt


class TestOutreachPrompt:
    """Tests for build_outreach_prompt."""

    def test_includes_post(self, sample_lead: Lead) -> None:
        prompt = build_outreach_prompt(sample_lead)
        assert "Platform: Reddit" in prompt
        assert "Need a plumber in Austin" in prompt
        assert sample_lead.snippet in prompt
