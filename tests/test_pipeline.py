"""Tests for the scan pipeline."""

import pytest

from leadsync.logger import ProgressLogger
from leadsync.models import Group, Lead, Profile, SearchResponse
from leadsync.pipeline import ANALYSIS_FALLBACK, LOCATION_REQUIRED, NO_KEYWORDS, Scanner
from leadsync.search import StaticGroundedSearch
from leadsync.urls import url_key


def _scanner(search: StaticGroundedSearch) -> Scanner:
    return Scanner(search, scorer=lambda c: 80, logger=ProgressLogger(quiet=True))


class TestScan:
    """Tests for Scanner.scan."""

    def test_scan_builds_leads(self, static_search: StaticGroundedSearch, sample_profile: Profile) -> None:
        result = _scanner(static_search).scan(sample_profile)

        assert result.ok
        assert [lead.url for lead in result.leads] == [
            "https://www.reddit.com/r/Austin/comments/abc",
            "https://www.nextdoor.com/p/xyz",
            "https://www.facebook.com/groups/austinhomes/posts/42",
        ]
        assert all(lead.file_id == "profile-plumbing" for lead in result.leads)
        assert all(lead.status == "to_be_outreached" for lead in result.leads)
        assert all(lead.relevance_score == 80 for lead in result.leads)
        assert len(result.citations) == 2
        assert static_search.prompts == [result.prompt]

    def test_prompt_carries_keywords(self, static_search: StaticGroundedSearch, sample_profile: Profile) -> None:
        _scanner(static_search).scan(sample_profile)
        prompt = static_search.prompts[0]
        assert '"need a plumber"' in prompt
        assert '-"job"' in prompt

    def test_unique_urls(self, sample_profile: Profile) -> None:
        response = SearchResponse(
            text="https://www.reddit.com/r/a/comments/1 https://reddit.com/r/a/comments/1/",
        )
        result = _scanner(StaticGroundedSearch([response])).scan(sample_profile)
        assert len({url_key(lead.url) for lead in result.leads}) == len(result.leads) == 1

    def test_platform_scope(self, static_search: StaticGroundedSearch, sample_profile: Profile) -> None:
        result = _scanner(static_search).scan(sample_profile, platform="Reddit")

        assert "Scope: site:reddit.com" in result.prompt
        # Citations are kept; the Facebook text match is outside the scope
        assert [lead.platform for lead in result.leads] == ["Reddit", "Nextdoor"]

    def test_group_scope(self, static_search: StaticGroundedSearch, sample_profile: Profile) -> None:
        groups = [Group(id="g1", name="Austin Homes", url="https://www.facebook.com/groups/austinhomes")]
        result = _scanner(static_search).scan(sample_profile, groups=groups)
        assert "site:www.facebook.com/groups/austinhomes" in result.prompt

    def test_search_failure_is_contained(
        self, sample_profile: Profile, capsys: pytest.CaptureFixture[str]
    ) -> None:
        search = StaticGroundedSearch(error=TimeoutError("request timed out"))
        result = _scanner(search).scan(sample_profile)

        assert not result.ok
        assert result.leads == []
        assert result.error == "Search error: request timed out"
        assert "[Error]" in capsys.readouterr().err

    def test_empty_answer(self, sample_profile: Profile) -> None:
        result = _scanner(StaticGroundedSearch()).scan(sample_profile)
        assert result.ok
        assert result.leads == []

    def test_no_keywords_skips_search(self, sample_profile: Profile) -> None:
        profile = sample_profile.model_copy(update={"keywords": []})
        search = StaticGroundedSearch()
        result = _scanner(search).scan(profile)

        assert result.error == NO_KEYWORDS
        assert search.prompts == []


class TestScanMany:
    """Tests for Scanner.scan_many."""

    def test_results_follow_input_order(
        self, static_search: StaticGroundedSearch, sample_profile: Profile, global_profile: Profile
    ) -> None:
        results = _scanner(static_search).scan_many([sample_profile, global_profile], max_workers=2)

        assert [r.profile_id for r in results] == ["profile-plumbing", "profile-saas"]
        assert all(r.ok for r in results)
        assert results[1].leads[0].file_id == "profile-saas"
        assert len(static_search.prompts) == 2

    def test_failure_is_per_profile(self, sample_profile: Profile, global_profile: Profile) -> None:
        search = StaticGroundedSearch(error=RuntimeError("quota"))
        results = _scanner(search).scan_many([sample_profile, global_profile])
        assert [r.error for r in results] == ["Search error: quota", "Search error: quota"]

    def test_empty(self, static_search: StaticGroundedSearch) -> None:
        assert _scanner(static_search).scan_many([]) == []

    def test_progress_line_precedes_each_scan(
        self, sample_profile: Profile, global_profile: Profile
    ) -> None:
        events: list[str] = []

        class RecordingLogger(ProgressLogger):
            def scan(self, profile_name: str, index: int, total: int, scope: str = "") -> None:
                events.append(f"scan {index}/{total}")

        class RecordingSearch(StaticGroundedSearch):
            def generate(self, prompt: str, **kwargs) -> SearchResponse:
                events.append("search")
                return super().generate(prompt, **kwargs)

        scanner = Scanner(RecordingSearch(), logger=RecordingLogger(quiet=True))
        scanner.scan_many([sample_profile, global_profile], max_workers=1)

        assert events == ["scan 1/2", "search", "scan 2/2", "search"]


class TestDiscoverGroups:
    """Tests for Scanner.discover_groups."""

    def test_requires_location(self, global_profile: Profile) -> None:
        search = StaticGroundedSearch()
        result = _scanner(search).discover_groups(global_profile)

        assert result.error == LOCATION_REQUIRED
        assert search.prompts == []

    def test_finds_groups(self, sample_profile: Profile) -> None:
        response = SearchResponse(
            text=(
                "1. Austin Homeowners https://www.facebook.com/groups/austinhomes (12k members)\n"
                "2. A post https://www.facebook.com/groups/austinhomes/posts/42\n"
                "3. r/Austin https://www.reddit.com/r/Austin\n"
            )
        )
        search = StaticGroundedSearch([response])
        result = _scanner(search).discover_groups(sample_profile)

        assert result.ok
        assert [g.url for g in result.groups] == ["https://www.facebook.com/groups/austinhomes"]
        assert result.groups[0].niche == "Home Services"
        assert "site:facebook.com/groups" in search.prompts[0]

    def test_failure_is_contained(self, sample_profile: Profile) -> None:
        search = StaticGroundedSearch(error=RuntimeError("down"))
        result = _scanner(search).discover_groups(sample_profile)
        assert result.error == "Search error: down"
        assert result.groups == []


class TestAnalyzeLead:
    """Tests for Scanner.analyze_lead."""

    def test_returns_suggestion(self, sample_lead: Lead) -> None:
        search = StaticGroundedSearch([SearchResponse(text="  Offer a same-day visit.  ")])
        assert _scanner(search).analyze_lead(sample_lead) == "Offer a same-day visit."
        assert "Need a plumber in Austin" in search.prompts[0]

    def test_fallback(self, sample_lead: Lead) -> None:
        assert _scanner(StaticGroundedSearch(error=RuntimeError("x"))).analyze_lead(sample_lead) == (
            ANALYSIS_FALLBACK
        )
        assert _scanner(StaticGroundedSearch()).analyze_lead(sample_lead) == ANALYSIS_FALLBACK
