"""
LeadSync pipeline - profile -> prompt -> grounded search -> candidates -> leads.

The Scanner is the failure boundary: any error from the search call is
logged and returned as an empty result carrying an error message. Nothing
raises past scan(), discover_groups() or analyze_lead().
"""

from concurrent.futures import ThreadPoolExecutor

from .assembler import RelevanceScorer, Scorer, assemble_groups, assemble_leads
from .extractor import extract_candidates, extract_groups
from .logger import ProgressLogger
from .models import Group, GroupResult, Lead, Platform, Profile, ScanResult
from .prompts import LOOKBACK_DAYS, build_group_prompt, build_outreach_prompt, build_scan_prompt
from .search import GroundedSearch

LOCATION_REQUIRED = "Location required before searching for groups."
NO_KEYWORDS = "Profile has no keywords to search for."
ANALYSIS_FALLBACK = "Could not generate response suggestion."


class Scanner:
    """Runs scans against an injected grounded-search capability."""

    def __init__(
        self,
        search: GroundedSearch,
        scorer: Scorer | None = None,
        logger: ProgressLogger | None = None,
        lookback_days: int = LOOKBACK_DAYS,
        temperature: float = 0.7,
    ):
        self.search = search
        self.scorer = scorer or RelevanceScorer()
        self.logger = logger or ProgressLogger()
        self.lookback_days = lookback_days
        self.temperature = temperature

    def scan(
        self,
        profile: Profile,
        platform: Platform | None = None,
        groups: list[Group] | None = None,
    ) -> ScanResult:
        """Scan one profile. Returns an empty result with `error` set on failure."""
        if not profile.keywords:
            self.logger.error(f"{profile.name}: {NO_KEYWORDS}")
            return ScanResult(profile_id=profile.id, error=NO_KEYWORDS)

        prompt = build_scan_prompt(profile, platform, groups, self.lookback_days)
        self.logger.prompt(prompt)

        try:
            response = self.search.generate(prompt, grounded=True, temperature=self.temperature)
            self.logger.response(len(response.text), len(response.citations))

            scope = [platform] if platform else None
            candidates = extract_candidates(response.text, response.citations, scope)
            from_citations = sum(1 for c in candidates if c.source == "citation")
            self.logger.extracted(from_citations, len(candidates) - from_citations)

            leads = assemble_leads(candidates, profile, scorer=self.scorer)
        except Exception as e:
            self.logger.error(f"Lead search failed for {profile.name}: {e}")
            return ScanResult(profile_id=profile.id, prompt=prompt, error=f"Search error: {e}")

        return ScanResult(
            profile_id=profile.id,
            prompt=prompt,
            leads=leads,
            citations=response.citations,
        )

    def scan_many(
        self,
        profiles: list[Profile],
        platform: Platform | None = None,
        max_workers: int = 4,
    ) -> list[ScanResult]:
        """Scan independent profiles concurrently. Results follow input order.

        Scans share no state; merging the results into a stored lead set is
        left to the caller.
        """
        total = len(profiles)

        def scan_one(item: tuple[int, Profile]) -> ScanResult:
            i, profile = item
            self.logger.scan(profile.name, i, total, platform or "")
            return self.scan(profile, platform)

        items = list(enumerate(profiles, 1))
        if total <= 1 or max_workers <= 1:
            return [scan_one(item) for item in items]

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(scan_one, items))

    def discover_groups(self, profile: Profile, platform: Platform = "Facebook") -> GroupResult:
        """Find communities for a profile. Requires a concrete location."""
        if not profile.has_location():
            self.logger.warning(LOCATION_REQUIRED)
            return GroupResult(profile_id=profile.id, error=LOCATION_REQUIRED)

        prompt = build_group_prompt(profile, platform)
        self.logger.prompt(prompt)
        try:
            response = self.search.generate(prompt, grounded=True, temperature=self.temperature)
            self.logger.response(len(response.text), len(response.citations))
            candidates = extract_groups(response.text, response.citations, [platform])
            groups = assemble_groups(candidates, profile.niche)
        except Exception as e:
            self.logger.error(f"Group search failed for {profile.name}: {e}")
            return GroupResult(profile_id=profile.id, error=f"Search error: {e}")

        return GroupResult(profile_id=profile.id, groups=groups)

    def analyze_lead(self, lead: Lead) -> str:
        """Suggest an outreach strategy for one lead. Falls back to a fixed message."""
        try:
            response = self.search.generate(
                build_outreach_prompt(lead), grounded=False, temperature=self.temperature
            )
        except Exception as e:
            self.logger.error(f"Outreach analysis failed for {lead.url}: {e}")
            return ANALYSIS_FALLBACK
        return response.text.strip() or ANALYSIS_FALLBACK
