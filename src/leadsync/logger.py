"""
LeadSync structured logging - operator-facing progress lines for scans.

Answers three questions:
1. Which profile is being scanned?
2. What came back from the search call?
3. What was kept after dedupe?
"""

import sys
from datetime import UTC, datetime


def _print(*args: object, **kwargs: object) -> None:
    """Print with immediate flush."""
    print(*args, **kwargs, flush=True)


def _eprint(*args: object, **kwargs: object) -> None:
    """Print to stderr with immediate flush."""
    print(*args, **kwargs, file=sys.stderr, flush=True)


class ProgressLogger:
    """Structured progress logger for scan and discovery runs."""

    def __init__(self, verbose: bool = False, quiet: bool = False):
        self.verbose = verbose
        self.quiet = quiet
        self.start_time = datetime.now(UTC)

    def _elapsed(self) -> float:
        return (datetime.now(UTC) - self.start_time).total_seconds()

    def phase(self, name: str, detail: str = "") -> None:
        """Log a major phase transition."""
        if self.quiet:
            return
        if detail:
            _print(f"[Phase] {name}: {detail} ({self._elapsed():.1f}s)")
        else:
            _print(f"[Phase] {name} ({self._elapsed():.1f}s)")

    def scan(self, profile_name: str, index: int, total: int, scope: str = "") -> None:
        """Log the start of one profile scan (e.g. profile 2/3)."""
        if self.quiet:
            return
        suffix = f" [{scope}]" if scope else ""
        _print(f"  [Scan {index}/{total}] {profile_name}{suffix}")

    def prompt(self, prompt: str) -> None:
        """Log the outgoing prompt (verbose only)."""
        if self.verbose and not self.quiet:
            first_line = prompt.strip().splitlines()[0] if prompt.strip() else ""
            truncated = first_line[:80] + "..." if len(first_line) > 80 else first_line
            _print(f"    [Prompt] {truncated}")

    def response(self, text_len: int, citations: int) -> None:
        """Log the shape of a search response."""
        if self.quiet:
            return
        _print(f"    [Response] {text_len} chars, {citations} citations")

    def extracted(self, from_citations: int, from_text: int) -> None:
        """Log extraction results by source."""
        if self.quiet:
            return
        _print(
            f"    [Extracted] {from_citations + from_text} candidates "
            f"({from_citations} citations, {from_text} text)"
        )

    def deduped(self, before: int, after: int) -> None:
        """Log cross-scan dedupe results."""
        if self.quiet:
            return
        _print(f"  [Deduped] {before} -> {after} new leads")

    def skip(self, reason: str, detail: str) -> None:
        """Log a skip/drop with reason (verbose only)."""
        if self.verbose and not self.quiet:
            _print(f"    [Skip] {reason}: {detail[:60]}")

    def finish(self, leads: int, errors: int = 0) -> None:
        """Log run completion."""
        if self.quiet:
            return
        elapsed = self._elapsed()
        minutes = int(elapsed // 60)
        seconds = int(elapsed % 60)
        _print(f"\n[LeadSync] Run complete in {minutes}m{seconds}s")
        _print(f"  Leads: {leads}")
        if errors:
            _print(f"  Errors: {errors}")

    def error(self, msg: str) -> None:
        """Log an error."""
        _eprint(f"[Error] {msg}")

    def warning(self, msg: str) -> None:
        """Log a warning."""
        _eprint(f"[Warning] {msg}")
