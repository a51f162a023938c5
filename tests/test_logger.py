"""Tests for the progress logger."""

import pytest

from leadsync.logger import ProgressLogger


class TestProgressLogger:
    """Tests for ProgressLogger output."""

    def test_scan_lines(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = ProgressLogger()
        logger.scan("Austin Plumbing", 1, 2, "site:reddit.com")
        logger.response(120, 2)
        logger.extracted(2, 1)
        logger.deduped(3, 2)

        out = capsys.readouterr().out
        assert "[Scan 1/2] Austin Plumbing [site:reddit.com]" in out
        assert "[Response] 120 chars, 2 citations" in out
        assert "[Extracted] 3 candidates (2 citations, 1 text)" in out
        assert "[Deduped] 3 -> 2 new leads" in out

    def test_prompt_only_when_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        ProgressLogger().prompt("Find organic leads")
        assert capsys.readouterr().out == ""

        ProgressLogger(verbose=True).prompt("Find organic leads")
        assert "[Prompt] Find organic leads" in capsys.readouterr().out

    def test_quiet_suppresses_progress(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = ProgressLogger(verbose=True, quiet=True)
        logger.phase("Scan")
        logger.scan("p", 1, 1)
        logger.finish(3)
        assert capsys.readouterr().out == ""

    def test_errors_always_on_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = ProgressLogger(quiet=True)
        logger.error("boom")
        logger.warning("careful")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[Error] boom" in captured.err
        assert "[Warning] careful" in captured.err

    def test_finish(self, capsys: pytest.CaptureFixture[str]) -> None:
        ProgressLogger().finish(4, errors=1)
        out = capsys.readouterr().out
        assert "[LeadSync] Run complete" in out
        assert "Leads: 4" in out
        assert "Errors: 1" in out
