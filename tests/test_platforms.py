"""Tests for platform classification."""

import pytest

from leadsync.platforms import ALL_PLATFORMS, classify_platform, parse_platform


class TestClassifyPlatform:
    """Tests for classify_platform."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://www.facebook.com/groups/abc", "Facebook"),
            ("https://www.reddit.com/r/Austin/comments/1", "Reddit"),
            ("https://www.quora.com/Who-is-the-best-plumber", "Quora"),
            ("https://www.instagram.com/p/Cx1", "Instagram"),
            ("https://www.nextdoor.com/p/xyz", "Nextdoor"),
            ("https://x.com/someone/status/1", "Twitter/X"),
            ("https://twitter.com/someone", "Twitter/X"),
            ("https://www.threads.net/@someone/post/1", "Threads"),
            ("https://bsky.app/profile/someone", "Bluesky"),
            ("https://t.me/austinhomeowners", "Telegram"),
            ("https://www.linkedin.com/posts/someone-123", "LinkedIn"),
            ("www.reddit.com/r/x", "Reddit"),
            ("https://example.com/blog", "Web"),
        ],
    )
    def test_known_platforms(self, url: str, expected: str) -> None:
        assert classify_platform(url) == expected

    def test_threads_is_not_instagram(self) -> None:
        assert classify_platform("https://www.threads.net/@instagram") == "Threads"

    def test_no_false_x_match(self) -> None:
        assert classify_platform("https://www.netflix.com/title/1") == "Web"
        assert classify_platform("https://chat.me/room") == "Web"

    @pytest.mark.parametrize(
        "value",
        ["", "not a url", "https://[bad", "::::", "\x00", "http://", None, 42],
    )
    def test_total(self, value: object) -> None:
        label = classify_platform(value)  # type: ignore[arg-type]
        assert label in ALL_PLATFORMS


class TestParsePlatform:
    """Tests for parse_platform."""

    def test_case_insensitive(self) -> None:
        assert parse_platform("reddit") == "Reddit"
        assert parse_platform("LINKEDIN") == "LinkedIn"

    def test_twitter_aliases(self) -> None:
        assert parse_platform("x") == "Twitter/X"
        assert parse_platform("Twitter") == "Twitter/X"

    def test_unknown(self) -> None:
        with pytest.raises(ValueError):
            parse_platform("myspace")
