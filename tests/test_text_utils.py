"""Tests for filename sanitization, timestamp parsing and description title mining."""

import pytest

from ripit.text_utils import (
    directory_name, iter_description_titles, sanitize_filename, timestamp_to_seconds,
)

FORBIDDEN = set("/\\:*?\"<>|$'")


class TestSanitizeFilename:
    def test_replaces_forbidden_runs_with_single_underscore(self):
        """Test runs of forbidden characters collapse to one underscore."""
        assert sanitize_filename('AC/DC: "Back" <in> Black?') == "AC_DC_Back_in_Black"

    def test_whitespace_collapsed(self):
        """Test whitespace runs become one underscore."""
        assert sanitize_filename("Side   A\tPart  1") == "Side_A_Part_1"

    def test_strips_leading_and_trailing_underscore(self):
        """Test a single leading and trailing underscore is stripped."""
        assert sanitize_filename("  $Money$  ") == "Money"
        assert sanitize_filename("__Intro__") == "Intro"

    def test_keeps_other_characters(self):
        """Test other characters pass through."""
        assert sanitize_filename("Café (Live) [2019] - Part.2") == "Café_(Live)_[2019]_-_Part.2"

    def test_may_return_empty(self):
        """Test fully forbidden text sanitizes to empty."""
        assert sanitize_filename("???") == ""
        assert sanitize_filename("") == ""

    @pytest.mark.parametrize("text", [
        "Hello World",
        " / \\ : * ? \" < > | $ ' ",
        "__a__b__",
        "It's a 'test' / $100",
        "_x_",
        "Track\n\n02",
    ])
    def test_idempotent_and_clean(self, text):
        """Test sanitizing twice changes nothing."""
        once = sanitize_filename(text)
        assert sanitize_filename(once) == once
        assert not FORBIDDEN & set(once)
        assert not once.startswith("_")
        assert not once.endswith("_")


class TestTimestampToSeconds:
    def test_canonical_forms(self):
        """Test SS, MM:SS and HH:MM:SS."""
        assert timestamp_to_seconds("1:30:15") == 5415
        assert timestamp_to_seconds("75:15") == 4515
        assert timestamp_to_seconds("30") == 30

    def test_leading_zeros_are_decimal(self):
        """Test leading zeros are read as decimal."""
        assert timestamp_to_seconds("05:09") == 309
        assert timestamp_to_seconds("08:08") == 488
        assert timestamp_to_seconds("00:09:00") == 540

    def test_fractional_seconds(self):
        """Test fractional seconds are kept."""
        assert timestamp_to_seconds("01:02.5") == pytest.approx(62.5)
        assert timestamp_to_seconds("1:00:00.250") == pytest.approx(3600.25)

    def test_too_many_fields_returns_zero(self, caplog):
        """Test more than three fields gives 0."""
        with caplog.at_level("WARNING"):
            assert timestamp_to_seconds("1:2:3:4") == 0
        assert "1:2:3:4" in caplog.text

    @pytest.mark.parametrize("text", ["", "ab:12", "1::2", "12:x5", "1:00.abc"])
    def test_garbage_returns_zero(self, text):
        """Test unparsable text gives 0."""
        assert timestamp_to_seconds(text) == 0


class TestDescriptionTitles:
    def test_filters_headers_links_and_promo(self):
        """Test headers, links and promo lines are not titles."""
        description = "\n".join([
            "Tracklist:",
            "",
            "1. First Song",
            "02) Second Song",
            "- Third Song",
            "• Fourth Song",
            "https://example.com/album",
            "-----",
            "Follow me on socials",
            "Free download here",
        ])

        titles = list(iter_description_titles(description))

        assert titles == ["First Song", "Second Song", "Third Song", "Fourth Song"]

    def test_skips_short_and_timestamp_lines(self):
        """Test short and timestamp-only lines are skipped."""
        description = "ok\n03:15\n1:02:03\nA Real Title\n  \n"
        assert list(iter_description_titles(description)) == ["A Real Title"]

    def test_only_one_marker_stripped(self):
        """Test only the first list marker is removed."""
        assert list(iter_description_titles("1. 2. Song")) == ["2. Song"]

    def test_is_lazy(self):
        """Test titles are produced lazily."""
        titles = iter_description_titles("One Song\nTwo Song")
        assert next(titles) == "One Song"

    def test_empty_description(self):
        """Test an empty description yields nothing."""
        assert list(iter_description_titles("")) == []


class TestDirectoryName:
    def test_uses_sanitized_title(self):
        """Test a usable title maps to its sanitized form."""
        assert directory_name("Live: at the Hall", "abc") == "Live_at_the_Hall"

    def test_empty_title_falls_back_to_id(self):
        """Test titles that sanitize to nothing use a reproducible id-based name."""
        assert directory_name("???", "abc123") == "untitled_abc123"
        assert directory_name("???") == "untitled"
