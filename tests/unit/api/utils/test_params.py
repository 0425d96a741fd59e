"""Unit tests for lenient query-string integer parsing."""

import pytest

from src.api.utils.params import lenient_int, parse_id_list


@pytest.mark.unit
class TestLenientInt:
    """Conversion never fails."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("3", 3),
            (" 7 ", 7),
            ("12abc", 12),
            ("+4", 4),
            ("-2", -2),
            ("abc", 0),
            ("", 0),
            ("1.9", 1),
            ("\u0661\u0662", 0),
            ("3\u0664", 3),
        ],
    )
    def test_values(self, raw: str, expected: int) -> None:
        """A leading integer prefix is used, anything else is 0."""
        assert lenient_int(raw) == expected

    def test_absent_uses_default(self) -> None:
        """Missing keys fall back to the default, not to 0."""
        assert lenient_int(None, default=1) == 1


@pytest.mark.unit
class TestParseIdList:
    """Comma-separated id lists."""

    def test_order_and_duplicates_are_kept(self) -> None:
        """Ids are passed on exactly as written."""
        assert parse_id_list("2,2,1") == [2, 2, 1]

    def test_non_numeric_segments_become_zero(self) -> None:
        """Malformed segments are not rejected."""
        assert parse_id_list("1,x,,3") == [1, 0, 0, 3]
