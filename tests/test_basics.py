"""Tests for my_first_mcp.basics module."""

import random
from datetime import datetime, timezone

import pytest

from my_first_mcp.basics import (
    SERVER_NAME,
    calculate,
    format_number,
    format_time,
    generate_random_numbers,
    get_server_info,
    reverse_string,
)


MOMENT = datetime(2025, 1, 15, 3, 30, 0, tzinfo=timezone.utc)


class TestFormatTime:
    def test_default_timezone(self):
        result = format_time(MOMENT)
        assert result.timezone == "Asia/Seoul"
        assert "2025" in result.formatted
        assert "12:30:00" in result.formatted

    def test_custom_timezone(self):
        result = format_time(MOMENT, timezone="America/New_York")
        assert result.timezone == "America/New_York"
        assert "22:30:00" in result.formatted
        assert "January 14" in result.formatted

    def test_date_only(self):
        result = format_time(MOMENT, fmt="date")
        assert result.formatted == "Wednesday, January 15, 2025"

    def test_time_only(self):
        result = format_time(MOMENT, fmt="time")
        assert "2025" not in result.formatted
        assert result.formatted.startswith("12:30:00")

    def test_naive_datetime_is_utc(self):
        naive = datetime(2025, 1, 15, 3, 30, 0)
        assert format_time(naive).formatted == format_time(MOMENT).formatted

    def test_unknown_timezone(self):
        with pytest.raises(ValueError):
            format_time(MOMENT, timezone="Mars/Olympus")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            format_time(MOMENT, fmt="week")


class TestCalculate:
    def test_add(self):
        result = calculate(123, 456, "add")
        assert result.result == 579
        assert result.expression == "123 + 456 = 579"
        assert result.is_error is False

    def test_subtract(self):
        assert calculate(100, 30, "subtract").expression == "100 - 30 = 70"

    def test_multiply(self):
        assert calculate(15, 8, "multiply").expression == "15 × 8 = 120"

    def test_divide(self):
        result = calculate(144, 12, "divide")
        assert result.result == 12
        assert result.expression == "144 ÷ 12 = 12"

    def test_decimal_result(self):
        result = calculate(10, 3, "divide")
        assert result.result == pytest.approx(3.333, rel=1e-3)

    def test_float_operands(self):
        assert calculate(1.5, 2.5, "add").expression == "1.5 + 2.5 = 4"

    def test_divide_by_zero(self):
        result = calculate(10, 0, "divide")
        assert result.is_error is True
        assert "zero" in result.error_message
        assert result.expression == "10 ÷ 0"
        assert result.result != result.result  # NaN

    def test_unknown_operation(self):
        with pytest.raises(ValueError):
            calculate(1, 2, "modulo")

    def test_format_number(self):
        assert format_number(6.0) == "6"
        assert format_number(2.5) == "2.5"
        assert format_number(7) == "7"


class TestRandomNumbers:
    def test_single(self):
        result = generate_random_numbers(1, 10)
        assert len(result.numbers) == 1
        assert 1 <= result.numbers[0] <= 10
        assert result.is_error is False

    def test_multiple(self):
        result = generate_random_numbers(1, 45, 6)
        assert len(result.numbers) == 6
        assert all(1 <= n <= 45 for n in result.numbers)

    def test_same_min_max(self):
        assert generate_random_numbers(5, 5, 3).numbers == [5, 5, 5]

    def test_seeded(self):
        a = generate_random_numbers(1, 100, 5, rng=random.Random(42))
        b = generate_random_numbers(1, 100, 5, rng=random.Random(42))
        assert a.numbers == b.numbers

    def test_min_greater_than_max(self):
        result = generate_random_numbers(10, 1)
        assert result.is_error is True
        assert result.numbers == []


class TestReverseString:
    def test_reverse(self):
        result = reverse_string("hello")
        assert result.original == "hello"
        assert result.reversed == "olleh"

    def test_unicode(self):
        assert reverse_string("안녕하세요").reversed == "요세하녕안"


class TestServerInfo:
    def test_info(self):
        info = get_server_info(["calculate", "reverse_string"])
        assert info.name == SERVER_NAME
        assert info.version
        assert info.tools == ["calculate", "reverse_string"]
