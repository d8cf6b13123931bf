"""
Core logic of the basic tools, kept as plain functions so it can be tested
without a server.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


SERVER_NAME = "my-first-mcp"
SERVER_VERSION = "1.0.0"
SERVER_DESCRIPTION = "Tutorial MCP server with basic, project analysis and status tools"
DEFAULT_TIMEZONE = "Asia/Seoul"

TIME_FORMATS = {
    "full": "%A, %B %d, %Y %H:%M:%S %Z",
    "date": "%A, %B %d, %Y",
    "time": "%H:%M:%S %Z",
}

OPERATION_SYMBOLS = {
    "add": "+",
    "subtract": "-",
    "multiply": "×",
    "divide": "÷",
}


# ============================================
# Current time
# ============================================

@dataclass
class TimeResult:
    formatted: str
    timezone: str


def format_time(
    moment: Optional[datetime] = None,
    timezone: str = DEFAULT_TIMEZONE,
    fmt: str = "full",
) -> TimeResult:
    """
    Format a moment in the given IANA timezone.

    Raises:
        ValueError: Unknown timezone or format
    """
    if fmt not in TIME_FORMATS:
        raise ValueError(f"Unknown format: {fmt}")
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {timezone}")

    moment = moment or datetime.now(dt_timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt_timezone.utc)

    return TimeResult(
        formatted=moment.astimezone(zone).strftime(TIME_FORMATS[fmt]),
        timezone=timezone,
    )


# ============================================
# Calculator
# ============================================

@dataclass
class CalculateResult:
    result: float
    expression: str
    is_error: bool = False
    error_message: Optional[str] = None


def format_number(value: float) -> str:
    """Render integral floats without a fractional part (6.0 -> 6)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def calculate(a: float, b: float, operation: str) -> CalculateResult:
    if operation not in OPERATION_SYMBOLS:
        raise ValueError(f"Unknown operation: {operation}")

    symbol = OPERATION_SYMBOLS[operation]
    left = f"{format_number(a)} {symbol} {format_number(b)}"

    if operation == "divide" and b == 0:
        return CalculateResult(
            result=float("nan"),
            expression=left,
            is_error=True,
            error_message="Error: division by zero is not allowed.",
        )

    if operation == "add":
        result = a + b
    elif operation == "subtract":
        result = a - b
    elif operation == "multiply":
        result = a * b
    else:
        result = a / b

    return CalculateResult(
        result=result,
        expression=f"{left} = {format_number(result)}",
    )


# ============================================
# Random numbers
# ============================================

@dataclass
class RandomResult:
    numbers: List[int]
    min: int
    max: int
    is_error: bool = False
    error_message: Optional[str] = None


def generate_random_numbers(
    min_value: int,
    max_value: int,
    count: int = 1,
    rng: Optional[random.Random] = None,
) -> RandomResult:
    """Draw count integers from the inclusive range [min_value, max_value]."""
    if min_value > max_value:
        return RandomResult(
            numbers=[],
            min=min_value,
            max=max_value,
            is_error=True,
            error_message="Error: min is greater than max.",
        )

    rng = rng or random
    numbers = [rng.randint(min_value, max_value) for _ in range(count)]
    return RandomResult(numbers=numbers, min=min_value, max=max_value)


# ============================================
# String reversal
# ============================================

@dataclass
class ReverseResult:
    original: str
    reversed: str


def reverse_string(text: str) -> ReverseResult:
    return ReverseResult(original=text, reversed=text[::-1])


# ============================================
# Server info
# ============================================

@dataclass
class ServerInfo:
    name: str
    version: str
    description: str
    tools: List[str] = field(default_factory=list)


def get_server_info(tools: Sequence[str] = ()) -> ServerInfo:
    return ServerInfo(
        name=SERVER_NAME,
        version=SERVER_VERSION,
        description=SERVER_DESCRIPTION,
        tools=list(tools),
    )
