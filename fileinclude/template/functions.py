"""
Standard helper functions for templates.

None of these are bound by default. Pass ``default_functions()`` (or a
mapping merged from it) as the custom functions of an expansion to make them
callable from {{ }} markers and conditions.
"""

from datetime import datetime
from typing import Any, Callable, Dict

from dateutil import parser as date_parser
from jsonpath_ng import parse as jsonpath_parse

from .engine import unwrap_value


# Function to get current datetime - can be overridden in tests
_get_current_datetime: Callable[[], datetime] = lambda: datetime.now()


def java_to_strftime(java_pattern: str) -> str:
    """
    Convert a Java SimpleDateFormat pattern to a Python strftime format.

    Examples:
        >>> java_to_strftime('yyyy-MM-dd')
        '%Y-%m-%d'
        >>> java_to_strftime('MMM dd, yyyy')
        '%b %d, %Y'
    """
    mappings = {
        'yyyy': '%Y',
        'yy': '%y',
        'MMMM': '%B',
        'MMM': '%b',
        'MM': '%m',
        'dd': '%d',
        'EEEE': '%A',
        'EEE': '%a',
        'HH': '%H',
        'hh': '%I',
        'mm': '%M',
        'ss': '%S',
        'a': '%p',
        'Z': '%z',
        'z': '%Z'
    }

    # Longest tokens first so MMMM is not read as MM + MM
    result = []
    i = 0
    tokens = sorted(mappings, key=len, reverse=True)
    while i < len(java_pattern):
        for token in tokens:
            if java_pattern.startswith(token, i):
                result.append(mappings[token])
                i += len(token)
                break
        else:
            result.append(java_pattern[i])
            i += 1
    return ''.join(result)


def _midnight_pair(date_str: str):
    dt = date_parser.parse(date_str)
    now = _get_current_datetime()
    if dt.tzinfo is not None:
        now = now.replace(tzinfo=dt.tzinfo)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return dt.replace(hour=0, minute=0, second=0, microsecond=0), today


def format_date(date_str: str, format_str: str) -> str:
    """
    Format a date string according to a Java SimpleDateFormat pattern.

    Args:
        date_str: ISO-8601 date string or parseable date
        format_str: Java SimpleDateFormat pattern (e.g., 'MMM dd, yyyy')

    Returns:
        Formatted date string, or the input unchanged if it cannot be parsed

    Examples:
        >>> format_date('2025-12-01', 'MMM dd, yyyy')
        'Dec 01, 2025'
    """
    try:
        dt = date_parser.parse(str(date_str))
    except (ValueError, OverflowError):
        return date_str
    return dt.strftime(java_to_strftime(format_str))


def days_from_now(date_str: str) -> str:
    """Describe a date relative to today ("today", "tomorrow", "3 days ago")."""
    try:
        dt, today = _midnight_pair(str(date_str))
    except (ValueError, OverflowError):
        return date_str

    delta = (dt - today).days
    if delta == 0:
        return "today"
    elif delta == 1:
        return "tomorrow"
    elif delta == -1:
        return "yesterday"
    elif delta > 0:
        return f"{delta} days from now"
    else:
        return f"{abs(delta)} days ago"


def days_after(date_str: str) -> int:
    """
    Return the number of days since a date.

    Positive if the date is in the past, negative if it is in the future.
    """
    try:
        dt, today = _midnight_pair(str(date_str))
    except (ValueError, OverflowError):
        return 0
    return (today - dt).days


def currency(amount: Any) -> str:
    """
    Format a numeric value as dollars with thousands separators.

    Examples:
        1089.99 -> "$1,089.99"
        23 -> "$23.00"
    """
    try:
        if isinstance(amount, str):
            numeric_value = float(amount.replace("$", "").replace(",", "").strip())
        elif isinstance(amount, (int, float)) and not isinstance(amount, bool):
            numeric_value = float(amount)
        else:
            return "$0.00"
        return f"${numeric_value:,.2f}"
    except (ValueError, TypeError):
        return "$0.00"


def jsonpath(expression: str, data: Any) -> Any:
    """
    Return the first value matched by a JSONPath expression, or None.

    Example:
        {{ jsonpath('$.items[-1].name', order) }}
    """
    matches = jsonpath_parse(expression).find(unwrap_value(data))
    return matches[0].value if matches else None


def default_functions() -> Dict[str, Callable[..., Any]]:
    """Return a fresh mapping of all helper functions by name."""
    return {
        "currency": currency,
        "days_after": days_after,
        "days_from_now": days_from_now,
        "format_date": format_date,
        "jsonpath": jsonpath,
    }
