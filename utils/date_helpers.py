from datetime import date, datetime
from utils.constants import DATE_FORMAT, STATEMENT_DATE_FORMAT

_STRFTIME_MAP = {
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
    "MM/DD/YYYY": "%m/%d/%Y",
}


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure."""
    if not date_str:
        return None
    try:
        return datetime.strptime(date_str.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def parse_statement_date(date_str: str) -> date | None:
    """Parse a DD/MM/YYYY statement cell; CR/LF are ignored."""
    cleaned = date_str.replace("\n", "").replace("\r", "")
    try:
        return datetime.strptime(cleaned, STATEMENT_DATE_FORMAT).date()
    except ValueError:
        return None


def format_display_date(d: date, fmt_key: str = "DD/MM/YYYY") -> str:
    return d.strftime(_STRFTIME_MAP.get(fmt_key, STATEMENT_DATE_FORMAT))


def parse_display_date(display_str: str, fmt_key: str = "DD/MM/YYYY") -> date | None:
    """Parse a date in the given display format. Returns None on failure.

    Falls back to ISO 8601 parse if the display format doesn't match.
    """
    if not display_str:
        return None
    fmt = _STRFTIME_MAP.get(fmt_key, STATEMENT_DATE_FORMAT)
    try:
        return datetime.strptime(display_str.strip(), fmt).date()
    except ValueError:
        return parse_date(display_str)
