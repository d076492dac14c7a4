"""Helper functions for Jinja2 templates."""

import re
from datetime import date, datetime
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar
from urllib.parse import urlsplit
from jinja2 import Environment
from markupsafe import Markup, escape

T = TypeVar("T")

MAX_STARS = 6
NOT_AVAILABLE = "N/A"
SAFE_URL_SCHEMES = {"", "http", "https", "mailto", "tel"}

_DATE_PATTERN = re.compile(r"^\s*(\d{4})(?:[-/.](\d{1,2}))?(?:[-/.](\d{1,2}))?")
_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")


def emphasize_quotes(text: Any) -> Markup:
    """
    Escape text and convert segments between single quotes to bold HTML tags.

    Example: "This is 'important' text" -> "This is <strong>important</strong> text"
    """
    if not text:
        return Markup("")
    text = str(text)
    parts = []
    last = 0
    for match in re.finditer(r"'([^']*)'", text):
        parts.append(escape(text[last:match.start()]))
        parts.append(Markup("<strong>%s</strong>") % match.group(1))
        last = match.end()
    parts.append(escape(text[last:]))
    return Markup("").join(parts)


def slugify(text: Any) -> str:
    """
    Normalize text into a URL-safe slug.

    Example: "Acme Corp. - Senior  Engineer" -> "acme-corp-senior-engineer"
    """
    slug = str(text).lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w\-]+", "", slug, flags=re.ASCII)
    slug = re.sub(r"--+", "-", slug)
    return slug.strip("-")


def safe_url(value: Any) -> str:
    """Return the URL if its scheme is safe to put in an href, otherwise ''."""
    if not value:
        return ""
    url = str(value).strip()
    try:
        scheme = urlsplit(url).scheme.lower()
    except ValueError:
        return ""
    return url if scheme in SAFE_URL_SCHEMES else ""


def parse_entry_date(value: Any, fallback_text: Optional[str] = None) -> Optional[date]:
    """
    Parse a CV date field.

    Accepts date objects, years as integers and strings such as "2020",
    "2020-06" or "2020-06-15". When the value is missing, the leading year of
    a period text like "2019 - Present" is used.

    Returns:
        date, or None when nothing parseable is found
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return date(value, 1, 1) if 1000 <= value <= 9999 else None
    if isinstance(value, str):
        match = _DATE_PATTERN.match(value)
        if match:
            year, month, day = match.groups()
            try:
                return date(int(year), int(month or 1), int(day or 1))
            except ValueError:
                return None
        return None
    if value is None and fallback_text:
        match = _YEAR_PATTERN.search(str(fallback_text).split(" - ")[0])
        if match:
            return date(int(match.group(1)), 1, 1)
    return None


def sort_by_date_desc(
    entries: Iterable[T],
    date_of: Callable[[T], Optional[date]]
) -> List[T]:
    """
    Sort entries most recent first.

    Entries without a parseable date go last, keeping their original order.
    """
    dated = []
    undated = []
    for entry in entries:
        when = date_of(entry)
        if when is None:
            undated.append(entry)
        else:
            dated.append((when, entry))
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [entry for _, entry in dated] + undated


def format_date(value: Any) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m") if value.day == 1 else value.isoformat()
    return str(value)


def format_period(start: Any, end: Any, present_label: str, duration: Optional[str] = None) -> str:
    """Format a tenure such as "2020-01 - Present"."""
    if duration:
        return str(duration)
    start_text = format_date(start)
    if not start_text:
        return NOT_AVAILABLE
    return f"{start_text} - {format_date(end) or present_label}"


def as_number(value: Any) -> float:
    """Coerce a YAML level to a float, treating anything non-numeric as 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0


def star_count(level: Any) -> int:
    """Filled stars for a level on the six-point scale: min(max(level, 0), 6)."""
    return int(min(max(as_number(level), 0), MAX_STARS))


def percentage(level: Any) -> float:
    """Clamp a level to a 0-100 percentage."""
    return min(max(as_number(level), 0.0), 100.0)


def _derived_slug(entry: Any, fields: Sequence[str]) -> str:
    return slugify("-".join(str(getattr(entry, field, None) or "") for field in fields))


def entry_key(entry: Any, fields: Sequence[str], position: Optional[int] = None) -> str:
    """
    Detail page key: the explicit id when present, else a slug of the given fields.

    Text that slugifies to nothing (e.g. only non-ASCII characters) falls back
    to ``entry-<position>``, the entry's position in its sorted list.
    """
    explicit = getattr(entry, "id", None)
    if explicit:
        return str(explicit)
    derived = _derived_slug(entry, fields)
    if derived or position is None:
        return derived
    return f"entry-{position}"


def find_entry(entries: Iterable[T], key: str, fields: Sequence[str]) -> Optional[T]:
    """Find an entry by explicit id, by the slug derived from ``fields``, or by its positional key."""
    if not key:
        return None
    for position, entry in enumerate(entries):
        explicit = getattr(entry, "id", None)
        if key in (explicit, _derived_slug(entry, fields), entry_key(entry, fields, position)):
            return entry
    return None


def register_jinja_filters(env: Environment) -> None:
    """
    Register helper functions as Jinja2 filters.

    Args:
        env: Jinja2 Environment instance
    """
    env.filters["emphasize_quotes"] = emphasize_quotes
    env.filters["slugify"] = slugify
    env.filters["safe_url"] = safe_url
    env.filters["format_date"] = format_date
    env.filters["star_count"] = star_count
    env.filters["percentage"] = percentage
