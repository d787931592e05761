"""Formatting helpers exposed to the BIRD/keepalived templates.

Every function here is pure (except :func:`timestamp`, which reads the wall
clock unless a value is injected) and safe to call from concurrent renders.
None of them raise for ``None`` input: absent optionals collapse to the zero
value of their type.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

T = TypeVar("T")

# Month names for Go's time.RFC822 layout ("02 Jan 06 15:04 MST"), fixed
# so output does not depend on the process locale.
_MONTHS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

_INDENT = "  "
_LINE_SEPARATOR = ",\n"


def bird_set(prefixes: Optional[Sequence[str]]) -> str:
    """Render ``prefixes`` as the body of a BIRD prefix set.

    >>> print(bird_set(["10.0.0.0/8", "192.168.0.0/16"]))
      10.0.0.0/8,
      192.168.0.0/16
    """

    return _LINE_SEPARATOR.join(_INDENT + prefix for prefix in prefixes or ())


def bird_as_set(asns: Optional[Sequence[int]]) -> str:
    """Render ``asns`` one per line, in the same layout as :func:`bird_set`."""

    return _LINE_SEPARATOR.join(f"{_INDENT}{int(asn)}" for asn in asns or ())


def as_set(asns: Optional[Sequence[int]]) -> str:
    """Render ``asns`` as an inline BIRD int set, e.g. ``[64500, 64501]``."""

    return "[" + ", ".join(str(int(asn)) for asn in asns or ()) + "]"


def is_empty(seq: Optional[Sequence[Any]]) -> bool:
    return seq is None or len(seq) == 0


# ----------------------------------------------------------------------
# Optional accessors
# ----------------------------------------------------------------------
def str_deref(value: Optional[str]) -> str:
    return value if value is not None else ""


def bool_deref(value: Optional[bool]) -> bool:
    return bool(value) if value is not None else False


def int_deref(value: Optional[int]) -> int:
    return value if value is not None else 0


def list_deref(value: Optional[Iterable[T]]) -> List[T]:
    return list(value) if value is not None else []


def map_deref(value: Optional[Mapping[Any, Any]]) -> Dict[Any, Any]:
    return dict(value) if value is not None else {}


def str_list_join(value: Optional[Sequence[str]]) -> str:
    return ", ".join(value) if value is not None else ""


def bird_string(value: Optional[str]) -> str:
    """Quote ``value`` as a BIRD string literal, escaping quotes and backslashes."""

    text = str_deref(value).replace("\\", "\\\\").replace('"', '\\"')
    return '"' + " ".join(text.splitlines()) + '"'


# ----------------------------------------------------------------------
# Misc helpers
# ----------------------------------------------------------------------
def timestamp(fmt: str, now: Optional[datetime] = None) -> str:
    """Return the current time as epoch seconds (``"unix"``) or RFC 822 UTC.

    A naive ``now`` is taken to be UTC.
    """

    moment = now if now is not None else datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)

    if fmt == "unix":
        return str(int(moment.timestamp()))
    return (
        f"{moment.day:02d} {_MONTHS[moment.month - 1]} {moment.year % 100:02d} "
        f"{moment.hour:02d}:{moment.minute:02d} UTC"
    )


def contains(haystack: str, needle: str) -> bool:
    return needle in haystack


def split_first(value: str, delimiter: str) -> str:
    """Return the text before the first ``delimiter`` (or ``value`` itself)."""

    if not delimiter:
        return value
    return value.split(delimiter, 1)[0]


def is_last(index: int, length: int) -> bool:
    return index + 1 == length


def iterate(count: Optional[int]) -> List[int]:
    return list(range(count)) if count else []


def make_list(*args: Any) -> List[Any]:
    return list(args)


def int_cmp(value: Optional[int], other: int) -> bool:
    return value is not None and value == other


def map_contains(key: Any, mapping: Optional[Mapping[Any, Any]]) -> bool:
    return mapping is not None and key in mapping
