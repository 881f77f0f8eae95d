from __future__ import annotations

import math
import re
from typing import Any

DEFAULT_UNIT = "EA"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")
_QUANTITY_STRIP_RE = re.compile(r"[^0-9.,]")
_DASH_RE = re.compile(r"[‐‑‒–—―−]")
_CYRILLIC_RE = re.compile(r"[Ѐ-ӿ]")


def clean_text(value: Any) -> str:
    """Strip control characters and collapse spaces per line, keeping line breaks."""
    if value is None:
        return ""
    text = _CONTROL_RE.sub("", str(value)).replace("\xa0", " ")
    lines = []
    for line in text.splitlines():
        cleaned_line = re.sub(r"[ \t]+", " ", line).strip()
        if cleaned_line:
            lines.append(cleaned_line)
    return "\n".join(lines)


def collapse_whitespace(value: Any) -> str:
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value).replace("\xa0", " ")).strip()


def parse_quantity(value: Any) -> float | None:
    """Parse a quantity cell; ``None`` means the row must be skipped.

    Anything but digits and separators is dropped first, so "2 pcs" is 2.
    A lone comma is a decimal separator ("2,5" is 2.5). When both separators
    appear, the last one is the decimal: "1,000.5" and "1.000,5" are 1000.5.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        compact = _QUANTITY_STRIP_RE.sub("", str(value))
        if not compact:
            return None
        if compact.rfind(",") > compact.rfind("."):
            compact = compact.replace(".", "").replace(",", ".")
        else:
            compact = compact.replace(",", "")
        try:
            number = float(compact)
        except ValueError:
            return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def normalize_part_number(value: Any) -> str:
    text = collapse_whitespace(value)
    return _DASH_RE.sub("-", text)


def contains_cyrillic(value: Any) -> bool:
    if not value:
        return False
    return bool(_CYRILLIC_RE.search(str(value)))


def normalize_unit(value: Any, part_number: str = "", uppercase: bool = True) -> str:
    text = collapse_whitespace(value)
    if not text:
        return DEFAULT_UNIT
    # a unit equal to the part number means the columns are misaligned
    if part_number and text.casefold() == part_number.casefold():
        return DEFAULT_UNIT
    return text.upper() if uppercase else text


def normalize_description(value: Any, fallback: str = "") -> str:
    text = collapse_whitespace(value)
    if text:
        return text
    return fallback
