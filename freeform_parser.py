from __future__ import annotations

import logging
import re

from field_normalizer import (
    collapse_whitespace,
    normalize_description,
    normalize_part_number,
    normalize_unit,
    parse_quantity,
)
from models import PartDraft

logger = logging.getLogger(__name__)

PART_NUMBER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^[A-Z0-9]+(?:-[A-Z0-9]+)+$"),  # 642-1000-505
    re.compile(r"^[A-Z0-9]+(?:\.[A-Z0-9]+)+$"),  # MS21042.3
    re.compile(r"^[A-Z0-9]+(?:/[A-Z0-9]+)+$"),  # NAS1149/F0363
    re.compile(r"^[A-Z0-9]{2,}$"),  # 3214552
    re.compile(r"^[A-Z]+[0-9]+[A-Z0-9\-]*$"),  # AN960C10L
    re.compile(r"^[A-Z]+,[A-Z0-9]+(?:[ -][A-Z0-9]+)*$"),  # ABC,DEF GHI-123
)

DESCRIPTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^[A-Za-z][A-Za-z\s\-,/()&.']*$"),  # words, spaces and hyphens
    re.compile(r"^[A-Z]+(?:-[A-Z]+)+$"),  # HOSE-ASSY
    re.compile(r"^[A-Z]+,\s?[A-Z]+(?:\s[A-Z]+)*$"),  # SEAL,RING OUTER
    re.compile(r"^[А-Яа-яЁё][А-Яа-яЁёA-Za-z0-9\s\-,./()]*$"),  # Cyrillic names
)

UNIT_WORDS = (
    "EA", "EACH", "PC", "PCS", "SET", "KIT", "KT", "PR", "PK", "M", "FT", "KG",
    "LB", "L", "ML", "G", "RO", "CA", "IN", "YD", "OZ", "ШТ", "КОМПЛ", "КГ", "Л", "М",
)
_UNIT_ALT = "|".join(sorted((re.escape(unit) for unit in UNIT_WORDS), key=len, reverse=True))

_QTY_UNIT_RE = re.compile(
    rf"(?P<qty>\d+(?:[.,]\d+)?)\s*(?P<unit>{_UNIT_ALT})?\.?\s*$", re.IGNORECASE
)
_QTY_UNIT_CELL_RE = re.compile(
    rf"^\s*(?P<qty>\d+(?:[.,]\d+)?)\s*(?P<unit>{_UNIT_ALT})?\.?\s*$", re.IGNORECASE
)
_PSEUDO_COLUMN_RE = re.compile(r"\t+|\s{2,}|\s*\|\s*")
_LINE_ROW_RE = re.compile(
    rf"^(?P<pn>[A-Z0-9][A-Z0-9\-./]*)\s+(?P<desc>.+?)\s+(?P<qty>\d+(?:[.,]\d+)?)\s*(?P<unit>{_UNIT_ALT})?\.?$",
    re.IGNORECASE,
)
_LABEL_RE = re.compile(
    r"^\s*(?P<label>P/?N|Part\s*(?:No\.?|Number)|Description|Desc|Qty|Quantity|"
    r"Store[_\s]?Unit|Unit|UOM|Alt\s*/?\s*P/?N|Alternate)\s*[:#]\s*(?P<value>.*)$",
    re.IGNORECASE,
)
_REFERENCE_RE = re.compile(
    r"(?:\bP/N|\bPN|\bPart\s*(?:Number|No\.?))\s*[:#]?\s*([A-Z0-9][A-Z0-9\-/.]*[A-Z0-9])",
    re.IGNORECASE,
)
_ITEM_QTY_RE = re.compile(r"\bItem\s*[:#]?\s*([A-Z0-9][A-Z0-9\-]*)[^\n]*?\bQty\s*[:#]?\s*(\d+)", re.IGNORECASE)
_NEAR_QTY_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:qty|quantity|кол-во)\s*[:#]?\s*(\d+)", re.IGNORECASE),
    re.compile(r"\b(\d+)\s*(?:pcs?|pieces?|units?|ea|each|шт)\b", re.IGNORECASE),
    re.compile(r"\b(\d+)\s*(?:required|needed|требуется)", re.IGNORECASE),
)
_NEAR_DESCRIPTION_RE = re.compile(r"Description\s*[:\s]\s*([^\n\r]{3,100})", re.IGNORECASE)
_EXCLUDED_REFERENCE_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(RFQ|REQ|QTY|FOB|USD|EUR|RUB)\d*$", re.IGNORECASE),
    re.compile(r"^\d{1,2}[\-/.]\d{1,2}[\-/.]\d{2,4}$"),
    re.compile(r"^[A-Z]{1,2}\d{1,2}$", re.IGNORECASE),
)
_INDEX_RE = re.compile(r"^\d+\.?$")
_AIRCRAFT_LINE_RE = re.compile(r"^(?:A|B)\d{3}\b|^(?:RRJ|SSJ|CRJ|ERJ|ATR)[\s-]?\d", re.IGNORECASE)


def is_part_number(value: str) -> bool:
    text = (value or "").strip().upper()
    if not text or not any(ch.isdigit() for ch in text):
        return False
    return any(pattern.match(text) for pattern in PART_NUMBER_PATTERNS)


def is_description(value: str) -> bool:
    text = collapse_whitespace(value)
    if len(text) < 2:
        return False
    if any(pattern.match(text) for pattern in DESCRIPTION_PATTERNS):
        return True
    return text[0].isupper() and " " in text and not is_part_number(text)


def split_quantity_unit(value: str) -> tuple[float | None, str]:
    """Pull a trailing ``<qty><unit>`` off a cell or line; unit defaults to EA."""
    match = _QTY_UNIT_RE.search(value or "")
    if not match:
        return None, "EA"
    return parse_quantity(match.group("qty")), normalize_unit(match.group("unit"))


def _is_quantity_cell(value: str) -> bool:
    return bool(_QTY_UNIT_CELL_RE.match(value or ""))


def order_part_and_description(first: str, second: str) -> tuple[str, str]:
    """Decide which of two cells is the part number; may mis-swap ambiguous rows."""
    if is_part_number(first) and is_description(second):
        return first, second
    if is_part_number(second) and not is_part_number(first):
        return second, first
    return first, second


def _draft(part_number: str, description: str, quantity: float | None, unit: str = "") -> PartDraft | None:
    primary = normalize_part_number(part_number)
    if not primary or quantity is None or not is_part_number(primary):
        return None
    return PartDraft(
        part_number=primary,
        quantity=quantity,
        description=normalize_description(description),
        unit=normalize_unit(unit, primary),
    )


def parse_headerless_row(cells: list[str]) -> PartDraft | None:
    cells = [collapse_whitespace(cell) for cell in cells]
    if len(cells) >= 6 and _INDEX_RE.match(cells[0]) and _INDEX_RE.match(cells[1]):
        part_number, description = order_part_and_description(cells[2], cells[3])
        return _draft(part_number, description, parse_quantity(cells[5]), cells[4])

    # leading running number
    if len(cells) >= 4 and _INDEX_RE.match(cells[0]) and not _is_quantity_cell(cells[1]):
        cells = cells[1:]

    if len(cells) >= 3:
        part_number, description = order_part_and_description(cells[0], cells[1])
        quantity, unit = split_quantity_unit(cells[2])
        if len(cells) >= 4 and cells[3] and not _is_quantity_cell(cells[3]):
            unit = cells[3]
        return _draft(part_number, description, quantity, unit)

    if len(cells) == 2 and _is_quantity_cell(cells[1]) and is_part_number(cells[0]):
        quantity, unit = split_quantity_unit(cells[1])
        return _draft(cells[0], "", quantity, unit)
    return None


def parse_table_grids(grids: list[list[list[str]]]) -> list[PartDraft]:
    drafts: list[PartDraft] = []
    for grid in grids:
        for cells in grid:
            draft = parse_headerless_row(cells)
            if draft is not None:
                drafts.append(draft)
    return drafts


def parse_labelled_blocks(text: str) -> list[PartDraft]:
    """``PN: ...`` / ``Description: ...`` / ``Qty: ...`` blocks, one part per PN label."""
    drafts: list[PartDraft] = []
    current: dict[str, str] = {}

    def _flush() -> None:
        if not current.get("pn"):
            return
        quantity, unit = split_quantity_unit(current.get("qty", ""))
        draft = _draft(current["pn"], current.get("desc", ""), quantity, current.get("unit") or unit)
        if draft is not None:
            alternates = [
                normalize_part_number(token)
                for token in re.split(r"[,;\s]+", current.get("alt", ""))
                if token.strip() and token.strip() != "-"
            ]
            draft.alternates.extend(alternates)
            drafts.append(draft)

    lines = [line for line in (text or "").splitlines() if line.strip()]
    index = 0
    while index < len(lines):
        match = _LABEL_RE.match(lines[index])
        index += 1
        if not match:
            continue
        label = re.sub(r"[\s_/]+", "", match.group("label")).lower()
        value = collapse_whitespace(match.group("value"))
        # "PN:" alone on a line carries its value on the next line
        if not value and index < len(lines) and not _LABEL_RE.match(lines[index]):
            value = collapse_whitespace(lines[index])
            index += 1
        if label.startswith("alt"):
            key = "alt"
        elif label in {"pn", "p/n", "partno", "partno.", "partnumber"} or label.startswith("part"):
            key = "pn"
        elif label.startswith("desc"):
            key = "desc"
        elif label in {"qty", "quantity"}:
            key = "qty"
        else:
            key = "unit"
        if key == "pn":
            _flush()
            current = {}
        current[key] = value
    _flush()
    return drafts


def parse_line_rows(text: str) -> list[PartDraft]:
    drafts: list[PartDraft] = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line:
            continue
        columns = [column for column in _PSEUDO_COLUMN_RE.split(line) if column.strip()]
        draft: PartDraft | None = None
        if len(columns) >= 3:
            draft = parse_headerless_row(columns)
        if draft is None:
            match = _LINE_ROW_RE.match(line)
            if match:
                draft = _draft(
                    match.group("pn"),
                    match.group("desc"),
                    parse_quantity(match.group("qty")),
                    match.group("unit") or "",
                )
        if draft is not None:
            drafts.append(draft)
    return drafts


def parse_line_sequences(text: str) -> list[PartDraft]:
    """Part number on one line, then its description, then a quantity line ("1ea")."""
    lines = [collapse_whitespace(line) for line in (text or "").splitlines()]
    lines = [line for line in lines if line]
    drafts: list[PartDraft] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        head, _, rest = line.partition(" ")
        if not is_part_number(head):
            index += 1
            continue

        description = rest
        cursor = index + 1
        if not description and cursor < len(lines) and not _is_quantity_cell(lines[cursor]):
            description = lines[cursor]
            cursor += 1
        if cursor < len(lines) and _is_quantity_cell(lines[cursor]):
            quantity, unit = split_quantity_unit(lines[cursor])
            cursor += 1
            if cursor < len(lines) and lines[cursor].upper() in UNIT_WORDS and unit == "EA":
                unit = lines[cursor].upper()
                cursor += 1
            draft = _draft(head, description, quantity, unit)
            if draft is not None:
                if cursor < len(lines) and _AIRCRAFT_LINE_RE.match(lines[cursor]):
                    draft.aircraft_type = lines[cursor]
                    cursor += 1
                drafts.append(draft)
                index = cursor
                continue
        index += 1
    return drafts


def _valid_reference(token: str) -> bool:
    if len(token) < 3:
        return False
    if not re.search(r"[A-Z]", token, re.IGNORECASE) and "-" not in token:
        return False
    if not any(ch.isdigit() for ch in token):
        return False
    return not any(pattern.match(token) for pattern in _EXCLUDED_REFERENCE_RES)


def _quantity_near(text: str, token: str) -> float:
    index = text.find(token)
    if index == -1:
        return 1.0
    window = text[max(0, index - 50) : index + len(token) + 50]
    for pattern in _NEAR_QTY_RES:
        match = pattern.search(window)
        if match:
            quantity = parse_quantity(match.group(1))
            if quantity is not None and quantity < 10000:
                return quantity
    return 1.0


def _description_near(text: str, token: str) -> str:
    index = text.find(token)
    if index == -1:
        return ""
    window = text[max(0, index - 100) : index + len(token) + 100]
    match = _NEAR_DESCRIPTION_RE.search(window)
    return collapse_whitespace(match.group(1)) if match else ""


def parse_references(text: str) -> list[PartDraft]:
    """Loose ``P/N <token>`` and ``Item: X Qty: N`` mentions; quantity defaults to 1."""
    drafts: list[PartDraft] = []
    seen: set[str] = set()
    for match in _ITEM_QTY_RE.finditer(text or ""):
        token = normalize_part_number(match.group(1))
        if token.casefold() in seen or not _valid_reference(token):
            continue
        seen.add(token.casefold())
        drafts.append(
            PartDraft(
                part_number=token,
                quantity=parse_quantity(match.group(2)) or 1.0,
                description=_description_near(text, token),
            )
        )
    for match in _REFERENCE_RE.finditer(text or ""):
        token = normalize_part_number(match.group(1))
        if token.casefold() in seen or not _valid_reference(token):
            continue
        seen.add(token.casefold())
        drafts.append(
            PartDraft(
                part_number=token,
                quantity=_quantity_near(text, token),
                description=_description_near(text, token),
            )
        )
    return drafts


def parse_freeform(text: str, grids: list[list[list[str]]] | None = None) -> list[PartDraft]:
    """Best-effort fallback; the first mode that yields anything wins."""
    modes = (
        ("headerless_table", lambda: parse_table_grids(grids or [])),
        ("labelled_blocks", lambda: parse_labelled_blocks(text)),
        ("line_rows", lambda: parse_line_rows(text)),
        ("line_sequences", lambda: parse_line_sequences(text)),
        ("references", lambda: parse_references(text)),
    )
    for name, mode in modes:
        drafts = mode()
        if drafts:
            logger.debug("freeform mode %s produced %s draft(s)", name, len(drafts))
            return drafts
    return []
