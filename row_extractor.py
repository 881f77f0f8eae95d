from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import reduce
import logging
from typing import Callable, NamedTuple

from bs4 import Tag

from alternate_parts import split_inline_alternate, tokenize_alternate_cell
from field_normalizer import (
    clean_text,
    collapse_whitespace,
    contains_cyrillic,
    normalize_description,
    normalize_part_number,
    normalize_unit,
    parse_quantity,
)
from header_synonyms import (
    AIRCRAFT_TYPE,
    DEFAULT_SYNONYMS,
    DESCRIPTION,
    NOTES,
    PART_NUMBER,
    QUANTITY,
    UNIT,
    SynonymTable,
)
from models import PartDraft
from table_locator import TableMatch, cell_text, row_cells

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableParseOptions:
    require_description: bool = False
    description_fallback_to_part_number: bool = False
    reject_cyrillic_part_numbers: bool = False
    uppercase_unit: bool = True
    # (field, label) pairs rendered as "label: value" remark segments
    remark_fields: tuple[tuple[str, str], ...] = ()
    synonyms: SynonymTable = field(default=DEFAULT_SYNONYMS)


class OpenRecord(NamedTuple):
    draft: PartDraft
    remaining_span: int


class FoldState(NamedTuple):
    emitted: tuple[PartDraft, ...]
    open_record: OpenRecord | None


def _cell_value(cells: list[Tag], index: int | None) -> str:
    if index is None or index >= len(cells):
        return ""
    return clean_text(cell_text(cells[index]))


def _rowspan(cell: Tag) -> int:
    try:
        return max(int(str(cell.get("rowspan", "1")).strip() or "1"), 1)
    except ValueError:
        return 1


def build_draft(cells: list[Tag], match: TableMatch, options: TableParseOptions) -> PartDraft | None:
    """Turn one data row into a draft, or ``None`` when the row must be skipped."""
    columns = match.columns
    if len(cells) <= columns.max_index:
        return None

    raw_part = _cell_value(cells, columns.get(PART_NUMBER))
    raw_quantity = _cell_value(cells, columns.get(QUANTITY))
    if not raw_part or not raw_quantity:
        return None

    primary, _ = split_inline_alternate(raw_part)
    primary = normalize_part_number(primary)
    if not primary:
        return None
    if options.reject_cyrillic_part_numbers and contains_cyrillic(primary):
        return None

    quantity = parse_quantity(raw_quantity)
    if quantity is None:
        return None

    fallback = primary if options.description_fallback_to_part_number else ""
    description = normalize_description(_cell_value(cells, columns.get(DESCRIPTION)), fallback)
    if options.require_description and not description:
        return None

    alternates: list[str] = []
    for index in columns.alternate_indices:
        alternates.extend(tokenize_alternate_cell(_cell_value(cells, index)))

    extra_remarks: list[str] = []
    for field_name, label in options.remark_fields:
        value = collapse_whitespace(_cell_value(cells, columns.get(field_name)))
        if value and value != "-":
            extra_remarks.append(f"{label}: {value}")

    notes = _cell_value(cells, columns.get(NOTES))
    return PartDraft(
        part_number=normalize_part_number(collapse_whitespace(raw_part)),
        quantity=quantity,
        description=description,
        unit=normalize_unit(
            _cell_value(cells, columns.get(UNIT)), primary, uppercase=options.uppercase_unit
        ),
        aircraft_type=collapse_whitespace(_cell_value(cells, columns.get(AIRCRAFT_TYPE))),
        notes=notes,
        extra_remarks=extra_remarks,
        alternates=alternates,
        priority_hint=notes,
    )


def _close(state: FoldState) -> FoldState:
    if state.open_record is None:
        return state
    return FoldState(state.emitted + (state.open_record.draft,), None)


def _continuation_alternate(cells: list[Tag]) -> str:
    for cell in cells:
        text = normalize_part_number(clean_text(cell_text(cell)))
        if text and text != "-":
            return text
    return ""


def _step(match: TableMatch, options: TableParseOptions) -> Callable[[FoldState, Tag], FoldState]:
    part_index = match.columns.get(PART_NUMBER)

    def step(state: FoldState, row: Tag) -> FoldState:
        cells = row_cells(row)
        if not cells:
            return state

        open_record = state.open_record
        # rows under a spanning part-number cell have one cell fewer
        if open_record is not None and open_record.remaining_span > 0 and len(cells) <= match.columns.max_index:
            alternate = _continuation_alternate(cells)
            draft = open_record.draft
            if alternate:
                draft = replace(draft, span_alternates=[*draft.span_alternates, alternate])
            return FoldState(state.emitted, OpenRecord(draft, open_record.remaining_span - 1))

        state = _close(state)
        draft = build_draft(cells, match, options)
        if draft is None:
            return state

        span = 1
        if part_index is not None and part_index < len(cells):
            span = _rowspan(cells[part_index])
        return FoldState(state.emitted, OpenRecord(draft, span - 1))

    return step


def extract_rows(match: TableMatch, options: TableParseOptions | None = None) -> list[PartDraft]:
    options = options or TableParseOptions()
    initial = FoldState(emitted=(), open_record=None)
    final = _close(reduce(_step(match, options), match.data_rows, initial))
    logger.debug("table %s yielded %s row(s)", match.table_index, len(final.emitted))
    return list(final.emitted)
