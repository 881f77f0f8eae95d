from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
import re
from typing import Callable

from bs4 import BeautifulSoup

from email_ingest import looks_like_html
from field_normalizer import collapse_whitespace, normalize_unit, parse_quantity
import freeform_parser
from header_synonyms import (
    ALTERNATE_PART_NUMBER,
    CONDITION_CODE,
    DEFAULT_SYNONYMS,
    ORDER_NUMBER,
    QUANTITY,
)
from models import PartDraft
from row_extractor import TableParseOptions, extract_rows
from table_locator import (
    REQUIRED_FIELDS,
    STRICT_REQUIRED_FIELDS,
    load_document,
    locate_table,
    table_grids,
)

_IFLY_QTY_UNIT_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*([A-Za-z]+)")


@dataclass
class EmailDocument:
    """One email body prepared for the parser chain; parsed HTML is cached."""

    html: str = ""
    text: str = ""
    subject: str = ""
    sender: str = ""

    @cached_property
    def soup(self) -> BeautifulSoup:
        return load_document(self.html)

    @cached_property
    def plain_text(self) -> str:
        if self.text.strip() and not looks_like_html(self.text):
            return self.text
        if not self.html and not self.text:
            return ""
        source = self.soup if self.html else load_document(self.text)
        return source.get_text("\n")

    @cached_property
    def grids(self) -> list[list[list[str]]]:
        return table_grids(self.soup) if self.html else []


ParseFn = Callable[[EmailDocument], list[PartDraft]]


def parse_table(
    document: EmailDocument,
    options: TableParseOptions,
    allow_split_header: bool = True,
) -> list[PartDraft]:
    if not document.html:
        return []
    required = STRICT_REQUIRED_FIELDS if options.require_description else REQUIRED_FIELDS
    match = locate_table(document.soup, options.synonyms, required, allow_split_header)
    if match is None:
        return []
    return extract_rows(match, options)


GENERIC_OPTIONS = TableParseOptions()

AEROFLOT_OPTIONS = TableParseOptions(description_fallback_to_part_number=True)

AEROFLOT_STRICT_OPTIONS = TableParseOptions(require_description=True)

ATECHNICS_OPTIONS = TableParseOptions(require_description=True)

AZUR_OPTIONS = TableParseOptions(
    description_fallback_to_part_number=True,
    remark_fields=((ORDER_NUMBER, "Order No"),),
    synonyms=DEFAULT_SYNONYMS.with_overrides(
        extend={ALTERNATE_PART_NUMBER: ("PN_SUBST_1", "PN_SUBST_2", "Alt P/N")}
    ),
)

LUKOIL_OPTIONS = TableParseOptions(
    description_fallback_to_part_number=True,
    reject_cyrillic_part_numbers=True,
    remark_fields=((CONDITION_CODE, "CD"),),
    synonyms=DEFAULT_SYNONYMS.with_overrides(extend={QUANTITY: ("Кол-во к заказу",)}),
)


def generic_table_parser(document: EmailDocument) -> list[PartDraft]:
    return parse_table(document, GENERIC_OPTIONS)


def aeroflot_table_parser(document: EmailDocument) -> list[PartDraft]:
    """Single header table, rowspan continuation rows carry alternates."""
    return parse_table(document, AEROFLOT_OPTIONS, allow_split_header=False)


def aeroflot_split_table_parser(document: EmailDocument) -> list[PartDraft]:
    """Header row sent as its own one-row table followed by the data table."""
    return parse_table(document, AEROFLOT_STRICT_OPTIONS, allow_split_header=True)


def atechnics_table_parser(document: EmailDocument) -> list[PartDraft]:
    return parse_table(document, ATECHNICS_OPTIONS, allow_split_header=False)


def atechnics_headerless_parser(document: EmailDocument) -> list[PartDraft]:
    drafts = freeform_parser.parse_table_grids(document.grids)
    return [draft for draft in drafts if draft.description]


def azur_table_parser(document: EmailDocument) -> list[PartDraft]:
    return parse_table(document, AZUR_OPTIONS)


def azur_text_parser(document: EmailDocument) -> list[PartDraft]:
    return freeform_parser.parse_line_rows(document.plain_text)


def lukoil_table_parser(document: EmailDocument) -> list[PartDraft]:
    return parse_table(document, LUKOIL_OPTIONS)


def _ifly_quantity_unit(cell: str) -> tuple[float | None, str]:
    match = _IFLY_QTY_UNIT_RE.search(cell or "")
    if match:
        return parse_quantity(match.group(1)), normalize_unit(match.group(2))
    return parse_quantity(cell), "EA"


def _ifly_row(headers: list[str], cells: list[str]) -> PartDraft | None:
    cells = [collapse_whitespace(cell) for cell in cells]

    def _at(index: int) -> str:
        return cells[index] if 0 <= index < len(cells) else ""

    remarks = ""
    if "description" in headers and "p/n" in headers:
        part_number = _at(headers.index("p/n"))
        description = _at(headers.index("description"))
        quantity_index = headers.index("quantity") if "quantity" in headers else -1
        quantity, unit = parse_quantity(_at(quantity_index)), "EA"
    elif len(headers) == 4:
        part_number, description = _at(0), _at(1)
        quantity, unit = _ifly_quantity_unit(_at(2))
        remarks = _at(3)
    elif freeform_parser.is_part_number(_at(0)):
        part_number, description = _at(0), _at(1)
        quantity, unit = _ifly_quantity_unit(_at(2))
        remarks = _at(3)
    elif freeform_parser.is_description(_at(0)) and freeform_parser.is_part_number(_at(1)):
        part_number, description = _at(1), _at(0)
        quantity, unit = parse_quantity(_at(2)), "EA"
    else:
        return None

    if not part_number or not description or quantity is None:
        return None
    return PartDraft(
        part_number=part_number,
        quantity=quantity,
        description=description,
        unit=normalize_unit(unit, part_number),
        notes=remarks,
        priority_hint=remarks,
    )


def ifly_table_parser(document: EmailDocument) -> list[PartDraft]:
    """Format picked per table from its first row; the first row is never data."""
    drafts: list[PartDraft] = []
    for grid in document.grids:
        if len(grid) < 2:
            continue
        headers = [cell.lower() for cell in grid[0]]
        for cells in grid[1:]:
            draft = _ifly_row(headers, cells)
            if draft is not None:
                drafts.append(draft)
    return drafts


def yakutia_parser(document: EmailDocument) -> list[PartDraft]:
    drafts = freeform_parser.parse_labelled_blocks(document.plain_text)
    return [draft for draft in drafts if draft.description]


def rossiya_parser(document: EmailDocument) -> list[PartDraft]:
    return freeform_parser.parse_line_sequences(document.plain_text)


def reference_parser(document: EmailDocument) -> list[PartDraft]:
    return freeform_parser.parse_references(document.plain_text)


def freeform_fallback_parser(document: EmailDocument) -> list[PartDraft]:
    return freeform_parser.parse_freeform(document.plain_text, document.grids)

