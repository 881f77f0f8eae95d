from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from header_synonyms import (
    ALTERNATE_PART_NUMBER,
    DEFAULT_SYNONYMS,
    DESCRIPTION,
    PART_NUMBER,
    QUANTITY,
    RESOLUTION_ORDER,
    SynonymTable,
    normalize_header,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = (PART_NUMBER, QUANTITY)
STRICT_REQUIRED_FIELDS: tuple[str, ...] = (PART_NUMBER, QUANTITY, DESCRIPTION)
_BLOCK_TAGS = frozenset({"p", "div", "li", "tr"})


@dataclass(frozen=True)
class ColumnIndexMap:
    indices: dict[str, int]
    alternate_indices: tuple[int, ...] = ()

    def get(self, field_name: str) -> int | None:
        return self.indices.get(field_name)

    def has(self, field_name: str) -> bool:
        return field_name in self.indices

    @property
    def max_index(self) -> int:
        candidates = list(self.indices.values()) + list(self.alternate_indices)
        return max(candidates) if candidates else -1


@dataclass
class TableMatch:
    columns: ColumnIndexMap
    headers: list[str]
    data_rows: list[Tag] = field(default_factory=list)
    table_index: int = 0
    split_header: bool = False


def load_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def table_row_tags(table: Tag) -> list[Tag]:
    # nested tables belong to their own enumeration
    return [row for row in table.find_all("tr") if row.find_parent("table") is table]


def row_cells(row: Tag, include_header_cells: bool = False) -> list[Tag]:
    names = ["td", "th"] if include_header_cells else ["td"]
    return row.find_all(names, recursive=False)


def cell_text(cell: Tag) -> str:
    """Cell text with <br> and block breaks turned into newlines.

    Inline runs are joined without a separator: Outlook and Word split one
    value over several <span>s ("642-1000-" + "505").
    """
    parts: list[str] = []
    for node in cell.descendants:
        if isinstance(node, NavigableString):
            if not isinstance(node, Comment):
                parts.append(str(node))
        elif node.name == "br" or node.name in _BLOCK_TAGS:
            parts.append("\n")
    return "".join(parts)


def header_cells(row: Tag) -> list[str]:
    return [normalize_header(cell_text(cell)) for cell in row_cells(row, include_header_cells=True)]


def resolve_columns(headers: list[str], synonyms: SynonymTable = DEFAULT_SYNONYMS) -> ColumnIndexMap:
    claimed: set[int] = set()
    alternate_indices: list[int] = []
    for index, header in enumerate(headers):
        if header and synonyms.matches(ALTERNATE_PART_NUMBER, header):
            alternate_indices.append(index)
            claimed.add(index)

    indices: dict[str, int] = {}
    for field_name in RESOLUTION_ORDER:
        for index, header in enumerate(headers):
            if index in claimed or not header:
                continue
            if synonyms.matches(field_name, header):
                indices[field_name] = index
                claimed.add(index)
                break
    return ColumnIndexMap(indices=indices, alternate_indices=tuple(alternate_indices))


def qualifies(columns: ColumnIndexMap, required: Iterable[str]) -> bool:
    return all(columns.has(field_name) for field_name in required)


def locate_table(
    soup: BeautifulSoup,
    synonyms: SynonymTable = DEFAULT_SYNONYMS,
    required: Iterable[str] = REQUIRED_FIELDS,
    allow_split_header: bool = True,
) -> TableMatch | None:
    """Return the first table whose header row resolves the required fields."""
    required = tuple(required)
    tables = soup.find_all("table")
    if not tables:
        return None

    if allow_split_header and len(tables) >= 2:
        first_rows = table_row_tags(tables[0])
        second_rows = table_row_tags(tables[1])
        if len(first_rows) == 1 and len(second_rows) > 1:
            headers = header_cells(first_rows[0])
            columns = resolve_columns(headers, synonyms)
            if qualifies(columns, required):
                logger.debug("split header table qualifies: headers=%s", headers)
                return TableMatch(
                    columns=columns,
                    headers=headers,
                    data_rows=second_rows,
                    table_index=1,
                    split_header=True,
                )

    for table_index, table in enumerate(tables):
        rows = table_row_tags(table)
        if not rows:
            continue
        headers = header_cells(rows[0])
        columns = resolve_columns(headers, synonyms)
        if not qualifies(columns, required):
            continue
        logger.debug("table %s qualifies: headers=%s", table_index, headers)
        return TableMatch(
            columns=columns,
            headers=headers,
            data_rows=rows[1:],
            table_index=table_index,
        )
    return None


def table_grids(soup: BeautifulSoup) -> list[list[list[str]]]:
    """Plain text grids of every table, for strategies that need no header."""
    grids: list[list[list[str]]] = []
    for table in soup.find_all("table"):
        grid: list[list[str]] = []
        for row in table_row_tags(table):
            cells = [normalize_header(cell_text(cell)) for cell in row_cells(row, include_header_cells=True)]
            if any(cells):
                grid.append(cells)
        if grid:
            grids.append(grid)
    return grids
