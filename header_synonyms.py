from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Iterable, Mapping

PART_NUMBER = "part_number"
DESCRIPTION = "description"
QUANTITY = "quantity"
UNIT = "unit"
AIRCRAFT_TYPE = "aircraft_type"
NOTES = "notes"
ALTERNATE_PART_NUMBER = "alternate_part_number"
ORDER_NUMBER = "order_number"
CONDITION_CODE = "condition_code"

# Alternate columns are claimed first because their headers ("ALT PN",
# "PN_SUBST") also contain the part-number synonyms.
RESOLUTION_ORDER: tuple[str, ...] = (
    PART_NUMBER,
    QUANTITY,
    DESCRIPTION,
    AIRCRAFT_TYPE,
    NOTES,
    ORDER_NUMBER,
    CONDITION_CODE,
    UNIT,
)

FIELD_SYNONYMS: dict[str, tuple[str, ...]] = {
    PART_NUMBER: (
        "P/N",
        "Part No.",
        "Part Number",
        "Part No",
        "PARTNO",
        "PARTNUMBER",
        "PART #",
        "Part #",
        "PN",
        "Партийный номер",
        "Партномер",
        "Номер детали",
    ),
    DESCRIPTION: (
        "Description",
        "DISCRIPTION",
        "Desc",
        "Name",
        "Nomenclature",
        "Expendable Material",
        "Наименование",
        "Описание",
    ),
    QUANTITY: (
        "Quantity",
        "QTY",
        "Qty.",
        "QTE",
        "Q-ty",
        "QL",
        "Кол-во",
        "Количество",
    ),
    UNIT: (
        "Measure Unit",
        "MEASURE_UNIT",
        "Unit",
        "UOM",
        "UM",
        "MU",
        "M/U",
        "Ед",
    ),
    AIRCRAFT_TYPE: (
        "F/A Type",
        "A/C Type",
        "AC Type",
        "A/C",
        "AC",
        "Aircraft",
        "Receiver",
        "Тип ВС",
    ),
    NOTES: (
        "Notes",
        "Note",
        "Comments",
        "Comment",
        "Remarks",
        "Remark",
        "Примечания",
        "Примечание",
    ),
    ALTERNATE_PART_NUMBER: (
        "PN_SUBST",
        "ALT PN",
        "Alt Part Number",
        "Alternate",
        "Interchangeability",
        "ALT",
        "ATL",
        "Взаимозаменяемость",
    ),
    ORDER_NUMBER: (
        "Order No.",
        "Order Number",
        "Order No",
        "ORDER",
        "Номер заказа",
    ),
    CONDITION_CODE: ("CD",),
}

# Synonyms this short must match a whole token, otherwise "UM" would claim
# "Number" and "AC" would claim "Contact".
_SHORT_SYNONYM_MAX = 3


def normalize_header(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def _token_pattern(synonym: str) -> re.Pattern[str]:
    escaped = re.escape(synonym)
    return re.compile(rf"(?<![0-9A-Za-zЀ-ӿ]){escaped}(?![0-9A-Za-zЀ-ӿ])", re.IGNORECASE)


def header_matches(header: str, synonym: str) -> bool:
    """Header-contains-synonym, case-insensitive, on whitespace-collapsed text."""
    normalized = normalize_header(header)
    if not normalized or not synonym:
        return False
    if len(synonym) <= _SHORT_SYNONYM_MAX:
        return bool(_token_pattern(synonym).search(normalized))
    return synonym.casefold() in normalized.casefold()


@dataclass(frozen=True)
class SynonymTable:
    fields: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(FIELD_SYNONYMS))

    def synonyms(self, field_name: str) -> tuple[str, ...]:
        return tuple(self.fields.get(field_name, ()))

    def matches(self, field_name: str, header: str) -> bool:
        return any(header_matches(header, synonym) for synonym in self.synonyms(field_name))

    def with_overrides(
        self,
        replace: Mapping[str, Iterable[str]] | None = None,
        extend: Mapping[str, Iterable[str]] | None = None,
    ) -> "SynonymTable":
        merged: dict[str, tuple[str, ...]] = {
            name: tuple(values) for name, values in self.fields.items()
        }
        for name, values in (replace or {}).items():
            merged[name] = tuple(values)
        for name, values in (extend or {}).items():
            existing = list(merged.get(name, ()))
            for value in values:
                if value not in existing:
                    existing.append(value)
            merged[name] = tuple(existing)
        return SynonymTable(fields=merged)


DEFAULT_SYNONYMS = SynonymTable()
