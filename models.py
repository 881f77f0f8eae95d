from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Priority(str, Enum):
    AOG = "AOG"
    WSP = "WSP"
    USR = "USR"
    RTN = "RTN"


@dataclass
class PartDraft:
    """Working record filled in by a parsing strategy before finalisation."""

    part_number: str
    quantity: float
    description: str = ""
    unit: str = "EA"
    aircraft_type: str = ""
    notes: str = ""
    extra_remarks: list[str] = field(default_factory=list)
    alternates: list[str] = field(default_factory=list)
    span_alternates: list[str] = field(default_factory=list)
    priority_hint: str = ""


@dataclass(frozen=True)
class PartRequestRecord:
    part_number: str
    description: str
    quantity: float
    unit_of_measure: str
    aircraft_type: str
    priority: Priority
    alternate_part_numbers: tuple[str, ...]
    remarks: str

    def to_dict(self) -> dict[str, Any]:
        quantity: Any = self.quantity
        if float(quantity).is_integer():
            quantity = int(quantity)
        return {
            "part_number": self.part_number,
            "description": self.description,
            "qty": quantity,
            "um": self.unit_of_measure,
            "ac_type": self.aircraft_type,
            "priority": self.priority.value,
            "pn_alt": list(self.alternate_part_numbers),
            "remarks": self.remarks,
        }


@dataclass
class ParsingResult:
    company_name: str | None
    is_aviation_request: bool
    orders: list[PartRequestRecord] = field(default_factory=list)
    strategy: str = ""
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "airline": self.company_name,
            "isAviationRequest": self.is_aviation_request,
            "orders": [order.to_dict() for order in self.orders],
            "strategy": self.strategy,
            "warnings": list(self.warnings),
        }
