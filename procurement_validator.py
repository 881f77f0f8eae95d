"""Strict validation of operator- or LLM-authored supplier quote batches.

Unlike the email path, nothing here is best-effort: one bad line item rejects
the whole batch and the caller gets every problem at once, each annotated with
its ``<index>.<field>`` path.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
import json
import logging
from typing import Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from json_text import loads_embedded_array

logger = logging.getLogger(__name__)

UnitOfMeasure = Literal[
    "EA", "M", "FT", "YD", "KG", "LB", "G", "L", "OZ", "RO", "KT", "CA", "PR", "PK", "ML", "IN"
]
ConditionCode = Literal["NE", "NS", "OH", "SV", "IT", "FN", "RP"]
TimeUnit = Literal["D", "W", "M"]
Incoterm = Literal["EXW", "FCA", "CPT", "CIP", "DPU", "DAP", "DDP", "FAS", "FOB", "CFR", "CIF"]

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
LEAD_TIME_DAYS_PER_UNIT = {"D": 1, "W": 7, "M": 30}
_STOCK_MARKERS = ("stock", "stk")


@dataclass(frozen=True)
class ProcurementFieldError:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ProcurementValidationError(ValueError):
    def __init__(self, errors: list[ProcurementFieldError]) -> None:
        self.errors = errors
        super().__init__("Validation error: " + ", ".join(str(error) for error in errors))

    @property
    def paths(self) -> list[str]:
        return [error.path for error in self.errors]


class ProcurementLineItem(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    supplier: str = Field(min_length=1)
    quote_id: Optional[Union[int, str]] = None
    date: str = Field(pattern=ISO_DATE_PATTERN)
    part_number: str = Field(min_length=1)
    qty: float = Field(gt=0)
    is_moq: bool = False
    um: UnitOfMeasure
    condition: ConditionCode
    lead_time: float = Field(ge=0)
    time_unit: TimeUnit = "D"
    price: float = Field(gt=0)
    currency: str = Field(pattern=r"^[A-Za-z]{3}$")
    valid_to: str = Field(pattern=ISO_DATE_PATTERN)
    customer_request_id: Optional[Union[int, str]] = None
    delivery_condition: Incoterm
    delivery_place: str = Field(min_length=1)
    item_note: str = ""
    email_subject: str = Field(min_length=1)
    stk_qty: float = Field(default=0, ge=0)
    description: str = ""
    sender_email: EmailStr = Field(alias="from")
    moq: float = Field(default=1, gt=0)

    @field_validator("condition", mode="before")
    @classmethod
    def _map_legacy_condition(cls, value: Any) -> Any:
        # "IN" (inspected) is what suppliers write for IT
        if isinstance(value, str) and value.strip().upper() == "IN":
            return "IT"
        return value

    @field_validator("date", "valid_to")
    @classmethod
    def _check_calendar_date(cls, value: str) -> str:
        try:
            date_type.fromisoformat(value)
        except ValueError:
            raise ValueError("not a valid calendar date")
        return value

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _stock_lead_time(self) -> "ProcurementLineItem":
        note = self.item_note.lower()
        if self.lead_time == 0 and any(marker in note for marker in _STOCK_MARKERS):
            self.lead_time = 1
        return self

    def lead_time_days(self) -> int:
        return lead_time_days(self.lead_time, self.time_unit)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


_BATCH_ADAPTER = TypeAdapter(list[ProcurementLineItem])


def lead_time_days(lead_time: float, time_unit: str = "D") -> int:
    multiplier = LEAD_TIME_DAYS_PER_UNIT.get((time_unit or "D").upper(), 1)
    return int(round(lead_time * multiplier))


def _format_path(location: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in location) or "$"


def _decode_batch(raw: str | bytes) -> Any:
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    except UnicodeDecodeError as exc:
        raise ProcurementValidationError(
            [ProcurementFieldError(path="$", message=f"Invalid UTF-8: {exc.reason}")]
        ) from exc
    try:
        return loads_embedded_array(text)
    except json.JSONDecodeError as exc:
        raise ProcurementValidationError(
            [ProcurementFieldError(path="$", message=f"Invalid JSON: {exc.msg}")]
        ) from exc


def validate_procurement_batch(raw: str | bytes | list[Any]) -> list[ProcurementLineItem]:
    """Validate a whole batch; any invalid item raises and nothing is returned."""
    data: Any = _decode_batch(raw) if isinstance(raw, (str, bytes)) else raw

    try:
        items = _BATCH_ADAPTER.validate_python(data)
    except ValidationError as exc:
        errors = [
            ProcurementFieldError(path=_format_path(tuple(error["loc"])), message=error["msg"])
            for error in exc.errors()
        ]
        logger.warning("Procurement batch rejected with %s error(s)", len(errors))
        raise ProcurementValidationError(errors) from exc

    logger.info("Procurement batch accepted: %s item(s)", len(items))
    return items
