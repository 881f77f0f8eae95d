import json

import pytest

from procurement_validator import (
    ProcurementLineItem,
    ProcurementValidationError,
    lead_time_days,
    validate_procurement_batch,
)
from prompts import QUOTE_TEMPLATE


def _item(**overrides) -> dict:
    item = {
        "supplier": "AeroSupply",
        "quote_id": "Q-1",
        "date": "2025-05-01",
        "part_number": "642-1000-505",
        "qty": 2.0,
        "is_moq": False,
        "um": "EA",
        "condition": "NE",
        "lead_time": 5.0,
        "time_unit": "D",
        "price": 100.5,
        "currency": "USD",
        "valid_to": "2025-06-01",
        "customer_request_id": 17,
        "delivery_condition": "EXW",
        "delivery_place": "Moscow",
        "item_note": "",
        "email_subject": "RFQ 642-1000-505",
        "stk_qty": 0.0,
        "description": "AIR INLET",
        "from": "sales@aerosupply.com",
        "moq": 1.0,
    }
    item.update(overrides)
    return item


def test_valid_batch_from_json_text() -> None:
    items = validate_procurement_batch(json.dumps([_item(), _item(part_number="642-1000-501")]))
    assert [item.part_number for item in items] == ["642-1000-505", "642-1000-501"]
    assert items[0].sender_email == "sales@aerosupply.com"
    assert items[0].to_wire()["from"] == "sales@aerosupply.com"
    print("SUCCESS: a valid batch is returned in order.")


def test_scenario_e_one_bad_item_rejects_batch() -> None:
    batch = [_item(), _item(currency="US"), _item()]
    with pytest.raises(ProcurementValidationError) as excinfo:
        validate_procurement_batch(json.dumps(batch))
    assert "1.currency" in excinfo.value.paths
    assert str(excinfo.value).startswith("Validation error: ")
    assert "1.currency" in str(excinfo.value)
    print("SUCCESS: one invalid currency rejects the whole batch with its path.")


def test_all_errors_are_reported_together() -> None:
    batch = [_item(qty=0.0), _item(um="BOX", condition="XX")]
    with pytest.raises(ProcurementValidationError) as excinfo:
        validate_procurement_batch(batch)
    paths = excinfo.value.paths
    assert "0.qty" in paths
    assert "1.um" in paths
    assert "1.condition" in paths
    print("SUCCESS: every invalid field is listed.")


def test_strict_types_reject_strings_for_numbers() -> None:
    with pytest.raises(ProcurementValidationError) as excinfo:
        validate_procurement_batch([_item(qty="2")])
    assert excinfo.value.paths == ["0.qty"]


def test_condition_in_maps_to_it() -> None:
    items = validate_procurement_batch([_item(condition="IN")])
    assert items[0].condition == "IT"
    print("SUCCESS: condition IN is accepted as IT.")


def test_stock_note_bumps_zero_lead_time() -> None:
    items = validate_procurement_batch(
        [_item(lead_time=0.0, item_note="Ex STOCK Moscow"), _item(lead_time=0.0, item_note="stk"), _item(lead_time=0.0)]
    )
    assert [item.lead_time for item in items] == [1, 1, 0]
    print("SUCCESS: zero lead time becomes one day for stock items.")


def test_code_fenced_json_is_accepted() -> None:
    text = "Here you go:\n```json\n" + json.dumps([_item()]) + "\n```"
    assert len(validate_procurement_batch(text)) == 1


def test_invalid_email_path_uses_wire_name() -> None:
    with pytest.raises(ProcurementValidationError) as excinfo:
        validate_procurement_batch([_item(**{"from": "not-an-email"})])
    assert excinfo.value.paths == ["0.from"]


def test_dates_must_be_real_calendar_days() -> None:
    with pytest.raises(ProcurementValidationError) as excinfo:
        validate_procurement_batch([_item(date="2025-02-30"), _item(valid_to="01.06.2025")])
    assert excinfo.value.paths == ["0.date", "1.valid_to"]


def test_lowercase_currency_is_normalized() -> None:
    items = validate_procurement_batch([_item(currency="eur")])
    assert items[0].currency == "EUR"


def test_invalid_json_and_non_array() -> None:
    with pytest.raises(ProcurementValidationError) as excinfo:
        validate_procurement_batch("not json at all")
    assert excinfo.value.paths == ["$"]

    with pytest.raises(ProcurementValidationError) as excinfo:
        validate_procurement_batch('{"supplier": "x"}')
    assert excinfo.value.paths == ["$"]

    assert validate_procurement_batch("[]") == []
    print("SUCCESS: undecodable or non-array input is rejected at the root.")


def test_bytes_input_is_decoded_or_rejected_at_root() -> None:
    items = validate_procurement_batch(json.dumps([_item(delivery_place="Москва")]).encode("utf-8"))
    assert items[0].delivery_place == "Москва"

    with pytest.raises(ProcurementValidationError) as excinfo:
        validate_procurement_batch(b"\xff\xfe[")
    assert excinfo.value.paths == ["$"]
    assert "Invalid UTF-8" in str(excinfo.value)
    print("SUCCESS: byte payloads are decoded as UTF-8 and bad encodings fail at the root.")


def test_lead_time_days() -> None:
    assert lead_time_days(3, "D") == 3
    assert lead_time_days(2, "W") == 14
    assert lead_time_days(1, "M") == 30
    items = validate_procurement_batch([_item(lead_time=2.0, time_unit="W")])
    assert items[0].lead_time_days() == 14


def test_quote_template_lists_every_field() -> None:
    for name, field_info in ProcurementLineItem.model_fields.items():
        wire_name = field_info.alias or name
        assert f'"{wire_name}":' in QUOTE_TEMPLATE, wire_name
    print("SUCCESS: the quote template documents every validated field.")


if __name__ == "__main__":
    test_valid_batch_from_json_text()
    test_scenario_e_one_bad_item_rejects_batch()
    test_all_errors_are_reported_together()
    test_strict_types_reject_strings_for_numbers()
    test_condition_in_maps_to_it()
    test_stock_note_bumps_zero_lead_time()
    test_code_fenced_json_is_accepted()
    test_invalid_email_path_uses_wire_name()
    test_dates_must_be_real_calendar_days()
    test_lowercase_currency_is_normalized()
    test_invalid_json_and_non_array()
    test_bytes_input_is_decoded_or_rejected_at_root()
    test_lead_time_days()
    test_quote_template_lists_every_field()
