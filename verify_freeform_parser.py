import pytest

import freeform_parser
from freeform_parser import (
    is_description,
    is_part_number,
    order_part_and_description,
    split_quantity_unit,
)
import vendor_parsers
from vendor_parsers import EmailDocument


@pytest.mark.parametrize(
    "value",
    ["642-1000-505", "MS21042.3", "NAS1149/F0363", "3214552", "AN960C10L", "d5555-12", "2311-1-2"],
)
def test_part_number_shapes(value: str) -> None:
    assert is_part_number(value)


@pytest.mark.parametrize("value", ["", "SEAL", "AIR INLET", "HOSE-ASSY", "12 34", "642 1000", "ALT-"])
def test_not_part_numbers(value: str) -> None:
    assert not is_part_number(value)


@pytest.mark.parametrize("value", ["SEAL", "HOSE-ASSY", "SEAL,RING OUTER", "Ball bearing assy", "ФИЛЬТР ТОПЛИВНЫЙ"])
def test_description_shapes(value: str) -> None:
    assert is_description(value)


def test_order_part_and_description_swaps_when_needed() -> None:
    assert order_part_and_description("AN960C10L", "WASHER") == ("AN960C10L", "WASHER")
    assert order_part_and_description("SEAL RING", "MS29513-8") == ("MS29513-8", "SEAL RING")
    print("SUCCESS: ambiguous two-column rows are swapped using the part-number heuristic.")


def test_split_quantity_unit_defaults_to_ea() -> None:
    assert split_quantity_unit("2") == (2.0, "EA")
    assert split_quantity_unit("1ea") == (1.0, "EA")
    assert split_quantity_unit("4 KIT") == (4.0, "KIT")
    assert split_quantity_unit("no quantity") == (None, "EA")
    print("SUCCESS: trailing quantity+unit is extracted with EA default.")


def test_headerless_rows_with_index_columns() -> None:
    html = (
        "<table>"
        "<tr><td>1</td><td>1</td><td>AN960C10L</td><td>WASHER</td><td>EA</td><td>100</td></tr>"
        "<tr><td>2</td><td>1</td><td>SEAL RING</td><td>MS29513-8</td><td>EA</td><td>5</td></tr>"
        "</table>"
    )
    document = EmailDocument(html=html)
    assert vendor_parsers.atechnics_table_parser(document) == []
    drafts = vendor_parsers.atechnics_headerless_parser(document)
    assert [(d.part_number, d.description, d.quantity, d.unit) for d in drafts] == [
        ("AN960C10L", "WASHER", 100.0, "EA"),
        ("MS29513-8", "SEAL RING", 5.0, "EA"),
    ]
    print("SUCCESS: headerless index/part/description rows parse with column swap.")


def test_line_rows_with_pseudo_columns() -> None:
    text = (
        "Please quote:\n"
        "642-1000-505    AIR INLET    2    EA\n"
        "MS29513-8 | O-RING | 10 | PC\n"
        "9978M69G40 SEAL, RETAINER CPRSR STTR 2ea\n"
        "Best regards"
    )
    drafts = freeform_parser.parse_line_rows(text)
    assert [(d.part_number, d.quantity, d.unit) for d in drafts] == [
        ("642-1000-505", 2.0, "EA"),
        ("MS29513-8", 10.0, "PC"),
        ("9978M69G40", 2.0, "EA"),
    ]
    assert drafts[2].description == "SEAL, RETAINER CPRSR STTR"
    print("SUCCESS: single-line rows parse from tabs, wide spaces, pipes and trailing qty.")


def test_line_sequences() -> None:
    text = (
        "Dear colleagues,\n\n"
        "3822478-1\nBALL BEARING ASSY\n1\nEA\n\n"
        "68689-2 BUTTON-COLD\n1ea\nA320\n\n"
        "Best regards!"
    )
    drafts = freeform_parser.parse_line_sequences(text)
    assert [(d.part_number, d.description, d.quantity, d.unit) for d in drafts] == [
        ("3822478-1", "BALL BEARING ASSY", 1.0, "EA"),
        ("68689-2", "BUTTON-COLD", 1.0, "EA"),
    ]
    assert drafts[1].aircraft_type == "A320"
    print("SUCCESS: part/description/quantity line sequences parse.")


def test_labelled_blocks() -> None:
    text = (
        "PN:\nC20262000\nDescription:\nFILTER ELEMENT\nQty:\n2\nStore_Unit:\nea\nAlt/ PN:\nC20262001\n"
        "PN: 3214552\nDescription: SEAL\nQty: 4\n"
    )
    drafts = freeform_parser.parse_labelled_blocks(text)
    assert [(d.part_number, d.description, d.quantity, d.unit) for d in drafts] == [
        ("C20262000", "FILTER ELEMENT", 2.0, "EA"),
        ("3214552", "SEAL", 4.0, "EA"),
    ]
    assert drafts[0].alternates == ["C20262001"]
    print("SUCCESS: labelled PN/Description/Qty blocks parse, value on same or next line.")


def test_references_default_quantity_to_one() -> None:
    text = (
        "Good day, we need DRIVE UNIT ASSY-ANT P/N 622-5135-802 recovery.\n"
        "Please advise price and lead time for the unit above, thank you.\n"
        "Also Part Number: ABC-123 qty: 3\n"
        "RFQ dated 12/05/2025"
    )
    drafts = freeform_parser.parse_references(text)
    assert [(d.part_number, d.quantity) for d in drafts] == [("622-5135-802", 1.0), ("ABC-123", 3.0)]
    print("SUCCESS: inline P/N references parse with quantity 1 unless stated.")


def test_parse_freeform_returns_first_productive_mode() -> None:
    text = "P/N 622-5135-802\n642-1000-505    AIR INLET    2    EA\n"
    drafts = freeform_parser.parse_freeform(text)
    assert [d.part_number for d in drafts] == ["642-1000-505"]
    assert freeform_parser.parse_freeform("Thank you for your order.") == []
    print("SUCCESS: references are only used when structured modes find nothing.")


if __name__ == "__main__":
    test_order_part_and_description_swaps_when_needed()
    test_split_quantity_unit_defaults_to_ea()
    test_headerless_rows_with_index_columns()
    test_line_rows_with_pseudo_columns()
    test_line_sequences()
    test_labelled_blocks()
    test_references_default_quantity_to_one()
    test_parse_freeform_returns_first_productive_mode()
