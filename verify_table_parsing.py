import math

import pytest

from alternate_parts import finalize_record
from header_synonyms import NOTES, PART_NUMBER, QUANTITY, UNIT
from models import PartDraft, Priority
from row_extractor import TableParseOptions, extract_rows
from table_locator import load_document, locate_table, resolve_columns
import vendor_parsers
from vendor_parsers import EmailDocument


SCENARIO_A_HTML = """
<html><body>
<p>Dear colleagues, please quote.</p>
<table>
  <tr><th>Part No.</th><th>Description</th><th>Qty</th><th>Unit</th><th>Notes</th></tr>
  <tr>
    <td>642-1000-505 (ALT 642-1000-501)</td>
    <td>AIR INLET (NOSE COWL)</td>
    <td>1</td>
    <td>EA</td>
    <td>NEW and OH / ALT 642-1000-501-1</td>
  </tr>
</table>
</body></html>
"""


def _table(header: list[str], rows: list[list[str]]) -> str:
    head = "".join(f"<th>{cell}</th>" for cell in header)
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    return f"<table><tr>{head}</tr>{body}</table>"


def test_scenario_a_inline_and_note_alternates() -> None:
    drafts = vendor_parsers.generic_table_parser(EmailDocument(html=SCENARIO_A_HTML))
    assert len(drafts) == 1

    record = finalize_record(drafts[0], Priority.RTN)
    assert record.part_number == "642-1000-505"
    assert record.alternate_part_numbers == ("642-1000-501", "642-1000-501-1")
    assert record.quantity == 1
    assert record.unit_of_measure == "EA"
    assert record.description == "AIR INLET (NOSE COWL)"
    assert "NEW and OH" in record.remarks
    assert "Alt P/N: 642-1000-501, 642-1000-501-1" in record.remarks
    assert record.remarks.count("Alt P/N:") == 1
    print("SUCCESS: inline (ALT ...) and notes ALT markers merge into one Alt P/N segment.")


def test_scenario_c_comma_decimal_quantity() -> None:
    html = _table(["P/N", "Description", "Qty"], [["123-456", "GASKET", "2,5"]])
    drafts = vendor_parsers.generic_table_parser(EmailDocument(html=html))
    assert len(drafts) == 1
    assert drafts[0].quantity == 2.5
    print("SUCCESS: '2,5' parses as 2.5.")


def test_header_resolution_claims_alternate_columns_first() -> None:
    columns = resolve_columns(["Alt Part Number", "Part Number", "QTY REQ", "UOM", "Remarks"])
    assert columns.alternate_indices == (0,)
    assert columns.get(PART_NUMBER) == 1
    assert columns.get(QUANTITY) == 2
    assert columns.get(UNIT) == 3
    assert columns.get(NOTES) == 4
    print("SUCCESS: alternate headers never steal the part-number column.")


def test_short_synonyms_match_whole_tokens_only() -> None:
    columns = resolve_columns(["Number", "Quantity", "Description"])
    assert columns.get(PART_NUMBER) is None
    assert columns.get(UNIT) is None
    assert columns.get(QUANTITY) == 1
    print("SUCCESS: 'UM' and 'AC' do not match inside longer words.")


def test_first_qualifying_table_wins() -> None:
    html = (
        _table(["Contact", "Phone"], [["John", "123"]])
        + _table(["P/N", "Qty"], [["111-222", "3"]])
        + _table(["P/N", "Qty"], [["999-999", "1"]])
    )
    match = locate_table(load_document(html))
    assert match is not None
    assert match.table_index == 1
    drafts = extract_rows(match)
    assert [draft.part_number for draft in drafts] == ["111-222"]
    print("SUCCESS: scanning stops at the first qualifying table.")


def test_no_qualifying_table_returns_empty() -> None:
    html = _table(["Name", "Phone"], [["John", "123"]])
    assert vendor_parsers.generic_table_parser(EmailDocument(html=html)) == []
    print("SUCCESS: a document without a qualifying table yields nothing.")


def test_malformed_rows_are_skipped() -> None:
    html = _table(
        ["P/N", "Description", "Qty", "Unit"],
        [
            ["111-222", "SEAL", "2", "EA"],
            ["", "EMPTY PN", "1", "EA"],
            ["333-444", "BAD QTY", "n/a", "EA"],
            ["555-666", "SHORT ROW"],
            ["777-888", "ZERO", "0", "EA"],
            ["999-000", "RING", "4", ""],
        ],
    )
    drafts = vendor_parsers.generic_table_parser(EmailDocument(html=html))
    assert [draft.part_number for draft in drafts] == ["111-222", "999-000"]
    assert drafts[1].unit == "EA"
    print("SUCCESS: rows without part number or usable quantity are skipped.")


def test_unit_equal_to_part_number_falls_back_to_ea() -> None:
    html = _table(["P/N", "Description", "Qty", "UOM"], [["ABC-123", "BOLT", "5", "ABC-123"]])
    drafts = vendor_parsers.generic_table_parser(EmailDocument(html=html))
    assert drafts[0].unit == "EA"
    print("SUCCESS: a unit cell repeating the part number is treated as misaligned.")


def test_rowspan_continuation_rows_add_alternates() -> None:
    html = """
    <table>
      <tr><th>P/N</th><th>Description</th><th>Qty</th></tr>
      <tr><td rowspan="3">123-456</td><td>VALVE</td><td>2</td></tr>
      <tr><td>123-457</td></tr>
      <tr><td>123-458</td></tr>
      <tr><td>999-111</td><td>PUMP</td><td>1</td></tr>
    </table>
    """
    drafts = vendor_parsers.aeroflot_table_parser(EmailDocument(html=html))
    assert [draft.part_number for draft in drafts] == ["123-456", "999-111"]
    assert drafts[0].span_alternates == ["123-457", "123-458"]
    assert drafts[1].span_alternates == []

    record = finalize_record(drafts[0], Priority.RTN)
    assert record.alternate_part_numbers == ("123-457", "123-458")
    assert record.remarks == "Alt P/N: 123-457, 123-458"
    print("SUCCESS: rowspan continuation rows contribute alternates to the open record.")


def test_split_header_table() -> None:
    html = (
        "<table><tr><td>P/N</td><td>Description</td><td>Qty</td></tr></table>"
        "<table>"
        "<tr><td>111-222</td><td>SEAL</td><td>4</td></tr>"
        "<tr><td>333-444</td><td>RING</td><td>2</td></tr>"
        "</table>"
    )
    document = EmailDocument(html=html)
    assert vendor_parsers.aeroflot_table_parser(document) == []
    drafts = vendor_parsers.aeroflot_split_table_parser(document)
    assert [draft.part_number for draft in drafts] == ["111-222", "333-444"]
    assert [draft.quantity for draft in drafts] == [4, 2]
    print("SUCCESS: one-row header table plus data table are read together.")


def test_strict_variant_requires_description() -> None:
    html = _table(["P/N", "Description", "Qty"], [["111-222", "", "1"], ["333-444", "NUT", "2"]])
    document = EmailDocument(html=html)
    strict = vendor_parsers.atechnics_table_parser(document)
    assert [draft.part_number for draft in strict] == ["333-444"]

    lenient = vendor_parsers.aeroflot_table_parser(document)
    assert [draft.description for draft in lenient] == ["111-222", "NUT"]
    print("SUCCESS: strict profiles drop rows without description, lenient ones use the part number.")


def test_lukoil_rejects_cyrillic_part_numbers_and_keeps_cd() -> None:
    html = _table(
        ["Партийный номер", "Наименование", "Кол-во к заказу", "Ед", "CD"],
        [
            ["ТРУБКА-123", "ТРУБКА", "1", "шт", "NE"],
            ["D5555-12", "ФИЛЬТР", "3", "шт", "NE"],
        ],
    )
    drafts = vendor_parsers.lukoil_table_parser(EmailDocument(html=html))
    assert len(drafts) == 1
    assert drafts[0].part_number == "D5555-12"
    assert drafts[0].unit == "ШТ"
    record = finalize_record(drafts[0], Priority.RTN)
    assert record.remarks == "CD: NE"
    print("SUCCESS: Lukoil rows with Cyrillic part numbers are dropped.")


def test_azur_multiline_alternate_column_and_order_number() -> None:
    html = _table(
        ["Order No.", "Part Number", "Description", "Qty", "PN_SUBST", "Notes"],
        [["ORD-77", "2311-1", "FILTER", "2", "2311-2<br>2311-3<br>2311-2", "OH ok"]],
    )
    drafts = vendor_parsers.azur_table_parser(EmailDocument(html=html))
    assert len(drafts) == 1
    record = finalize_record(drafts[0], Priority.RTN)
    assert record.alternate_part_numbers == ("2311-2", "2311-3")
    assert record.remarks == "Order No: ORD-77; OH ok; Alt P/N: 2311-2, 2311-3"
    print("SUCCESS: Azur multi-line alternates are tokenized and deduplicated.")


def test_dash_variants_normalize_to_hyphen() -> None:
    html = _table(["P/N", "Qty"], [["642–1000—505", "1"]])
    drafts = vendor_parsers.generic_table_parser(EmailDocument(html=html))
    assert drafts[0].part_number == "642-1000-505"
    print("SUCCESS: en/em dashes in part numbers become hyphens.")


def test_split_inline_runs_join_without_separator() -> None:
    html = (
        "<table><tr><th>P/N</th><th>Description</th><th>Qty</th><th>ALT PN</th></tr>"
        "<tr><td><span>642-1000-</span><span>505</span></td>"
        "<td><span>AIR </span><b>INLET</b></td>"
        "<td><span>1</span><span>2</span></td>"
        "<td><p>642-1000-<span>501</span></p><p>642-1000-502</p></td></tr>"
        "</table>"
    )
    drafts = vendor_parsers.generic_table_parser(EmailDocument(html=html))
    assert len(drafts) == 1
    assert drafts[0].part_number == "642-1000-505"
    assert drafts[0].description == "AIR INLET"
    assert drafts[0].quantity == 12
    assert drafts[0].alternates == ["642-1000-501", "642-1000-502"]
    print("SUCCESS: values split over several <span>s are read as one value.")


@pytest.mark.parametrize(
    "quantity_cell",
    ["1", "2,5", "1,000.5", "3 pcs", "0", "-4", "abc", "", "1e309", "7.", ",", "12 EA"],
)
def test_emitted_quantities_are_finite_and_positive(quantity_cell: str) -> None:
    html = _table(["P/N", "Description", "Qty"], [["PN-100", "ITEM", quantity_cell]])
    for draft in vendor_parsers.generic_table_parser(EmailDocument(html=html)):
        assert math.isfinite(draft.quantity)
        assert draft.quantity > 0


@pytest.mark.parametrize(
    "part_cell, alt_cell, notes",
    [
        ("A-1 (ALT A-1)", "A-1", "ALT A-1"),
        ("B-2 (ALT B-3)", "B-3\nb-3", "ALT B-3 / ALT B-4"),
        ("C-5", "C-6; C-5", "Alt P/N: C-6, C-5"),
        ("D-7", "-", ""),
    ],
)
def test_alternates_never_contain_primary_or_duplicates(part_cell: str, alt_cell: str, notes: str) -> None:
    html = _table(["P/N", "Qty", "ALT PN", "Notes"], [[part_cell, "1", alt_cell, notes]])
    drafts = vendor_parsers.generic_table_parser(EmailDocument(html=html))
    record = finalize_record(drafts[0], Priority.RTN)
    keys = [value.casefold() for value in record.alternate_part_numbers]
    assert record.part_number.casefold() not in keys
    assert len(keys) == len(set(keys))
    assert record.remarks.count("Alt P/N:") <= 1


def test_draft_built_directly_finalizes_with_defaults() -> None:
    record = finalize_record(PartDraft(part_number="X-1", quantity=1.0, unit=""), Priority.AOG)
    assert record.unit_of_measure == "EA"
    assert record.priority is Priority.AOG
    assert record.to_dict()["qty"] == 1
    print("SUCCESS: finalized record defaults unit to EA.")


if __name__ == "__main__":
    test_scenario_a_inline_and_note_alternates()
    test_scenario_c_comma_decimal_quantity()
    test_header_resolution_claims_alternate_columns_first()
    test_short_synonyms_match_whole_tokens_only()
    test_first_qualifying_table_wins()
    test_no_qualifying_table_returns_empty()
    test_malformed_rows_are_skipped()
    test_unit_equal_to_part_number_falls_back_to_ea()
    test_rowspan_continuation_rows_add_alternates()
    test_split_header_table()
    test_strict_variant_requires_description()
    test_lukoil_rejects_cyrillic_part_numbers_and_keeps_cd()
    test_azur_multiline_alternate_column_and_order_number()
    test_dash_variants_normalize_to_hyphen()
    test_split_inline_runs_join_without_separator()
    test_draft_built_directly_finalizes_with_defaults()
