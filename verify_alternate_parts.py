from alternate_parts import (
    extract_note_alternates,
    finalize_record,
    merge_alternates,
    render_remarks,
    split_inline_alternate,
    strip_alt_segment,
    tokenize_alternate_cell,
)
from models import PartDraft, Priority


def test_split_inline_alternate() -> None:
    assert split_inline_alternate("642-1000-505 (ALT 642-1000-501)") == ("642-1000-505", ["642-1000-501"])
    assert split_inline_alternate("ABC (alt. DEF-1, DEF-2)") == ("ABC", ["DEF-1", "DEF-2"])
    assert split_inline_alternate("PLAIN-1") == ("PLAIN-1", [])
    print("SUCCESS: inline (ALT ...) suffixes are split off the primary.")


def test_tokenize_alternate_cell() -> None:
    assert tokenize_alternate_cell("A-1 OR A-2;  A-3\n-\nn/a") == ["A-1", "A-2", "A-3"]
    assert tokenize_alternate_cell("") == []
    print("SUCCESS: alternate cells split on newlines, separators and OR.")


def test_note_markers_need_a_digit() -> None:
    assert extract_note_alternates("ALT SEE NOTE") == ("ALT SEE NOTE", [])
    remaining, alternates = extract_note_alternates("Alt: 123-4 ok")
    assert alternates == ["123-4"]
    assert remaining.strip() == "ok"
    print("SUCCESS: ALT markers without a part-number-like token stay in the notes.")


def test_quantity_after_alt_marker_is_not_an_alternate() -> None:
    assert extract_note_alternates("ALT 2 pcs acceptable") == ("ALT 2 pcs acceptable", [])
    assert extract_note_alternates("ALT 100 EA ok") == ("ALT 100 EA ok", [])
    remaining, alternates = extract_note_alternates("ALT 3214552 from stock")
    assert alternates == ["3214552"]
    assert remaining.strip() == "from stock"

    record = finalize_record(
        PartDraft(part_number="642-1000-505", quantity=1.0, notes="ALT 2 pcs acceptable"),
        Priority.RTN,
    )
    assert record.alternate_part_numbers == ()
    assert record.remarks == "ALT 2 pcs acceptable"
    print("SUCCESS: quantities written after ALT stay in the notes.")


def test_merge_alternates_dedupes_and_excludes_primary() -> None:
    assert merge_alternates("X-1", ["x-1", "Y-2"], ["y-2", "Z-3"]) == ["Y-2", "Z-3"]
    print("SUCCESS: merged alternates are case-insensitively unique.")


def test_render_remarks_segment_order() -> None:
    assert render_remarks("OH ok", ["B-1"], ["CD: NE"]) == "CD: NE; OH ok; Alt P/N: B-1"
    assert render_remarks("", [], ["CD: NE"]) == "CD: NE"
    assert render_remarks("", [], []) == ""
    print("SUCCESS: remarks render extras, notes and alternates in that order.")


def test_rendering_is_idempotent() -> None:
    first = finalize_record(
        PartDraft(
            part_number="642-1000-505 (ALT 642-1000-501)",
            quantity=1.0,
            notes="NEW and OH / ALT 642-1000-501-1",
        ),
        Priority.RTN,
    )
    assert first.remarks == "NEW and OH; Alt P/N: 642-1000-501, 642-1000-501-1"

    second = finalize_record(
        PartDraft(
            part_number=first.part_number,
            quantity=first.quantity,
            notes=first.remarks,
            alternates=list(first.alternate_part_numbers),
        ),
        Priority.RTN,
    )
    assert second.remarks == first.remarks
    assert second.alternate_part_numbers == first.alternate_part_numbers
    assert strip_alt_segment(second.remarks) == ("NEW and OH", ["642-1000-501", "642-1000-501-1"])
    print("SUCCESS: re-finalizing a rendered record does not duplicate the Alt P/N segment.")


if __name__ == "__main__":
    test_split_inline_alternate()
    test_tokenize_alternate_cell()
    test_note_markers_need_a_digit()
    test_quantity_after_alt_marker_is_not_an_alternate()
    test_merge_alternates_dedupes_and_excludes_primary()
    test_render_remarks_segment_order()
    test_rendering_is_idempotent()
