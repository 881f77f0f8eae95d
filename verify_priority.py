import pytest

from models import Priority
from priority import classify_priority, classify_text


def test_scenario_b_subject_aog_wins_over_body() -> None:
    assert classify_priority("AOG: need part", "routine restock, no rush") is Priority.AOG
    assert classify_priority("AOG: need part", "critical") is Priority.AOG
    print("SUCCESS: 'AOG' in the subject classifies AOG regardless of the body.")


def test_rule_order_first_match_wins() -> None:
    assert classify_text("Please ship ASAP") is Priority.AOG
    assert classify_text("urgent request") is Priority.WSP
    assert classify_text("A/C NO-GO item") is Priority.AOG
    assert classify_text("Critical spares") is Priority.WSP
    assert classify_text("CRT! request") is Priority.WSP
    # "urgent" is evaluated before the replenishment phrase
    assert classify_text("Urgent Stock Replenishment") is Priority.WSP
    assert classify_text("routine quotation") is Priority.RTN
    print("SUCCESS: keyword rules are evaluated in order.")


def test_case_sensitive_literals() -> None:
    assert classify_text("aog") is Priority.RTN
    assert classify_text("no-go") is Priority.RTN
    assert classify_text("crt!") is Priority.RTN
    print("SUCCESS: AOG, NO-GO and CRT! only match as written.")


def test_row_hint_used_when_subject_is_routine() -> None:
    assert classify_priority("RFQ 123", "part needed ASAP") is Priority.AOG
    assert classify_priority("RFQ 123", "USR") is Priority.USR
    assert classify_priority("Critical RFQ", "AOG") is Priority.WSP
    print("SUCCESS: a routine subject defers to the row hint.")


def test_body_used_when_subject_and_hint_are_routine() -> None:
    body = "AOG at VKO, aircraft grounded, need ASAP"
    assert classify_priority("RFQ 55", "", body) is Priority.AOG
    assert classify_priority("RFQ 55", "OH acceptable", body) is Priority.AOG
    # the row's own hint is more specific than the body
    assert classify_priority("RFQ 55", "USR", body) is Priority.USR
    assert classify_priority("RFQ 55", "critical", body) is Priority.WSP
    assert classify_priority("RFQ 55", "", "routine restock") is Priority.RTN
    print("SUCCESS: the email body is classified when subject and row hint are routine.")


@pytest.mark.parametrize(
    "subject, text",
    [
        ("", ""),
        ("   ", "\n"),
        ("RFQ", ""),
        ("", "urgent"),
        ("запрос", "срочно"),
        ("AOG", "NO-GO"),
        ("x" * 5000, "y" * 5000),
        ("\x00\x01", "\t"),
    ],
)
def test_classifier_is_total(subject: str, text: str) -> None:
    assert classify_priority(subject, text) in set(Priority)


def test_empty_inputs_are_routine() -> None:
    assert classify_priority("", "") is Priority.RTN
    assert classify_priority(None, None) is Priority.RTN  # type: ignore[arg-type]
    print("SUCCESS: empty subject and body classify RTN.")


if __name__ == "__main__":
    test_scenario_b_subject_aog_wins_over_body()
    test_rule_order_first_match_wins()
    test_case_sensitive_literals()
    test_row_hint_used_when_subject_is_routine()
    test_body_used_when_subject_and_hint_are_routine()
    test_empty_inputs_are_routine()
