from unittest.mock import patch

from config import Config
from email_ingest import IngestedEmail
import parser_dispatcher
from parser_dispatcher import build_chain, dispatch, is_aviation_request
import parser_profiles
from parser_profiles import CompanyProfile, get_profile
import pipeline
import vendor_parsers
from vendor_parsers import EmailDocument


SCENARIO_A_HTML = (
    "<table>"
    "<tr><th>Part No.</th><th>Description</th><th>Qty</th><th>Unit</th><th>Notes</th></tr>"
    "<tr><td>642-1000-505 (ALT 642-1000-501)</td><td>AIR INLET (NOSE COWL)</td>"
    "<td>1</td><td>EA</td><td>NEW and OH / ALT 642-1000-501-1</td></tr>"
    "</table>"
)

HEADERLESS_HTML = (
    "<table>"
    "<tr><td>1</td><td>1</td><td>AN960C10L</td><td>WASHER</td><td>EA</td><td>100</td></tr>"
    "<tr><td>2</td><td>1</td><td>SEAL RING</td><td>MS29513-8</td><td>EA</td><td>5</td></tr>"
    "</table>"
)


def _message(sender: str, subject: str = "RFQ", text: str = "", html: str = "") -> IngestedEmail:
    return IngestedEmail(
        message_id="msg-1",
        received_at="",
        subject=subject,
        sender=sender,
        body_text=text,
        body_html=html,
    )


def _exploding_parser(document: EmailDocument) -> list:
    raise RuntimeError("boom")


def test_scenario_d_unknown_sender_uses_generic_table() -> None:
    result = pipeline.process_message(
        _message("buyer@unknown-mro.net", html=SCENARIO_A_HTML),
        Config(),
    )
    assert result.company_name is None
    assert result.strategy == "generic_table"
    assert [order.part_number for order in result.orders] == ["642-1000-505"]
    assert result.orders[0].alternate_part_numbers == ("642-1000-501", "642-1000-501-1")
    assert result.is_aviation_request is True
    print("SUCCESS: an unknown sender still gets records from the generic table parser.")


def test_unknown_sender_without_parts() -> None:
    result = pipeline.process_message(
        _message("buyer@unknown-mro.net", subject="Hello", text="Hello, please call me back tomorrow."),
        Config(),
    )
    assert result.company_name is None
    assert result.orders == []
    assert result.is_aviation_request is False
    assert result.strategy == ""
    assert (
        "Dispatch: company=unknown strategy=none records=0 attempted=generic_table,freeform"
        in result.warnings
    )
    print("SUCCESS: unknown sender with no parts yields an empty, non-aviation result.")


def test_chain_order_profile_then_generic_then_freeform() -> None:
    profile = get_profile("A-Technics")
    names = [strategy.name for strategy in build_chain(profile, Config())]
    assert names == [
        "A-Technics:atechnics_table_parser",
        "A-Technics:atechnics_headerless_parser",
        "generic_table",
        "freeform",
    ]

    names = [strategy.name for strategy in build_chain(None, Config(freeform_enabled=False))]
    assert names == ["generic_table"]

    def llm(document: EmailDocument) -> list:
        return []

    names = [strategy.name for strategy in build_chain(None, Config(llm_fallback_enabled=True), llm)]
    assert names[-1] == "llm"
    names = [strategy.name for strategy in build_chain(None, Config(llm_fallback_enabled=False), llm)]
    assert "llm" not in names
    print("SUCCESS: profile strategies run before generic, freeform and llm fallbacks.")


def test_profile_fallback_within_chain() -> None:
    outcome = dispatch(EmailDocument(html=HEADERLESS_HTML), "A-Technics", Config())
    assert outcome.strategy == "A-Technics:atechnics_headerless_parser"
    assert outcome.attempted == [
        "A-Technics:atechnics_table_parser",
        "A-Technics:atechnics_headerless_parser",
    ]
    assert [draft.part_number for draft in outcome.drafts] == ["AN960C10L", "MS29513-8"]
    print("SUCCESS: the first productive strategy wins and later ones are not tried.")


def test_parser_exception_is_contained() -> None:
    profile = CompanyProfile(
        name="Aeroflot",
        domain_matchers=("aeroflot.ru",),
        parser_chain=(_exploding_parser, vendor_parsers.aeroflot_table_parser),
    )
    with patch.dict(parser_profiles.PROFILES, {"Aeroflot": profile}):
        result = pipeline.process_message(
            _message("supply@aeroflot.ru", html=SCENARIO_A_HTML, text=SCENARIO_A_HTML),
            Config(),
        )
    assert "Parser Aeroflot:_exploding_parser failed: boom" in result.warnings
    assert result.strategy == "Aeroflot:aeroflot_table_parser"
    assert [order.part_number for order in result.orders] == ["642-1000-505"]
    print("SUCCESS: a raising strategy is logged, recorded as a warning and skipped.")


def test_aviation_keywords() -> None:
    assert is_aviation_request("Aircraft maintenance inquiry")
    assert is_aviation_request("Запрос на запчасти для самолёта")
    assert not is_aviation_request("Lunch on Friday?")
    assert not is_aviation_request("")

    result = pipeline.process_message(
        _message("someone@unknown.org", subject="Aircraft maintenance inquiry", text="Please call."),
        Config(),
    )
    assert result.orders == []
    assert result.is_aviation_request is True
    print("SUCCESS: aviation keywords flag requests even without extracted parts.")


def test_process_message_is_deterministic() -> None:
    message = _message("supply@aeroflot.ru", subject="AOG: RFQ", html=SCENARIO_A_HTML, text=SCENARIO_A_HTML)
    first = pipeline.process_message(message, Config()).to_dict()
    second = pipeline.process_message(message, Config()).to_dict()
    assert first == second
    print("SUCCESS: processing the same message twice gives identical results.")


def test_process_payload_wire_format() -> None:
    result = pipeline.process_payload(
        {
            "fromEmail": "Supply <supply@aeroflot.ru>",
            "subject": "AOG: RFQ 642",
            "body": "",
            "bodyHtml": SCENARIO_A_HTML,
        },
        Config(),
    )
    assert set(result) == {"airline", "isAviationRequest", "orders", "strategy", "warnings"}
    assert result["airline"] == "Aeroflot"
    assert result["isAviationRequest"] is True
    assert result["strategy"] == "Aeroflot:aeroflot_table_parser"
    order = result["orders"][0]
    assert set(order) == {"part_number", "description", "qty", "um", "ac_type", "priority", "pn_alt", "remarks"}
    assert order["qty"] == 1
    assert order["priority"] == "AOG"
    assert order["pn_alt"] == ["642-1000-501", "642-1000-501-1"]
    print("SUCCESS: payload in, wire dict out.")


def test_html_in_plain_body_is_parsed_as_table() -> None:
    result = pipeline.process_payload(
        {"fromEmail": "supply@atechnics.ru", "subject": "RFQ", "body": HEADERLESS_HTML},
        Config(),
    )
    assert result["airline"] == "A-Technics"
    assert result["strategy"] == "A-Technics:atechnics_headerless_parser"
    assert [order["part_number"] for order in result["orders"]] == ["AN960C10L", "MS29513-8"]
    print("SUCCESS: HTML sent in the text body still reaches the table strategies.")


def test_ifly_remark_drives_priority() -> None:
    html = (
        "<table>"
        "<tr><td>Part Number</td><td>Description</td><td>Qty</td><td>Remarks</td></tr>"
        "<tr><td>ABC-100</td><td>PUMP</td><td>2 EA</td><td>USR</td></tr>"
        "<tr><td>ABC-200</td><td>VALVE</td><td>1 PR</td><td></td></tr>"
        "</table>"
    )
    result = pipeline.process_message(_message("supply@ifly-rus.ru", html=html), Config())
    assert result.strategy == "iFly Airlines:ifly_table_parser"
    assert [(order.part_number, order.priority.value, order.unit_of_measure) for order in result.orders] == [
        ("ABC-100", "USR", "EA"),
        ("ABC-200", "RTN", "PR"),
    ]
    assert result.orders[0].remarks == "USR"
    print("SUCCESS: iFly row remarks feed the priority classifier.")


def test_body_urgency_applies_when_subject_is_routine() -> None:
    result = pipeline.process_message(
        _message(
            "buyer@unknown-mro.net",
            subject="RFQ 55",
            text="AOG at VKO, aircraft grounded, need ASAP",
            html=SCENARIO_A_HTML,
        ),
        Config(),
    )
    assert result.strategy == "generic_table"
    assert [(order.part_number, order.priority.value) for order in result.orders] == [("642-1000-505", "AOG")]

    routine = pipeline.process_message(
        _message("buyer@unknown-mro.net", subject="RFQ 55", text="Please quote.", html=SCENARIO_A_HTML),
        Config(),
    )
    assert [order.priority.value for order in routine.orders] == ["RTN"]
    print("SUCCESS: an urgent body raises the priority of a routine-subject request.")


def test_oversized_body_is_truncated_with_warning() -> None:
    result = pipeline.process_message(
        _message("buyer@unknown-mro.net", text="x" * 50),
        Config(max_body_chars=10),
    )
    assert "Email body truncated to 10 characters." in result.warnings
    print("SUCCESS: oversized bodies are truncated and reported.")


def test_dispatch_summary_format() -> None:
    outcome = parser_dispatcher.DispatchOutcome(company_name=None, strategy="")
    assert parser_dispatcher.format_dispatch_summary(outcome) == (
        "Dispatch: company=unknown strategy=none records=0 attempted=none"
    )


if __name__ == "__main__":
    test_scenario_d_unknown_sender_uses_generic_table()
    test_unknown_sender_without_parts()
    test_chain_order_profile_then_generic_then_freeform()
    test_profile_fallback_within_chain()
    test_parser_exception_is_contained()
    test_aviation_keywords()
    test_process_message_is_deterministic()
    test_process_payload_wire_format()
    test_html_in_plain_body_is_parsed_as_table()
    test_ifly_remark_drives_priority()
    test_body_urgency_applies_when_subject_is_routine()
    test_oversized_body_is_truncated_with_warning()
    test_dispatch_summary_format()
