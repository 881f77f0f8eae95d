import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from config import Config
from email_ingest import IngestedEmail
from llm_extract import OpenAIOrderExtractor, _response_to_text, drafts_from_llm_response, parse_json_array
import pipeline


LLM_ANSWER = "```json\n" + json.dumps(
    [
        {
            "part_number": "ABC-1",
            "description": "PUMP",
            "qty": 2,
            "um": "ea",
            "ac_type": "A320",
            "priority": "AOG",
            "pn_alt": ["ABC-2"],
            "remarks": "",
        },
        {"part_number": "", "qty": 1},
        {"part_number": "ABC-3", "qty": "zero"},
    ]
) + "\n```"


def _extractor(client) -> OpenAIOrderExtractor:
    return OpenAIOrderExtractor(
        api_key="test-key",
        model="gpt-test",
        temperature=0.0,
        max_output_tokens=500,
        client=client,
    )


def _message(body: str) -> IngestedEmail:
    return IngestedEmail(
        message_id="llm-1",
        received_at="",
        subject="RFQ",
        sender="buyer@unknown-mro.net",
        body_text=body,
    )


def test_parse_json_array_variants() -> None:
    assert parse_json_array('[{"part_number": "A-1"}]') == [{"part_number": "A-1"}]
    assert parse_json_array('{"orders": [{"part_number": "A-1"}]}') == [{"part_number": "A-1"}]
    assert parse_json_array("Sure!\n[]\nDone.") == []
    with pytest.raises(ValueError):
        parse_json_array("no json here")
    print("SUCCESS: JSON arrays are recovered from fenced or wrapped answers.")


def test_drafts_skip_entries_without_part_or_quantity() -> None:
    drafts = drafts_from_llm_response(LLM_ANSWER)
    assert len(drafts) == 1
    assert drafts[0].part_number == "ABC-1"
    assert drafts[0].unit == "EA"
    assert drafts[0].alternates == ["ABC-2"]
    assert drafts[0].priority_hint == "AOG"


def test_pipeline_uses_llm_after_other_strategies() -> None:
    client = MagicMock()
    client.responses.create.return_value = SimpleNamespace(output_text=LLM_ANSWER)

    result = pipeline.process_message(
        _message("Please see the attached list."),
        Config(llm_fallback_enabled=True),
        extractor=_extractor(client),
    )

    assert result.strategy == "llm"
    assert [(order.part_number, order.priority.value) for order in result.orders] == [("ABC-1", "AOG")]
    assert result.orders[0].alternate_part_numbers == ("ABC-2",)
    client.responses.create.assert_called_once()
    assert client.responses.create.call_args.kwargs["model"] == "gpt-test"
    print("SUCCESS: the LLM fallback runs last and its answer is finalized like any other.")


def test_llm_not_called_when_disabled() -> None:
    client = MagicMock()
    result = pipeline.process_message(
        _message("Please see the attached list."),
        Config(llm_fallback_enabled=False),
        extractor=_extractor(client),
    )
    assert result.orders == []
    client.responses.create.assert_not_called()


def test_llm_failure_becomes_warning() -> None:
    client = MagicMock()
    client.responses.create.side_effect = RuntimeError("rate limited")
    result = pipeline.process_message(
        _message("Please see the attached list."),
        Config(llm_fallback_enabled=True),
        extractor=_extractor(client),
    )
    assert result.orders == []
    assert "Parser llm failed: rate limited" in result.warnings


def test_chat_completions_fallback() -> None:
    client = MagicMock(spec=["chat"])
    client.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content='[{"part_number": "Z-9", "qty": 1}]'))]
    )
    text = _extractor(client).extract_orders("RFQ", "buyer@unknown-mro.net", "need Z-9")
    assert drafts_from_llm_response(text)[0].part_number == "Z-9"
    client.chat.completions.create.assert_called_once()
    print("SUCCESS: clients without the responses API fall back to chat completions.")


def test_response_text_from_both_answer_shapes() -> None:
    assert _response_to_text(SimpleNamespace(output_text="[]")) == "[]"
    chat = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="[1]"))])
    assert _response_to_text(chat) == "[1]"
    assert _response_to_text(SimpleNamespace(output_text="", choices=[])) == ""
    assert _response_to_text(SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=None))])) == ""
    print("SUCCESS: responses and chat completions answers are both read.")


if __name__ == "__main__":
    test_parse_json_array_variants()
    test_drafts_skip_entries_without_part_or_quantity()
    test_pipeline_uses_llm_after_other_strategies()
    test_llm_not_called_when_disabled()
    test_llm_failure_becomes_warning()
    test_chat_completions_fallback()
    test_response_text_from_both_answer_shapes()
