import os
from unittest.mock import patch

from config import Config
from email_ingest import IngestedEmail, looks_like_html, normalize_received_at


def test_defaults_without_environment() -> None:
    with patch.dict(os.environ, {}, clear=True):
        config = Config.from_env()
    assert config.log_level == "INFO"
    assert config.max_body_chars == 200_000
    assert config.freeform_enabled is True
    assert config.llm_fallback_enabled is False
    assert config.llm_available is False
    print("SUCCESS: defaults apply when no variables are set.")


def test_environment_overrides() -> None:
    env = {
        "LOG_LEVEL": "debug",
        "PARSER_MAX_BODY_CHARS": "1000",
        "PARSER_FREEFORM_ENABLED": "no",
        "PARSER_LLM_FALLBACK_ENABLED": "YES",
        "OPENAI_API_KEY": "sk-test",
        "OPENAI_TEMPERATURE": "0.3",
        "OPENAI_MAX_OUTPUT_TOKENS": "not-a-number",
    }
    with patch.dict(os.environ, env, clear=True):
        config = Config.from_env()
    assert config.log_level == "DEBUG"
    assert config.max_body_chars == 1000
    assert config.freeform_enabled is False
    assert config.llm_fallback_enabled is True
    assert config.llm_available is True
    assert config.openai_temperature == 0.3
    assert config.openai_max_output_tokens == 4000
    print("SUCCESS: environment variables override defaults; bad numbers fall back.")


def test_payload_ingestion() -> None:
    message = IngestedEmail.from_payload(
        {
            "id": "abc",
            "fromEmail": "supply@aeroflot.ru",
            "subject": "RFQ",
            "body": "<table><tr><td>P/N</td></tr></table>",
            "receivedAt": "Mon, 12 May 2025 10:15:00 +0300",
        }
    )
    assert message.message_id == "abc"
    assert message.sender == "supply@aeroflot.ru"
    assert message.body_html == message.body_text
    assert message.received_at == "2025-05-12T10:15:00+03:00"

    plain = IngestedEmail.from_payload({"from": "a@b.ru", "body": "PN 123 qty 1"})
    assert plain.body_html == ""
    assert plain.sender == "a@b.ru"
    print("SUCCESS: payload fields map onto the message, HTML bodies are detected.")


def test_received_at_kept_when_unparseable() -> None:
    assert normalize_received_at("yesterday-ish") == "yesterday-ish"
    assert normalize_received_at(None) == ""
    assert not looks_like_html("2 < 3 and 5 > 4")


if __name__ == "__main__":
    test_defaults_without_environment()
    test_environment_overrides()
    test_payload_ingestion()
    test_received_at_kept_when_unparseable()
