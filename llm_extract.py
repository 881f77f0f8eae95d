from __future__ import annotations

import logging
from typing import Any

from openai import OpenAI

from config import Config
from field_normalizer import collapse_whitespace, normalize_part_number, normalize_unit, parse_quantity
from json_text import loads_embedded_array
from models import PartDraft
from prompts import ORDER_EXTRACTION_SYSTEM_PROMPT, build_order_extraction_user_text
from vendor_parsers import EmailDocument, ParseFn

logger = logging.getLogger(__name__)


def _response_to_text(response: Any) -> str:
    """Text of a responses-API or chat-completions answer, "" when empty."""
    output_text = getattr(response, "output_text", None)
    if output_text:
        return output_text
    choices = getattr(response, "choices", None)
    if choices:
        content = getattr(choices[0].message, "content", None)
        if content:
            return str(content)
    return ""


class OpenAIOrderExtractor:
    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float,
        max_output_tokens: int,
        client: Any = None,
    ) -> None:
        self.client = client if client is not None else OpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    @classmethod
    def from_config(cls, config: Config) -> "OpenAIOrderExtractor":
        return cls(
            api_key=config.openai_api_key,
            model=config.openai_model,
            temperature=config.openai_temperature,
            max_output_tokens=config.openai_max_output_tokens,
        )

    def complete_text(self, system_prompt: str, user_text: str) -> str:
        try:
            response = self._responses_create(system_prompt, user_text)
        except AttributeError:
            response = self._chat_fallback(system_prompt, user_text)
        return _response_to_text(response)

    def extract_orders(self, subject: str, sender: str, body: str) -> str:
        user_text = build_order_extraction_user_text(subject, sender, body)
        return self.complete_text(ORDER_EXTRACTION_SYSTEM_PROMPT, user_text)

    def _responses_create(self, system_prompt: str, user_text: str) -> Any:
        return self.client.responses.create(
            model=self.model,
            input=[
                {"role": "system", "content": [{"type": "input_text", "text": system_prompt}]},
                {"role": "user", "content": [{"type": "input_text", "text": user_text}]},
            ],
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )

    def _chat_fallback(self, system_prompt: str, user_text: str) -> Any:
        return self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
            max_tokens=self.max_output_tokens,
        )


def parse_json_array(text: str) -> list[Any]:
    """Decode a JSON array, tolerating prose or code fences around it."""
    parsed = loads_embedded_array(text)
    if isinstance(parsed, dict):
        # some models still wrap the array in an object
        for value in parsed.values():
            if isinstance(value, list):
                return value
        return [parsed]
    if not isinstance(parsed, list):
        raise ValueError("Expected a JSON array of parts")
    return parsed


def drafts_from_llm_response(text: str) -> list[PartDraft]:
    drafts: list[PartDraft] = []
    for entry in parse_json_array(text):
        if not isinstance(entry, dict):
            continue
        part_number = normalize_part_number(entry.get("part_number"))
        quantity = parse_quantity(entry.get("qty", 1))
        if not part_number or quantity is None:
            continue
        alternates = entry.get("pn_alt") or []
        if not isinstance(alternates, list):
            alternates = [alternates]
        priority = collapse_whitespace(entry.get("priority"))
        drafts.append(
            PartDraft(
                part_number=part_number,
                quantity=quantity,
                description=collapse_whitespace(entry.get("description")),
                unit=normalize_unit(entry.get("um"), part_number),
                aircraft_type=collapse_whitespace(entry.get("ac_type")),
                notes=str(entry.get("remarks") or ""),
                alternates=[str(value) for value in alternates if value],
                priority_hint=priority,
            )
        )
    return drafts


def build_llm_parser(extractor: OpenAIOrderExtractor) -> ParseFn:
    def llm_parser(document: EmailDocument) -> list[PartDraft]:
        response_text = extractor.extract_orders(document.subject, document.sender, document.plain_text)
        drafts = drafts_from_llm_response(response_text)
        logger.info("LLM extraction returned %s part(s)", len(drafts))
        return drafts

    return llm_parser
