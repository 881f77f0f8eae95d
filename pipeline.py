from __future__ import annotations

import logging
import math
from typing import Any

from airline_detector import detect_airline
from alternate_parts import finalize_record
from config import Config
from email_ingest import IngestedEmail
from llm_extract import OpenAIOrderExtractor, build_llm_parser
from models import PartDraft, PartRequestRecord, ParsingResult
import parser_dispatcher
from priority import classify_priority
from vendor_parsers import EmailDocument

logger = logging.getLogger(__name__)


def _bounded(text: str, max_chars: int, label: str, warnings: list[str]) -> str:
    if max_chars > 0 and len(text) > max_chars:
        warnings.append(f"Email {label} truncated to {max_chars} characters.")
        return text[:max_chars]
    return text


def _is_emittable(draft: PartDraft) -> bool:
    if not (draft.part_number or "").strip():
        return False
    try:
        quantity = float(draft.quantity)
    except (TypeError, ValueError):
        return False
    return math.isfinite(quantity) and quantity > 0


def finalize_drafts(
    drafts: list[PartDraft],
    subject: str,
    warnings: list[str],
    body: str = "",
) -> list[PartRequestRecord]:
    records: list[PartRequestRecord] = []
    for index, draft in enumerate(drafts, start=1):
        if not _is_emittable(draft):
            warnings.append(f"Skipped draft {index}: missing part number or quantity.")
            continue
        try:
            priority = classify_priority(subject, draft.priority_hint, body)
            records.append(finalize_record(draft, priority))
        except Exception as exc:
            logger.exception("Finalizing draft %s failed", index)
            warnings.append(f"Skipped draft {index}: {exc}")
    return records


def _resolve_llm_parser(config: Config, extractor: OpenAIOrderExtractor | None):
    if not config.llm_fallback_enabled:
        return None
    if extractor is None:
        if not config.llm_available:
            return None
        extractor = OpenAIOrderExtractor.from_config(config)
    return build_llm_parser(extractor)


def process_message(
    message: IngestedEmail,
    config: Config | None = None,
    extractor: OpenAIOrderExtractor | None = None,
) -> ParsingResult:
    """Turn one email into part requests; content problems never raise."""
    config = config or Config.from_env()
    warnings: list[str] = []
    company_name: str | None = None
    try:
        company_name = detect_airline(message.sender)
        document = EmailDocument(
            html=_bounded(message.body_html or "", config.max_html_chars, "HTML body", warnings),
            text=_bounded(message.body_text or "", config.max_body_chars, "body", warnings),
            subject=message.subject or "",
            sender=message.sender or "",
        )
        outcome = parser_dispatcher.dispatch(
            document,
            company_name,
            config,
            llm_parser=_resolve_llm_parser(config, extractor),
        )
        warnings.extend(outcome.warnings)
        warnings.append(parser_dispatcher.format_dispatch_summary(outcome))
        orders = finalize_drafts(outcome.drafts, message.subject or "", warnings, document.plain_text)
        aviation = bool(orders) or parser_dispatcher.is_aviation_request(
            f"{message.subject or ''}\n{document.plain_text}"
        )
        return ParsingResult(
            company_name=company_name,
            is_aviation_request=aviation,
            orders=orders,
            strategy=outcome.strategy,
            warnings=warnings,
        )
    except Exception as exc:
        logger.exception("Parsing failed for message %s", message.message_id or "<no id>")
        warnings.append(f"Parsing failed: {exc}")
        return ParsingResult(
            company_name=company_name,
            is_aviation_request=parser_dispatcher.is_aviation_request(
                f"{message.subject or ''}\n{message.body_text or ''}"
            ),
            orders=[],
            warnings=warnings,
        )


def process_payload(
    payload: dict[str, Any],
    config: Config | None = None,
    extractor: OpenAIOrderExtractor | None = None,
) -> dict[str, Any]:
    message = IngestedEmail.from_payload(payload)
    return process_message(message, config, extractor).to_dict()
