from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any

from dateutil.parser import ParserError, parse

_HTML_HINT_RE = re.compile(r"<\s*(table|tr|td|th|html|body|div|p|br)\b", re.IGNORECASE)


@dataclass(frozen=True)
class IngestedEmail:
    message_id: str
    received_at: str
    subject: str
    sender: str
    body_text: str
    body_html: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "IngestedEmail":
        """Build a message from the mail-ingestion wire format.

        Accepts ``{fromEmail, subject, body, bodyHtml?, receivedAt?, id?}``.
        HTML that arrives in ``body`` without a separate ``bodyHtml`` is kept
        as both text and HTML so table strategies can still see it.
        """
        body = str(payload.get("body") or "")
        body_html = str(payload.get("bodyHtml") or "")
        if not body_html and looks_like_html(body):
            body_html = body
        return cls(
            message_id=str(payload.get("id") or payload.get("messageId") or ""),
            received_at=normalize_received_at(payload.get("receivedAt")),
            subject=str(payload.get("subject") or ""),
            sender=str(payload.get("fromEmail") or payload.get("from") or ""),
            body_text=body,
            body_html=body_html,
        )


def looks_like_html(text: str) -> bool:
    if not text:
        return False
    return bool(_HTML_HINT_RE.search(text))


def normalize_received_at(value: Any) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    try:
        return parse(text).isoformat()
    except (ParserError, ValueError, OverflowError):
        return text
