from __future__ import annotations

from dataclasses import dataclass
import re

from models import Priority


@dataclass(frozen=True)
class PriorityRule:
    name: str
    pattern: re.Pattern[str]
    priority: Priority


# Evaluated top to bottom, first match wins. "urgent" precedes the stock
# replenishment phrase, so USR is only reachable through a direct hint.
PRIORITY_RULES: tuple[PriorityRule, ...] = (
    PriorityRule("asap", re.compile(r"asap", re.IGNORECASE), Priority.AOG),
    PriorityRule("urgent", re.compile(r"urgent", re.IGNORECASE), Priority.WSP),
    PriorityRule("aog", re.compile(r"AOG"), Priority.AOG),
    PriorityRule("no-go", re.compile(r"NO-GO"), Priority.AOG),
    PriorityRule("critical", re.compile(r"critical", re.IGNORECASE), Priority.WSP),
    PriorityRule("crt", re.compile(r"CRT!"), Priority.WSP),
    PriorityRule(
        "urgent_stock_replenishment",
        re.compile(r"urgent stock replenishment", re.IGNORECASE),
        Priority.USR,
    ),
)

_PRIORITY_CODES = {priority.value: priority for priority in Priority}


def classify_text(text: str) -> Priority:
    if not text:
        return Priority.RTN
    for rule in PRIORITY_RULES:
        if rule.pattern.search(text):
            return rule.priority
    return Priority.RTN


def coerce_priority_code(value: str) -> Priority | None:
    """Map an explicit code such as "USR" (from a priority column) to the enum."""
    code = (value or "").strip().upper()
    return _PRIORITY_CODES.get(code)


def classify_priority(subject: str, text: str = "", body: str = "") -> Priority:
    """Classify urgency of one record.

    A non-routine subject always wins. Otherwise the record's own hint (an
    explicit code or keywords from a priority/remarks cell) is used, and the
    email body is the last resort.
    """
    from_subject = classify_text(subject or "")
    if from_subject is not Priority.RTN:
        return from_subject
    explicit = coerce_priority_code(text)
    if explicit is not None:
        return explicit
    from_hint = classify_text(text or "")
    if from_hint is not Priority.RTN:
        return from_hint
    return classify_text(body or "")
