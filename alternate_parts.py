from __future__ import annotations

import re
from typing import Iterable

from field_normalizer import collapse_whitespace, normalize_part_number
from freeform_parser import is_part_number
from models import PartDraft, PartRequestRecord, Priority

ALT_SEGMENT_LABEL = "Alt P/N:"
REMARKS_SEPARATOR = "; "

_INLINE_ALT_RE = re.compile(r"^([^(]+?)\s*\(\s*ALT\.?\s+([^)]+)\)", re.IGNORECASE)
_ALT_SEGMENT_RE = re.compile(r"(?:^|[;\n]\s*)Alt\s*P/?N\s*:\s*([^;\n]*)", re.IGNORECASE)
_NOTE_ALT_RE = re.compile(
    r"\bALT\b\.?\s*(?:P/?N\b)?\s*[:#]?\s*([A-Z0-9][A-Z0-9./\-]*[A-Z0-9]|[A-Z0-9])",
    re.IGNORECASE,
)
_TOKEN_SPLIT_RE = re.compile(r"[\n,;]+|\s+OR\s+|\s{2,}", re.IGNORECASE)
_EMPTY_TOKENS = {"", "-", "--", "n/a", "na", "none", "нет"}
_DANGLING_SEPARATORS = " \t/;,-"


def _looks_like_note_alternate(token: str) -> bool:
    # "ALT 2 pcs" and "ALT 100 EA" are quantities, not part numbers
    if len(token) < 3 or not is_part_number(token):
        return False
    return not token.isdigit() or len(token) >= 5


def split_inline_alternate(cell: str) -> tuple[str, list[str]]:
    """Split ``MAIN (ALT X)`` into the primary number and its alternates."""
    text = collapse_whitespace(cell)
    match = _INLINE_ALT_RE.match(text)
    if not match:
        return text, []
    primary = match.group(1).strip()
    alternates = [
        normalize_part_number(token)
        for token in re.split(r"[,;\s]+", match.group(2))
        if token.strip()
    ]
    return primary, alternates


def tokenize_alternate_cell(cell: str) -> list[str]:
    tokens: list[str] = []
    for raw in _TOKEN_SPLIT_RE.split(cell or ""):
        token = normalize_part_number(raw)
        if token.casefold() in _EMPTY_TOKENS:
            continue
        tokens.append(token)
    return tokens


def strip_alt_segment(notes: str) -> tuple[str, list[str]]:
    """Remove an already-rendered ``Alt P/N:`` segment, returning its alternates."""
    alternates: list[str] = []

    def _collect(match: re.Match[str]) -> str:
        alternates.extend(tokenize_alternate_cell(match.group(1)))
        return ""

    remaining = _ALT_SEGMENT_RE.sub(_collect, notes or "")
    return remaining, alternates


def extract_note_alternates(notes: str) -> tuple[str, list[str]]:
    """Harvest ``ALT <token>`` markers; the markers are removed from the text."""
    alternates: list[str] = []

    def _collect(match: re.Match[str]) -> str:
        token = match.group(1)
        if not _looks_like_note_alternate(token):
            return match.group(0)
        alternates.append(normalize_part_number(token))
        return ""

    remaining = _NOTE_ALT_RE.sub(_collect, notes or "")
    return remaining, alternates


def _tidy_notes(text: str) -> str:
    segments = []
    for segment in re.split(r"\s*(?:;|\n)\s*", text or ""):
        segment = collapse_whitespace(segment)
        segment = re.sub(r"\s*([/,])\s*(?=[/,])", "", segment)
        segment = segment.strip(_DANGLING_SEPARATORS)
        if segment:
            segments.append(segment)
    return REMARKS_SEPARATOR.join(segments)


def merge_alternates(primary: str, *sources: Iterable[str]) -> list[str]:
    """Order-preserving, case-insensitive dedupe that never keeps the primary."""
    seen = {primary.casefold()} if primary else set()
    merged: list[str] = []
    for source in sources:
        for value in source:
            token = normalize_part_number(value)
            if not token:
                continue
            key = token.casefold()
            if key in seen:
                continue
            seen.add(key)
            merged.append(token)
    return merged


def render_remarks(notes: str, alternates: list[str], extra_remarks: Iterable[str] = ()) -> str:
    segments = [collapse_whitespace(value) for value in extra_remarks]
    segments = [segment for segment in segments if segment]
    if notes:
        segments.append(notes)
    if alternates:
        segments.append(f"{ALT_SEGMENT_LABEL} {', '.join(alternates)}")
    return REMARKS_SEPARATOR.join(segments)


def finalize_record(draft: PartDraft, priority: Priority) -> PartRequestRecord:
    primary, inline_alternates = split_inline_alternate(draft.part_number)
    primary = normalize_part_number(primary)
    notes, rendered_alternates = strip_alt_segment(draft.notes)
    notes, note_alternates = extract_note_alternates(notes)
    alternates = merge_alternates(
        primary,
        inline_alternates,
        draft.alternates,
        rendered_alternates,
        note_alternates,
        draft.span_alternates,
    )
    remarks = render_remarks(_tidy_notes(notes), alternates, draft.extra_remarks)
    return PartRequestRecord(
        part_number=primary,
        description=collapse_whitespace(draft.description),
        quantity=draft.quantity,
        unit_of_measure=draft.unit or "EA",
        aircraft_type=collapse_whitespace(draft.aircraft_type),
        priority=priority,
        alternate_part_numbers=tuple(alternates),
        remarks=remarks,
    )
