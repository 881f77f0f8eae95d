from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re

from config import Config
from models import PartDraft
from parser_profiles import CompanyProfile, get_profile
import vendor_parsers
from vendor_parsers import EmailDocument, ParseFn

logger = logging.getLogger(__name__)

AVIATION_KEYWORD_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"aircraft", re.IGNORECASE),
    re.compile(r"aviation", re.IGNORECASE),
    re.compile(r"aerospace", re.IGNORECASE),
    re.compile(r"component", re.IGNORECASE),
    re.compile(r"spare\s*part", re.IGNORECASE),
    re.compile(r"maintenance", re.IGNORECASE),
    re.compile(r"repair", re.IGNORECASE),
    re.compile(r"overhaul", re.IGNORECASE),
    re.compile(r"самол[её]т", re.IGNORECASE),
    re.compile(r"авиа", re.IGNORECASE),
    re.compile(r"запчаст", re.IGNORECASE),
    re.compile(r"компонент", re.IGNORECASE),
)

GENERIC_STRATEGY = "generic_table"
FREEFORM_STRATEGY = "freeform"
LLM_STRATEGY = "llm"


@dataclass(frozen=True)
class Strategy:
    name: str
    parse: ParseFn


@dataclass
class DispatchOutcome:
    company_name: str | None
    strategy: str
    drafts: list[PartDraft] = field(default_factory=list)
    attempted: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def is_aviation_request(text: str) -> bool:
    if not text:
        return False
    return any(pattern.search(text) for pattern in AVIATION_KEYWORD_RES)


def build_chain(
    profile: CompanyProfile | None,
    config: Config,
    llm_parser: ParseFn | None = None,
) -> list[Strategy]:
    chain: list[Strategy] = []
    if profile is not None:
        for parse in profile.parser_chain:
            chain.append(Strategy(name=f"{profile.name}:{parse.__name__}", parse=parse))
    chain.append(Strategy(name=GENERIC_STRATEGY, parse=vendor_parsers.generic_table_parser))
    if config.freeform_enabled:
        chain.append(Strategy(name=FREEFORM_STRATEGY, parse=vendor_parsers.freeform_fallback_parser))
    if llm_parser is not None and config.llm_fallback_enabled:
        chain.append(Strategy(name=LLM_STRATEGY, parse=llm_parser))
    return chain


def _run_strategy(strategy: Strategy, document: EmailDocument, warnings: list[str]) -> list[PartDraft]:
    try:
        return list(strategy.parse(document) or [])
    except Exception as exc:
        logger.exception("Parser %s failed", strategy.name)
        warnings.append(f"Parser {strategy.name} failed: {exc}")
        return []


def dispatch(
    document: EmailDocument,
    company_name: str | None,
    config: Config,
    llm_parser: ParseFn | None = None,
) -> DispatchOutcome:
    """Run the chain in order; the first strategy that yields drafts wins."""
    profile = get_profile(company_name)
    outcome = DispatchOutcome(company_name=company_name, strategy="")
    for strategy in build_chain(profile, config, llm_parser):
        outcome.attempted.append(strategy.name)
        drafts = _run_strategy(strategy, document, outcome.warnings)
        if drafts:
            outcome.strategy = strategy.name
            outcome.drafts = drafts
            logger.info(
                "Strategy %s produced %s record(s) for %s",
                strategy.name,
                len(drafts),
                company_name or "unknown sender",
            )
            break
    else:
        logger.info("No strategy produced records for %s", company_name or "unknown sender")
    return outcome


def format_dispatch_summary(outcome: DispatchOutcome) -> str:
    company = outcome.company_name or "unknown"
    strategy = outcome.strategy or "none"
    attempted = ",".join(outcome.attempted) or "none"
    return (
        f"Dispatch: company={company} strategy={strategy} records={len(outcome.drafts)} "
        f"attempted={attempted}"
    )
