from __future__ import annotations

from dataclasses import dataclass

from airline_detector import AIRLINE_DOMAIN_MAP
import vendor_parsers
from vendor_parsers import ParseFn


@dataclass(frozen=True)
class CompanyProfile:
    name: str
    domain_matchers: tuple[str, ...]
    parser_chain: tuple[ParseFn, ...] = ()
    description: str = ""


PROFILES: dict[str, CompanyProfile] = {
    "Aeroflot": CompanyProfile(
        name="Aeroflot",
        domain_matchers=("aeroflot.ru",),
        parser_chain=(
            vendor_parsers.aeroflot_table_parser,
            vendor_parsers.aeroflot_split_table_parser,
        ),
        description="Header tables with rowspan alternates; split header tables as fallback.",
    ),
    "A-Technics": CompanyProfile(
        name="A-Technics",
        domain_matchers=("atechnics.ru",),
        parser_chain=(
            vendor_parsers.atechnics_table_parser,
            vendor_parsers.atechnics_headerless_parser,
        ),
        description="Strict header tables, then headerless index/part/description grids.",
    ),
    "Azur Air": CompanyProfile(
        name="Azur Air",
        domain_matchers=("azurair.ru",),
        parser_chain=(
            vendor_parsers.azur_table_parser,
            vendor_parsers.azur_text_parser,
        ),
        description="Order number and multi-line alternate columns; plain text lines otherwise.",
    ),
    "Lukoil": CompanyProfile(
        name="Lukoil",
        domain_matchers=("lukoil.com",),
        parser_chain=(vendor_parsers.lukoil_table_parser,),
        description="Russian headers, CD column, Cyrillic part numbers rejected.",
    ),
    "iFly Airlines": CompanyProfile(
        name="iFly Airlines",
        domain_matchers=("ifly-rus.ru",),
        parser_chain=(vendor_parsers.ifly_table_parser,),
        description="Two fixed table layouts detected from the first row.",
    ),
    "Yakutia Airlines": CompanyProfile(
        name="Yakutia Airlines",
        domain_matchers=("yakutia.aero",),
        parser_chain=(vendor_parsers.yakutia_parser,),
        description="Labelled PN/Description/Qty/Store_Unit blocks.",
    ),
    "Rossiya Airlines": CompanyProfile(
        name="Rossiya Airlines",
        domain_matchers=("rossiya-airlines.com",),
        parser_chain=(vendor_parsers.rossiya_parser,),
        description="Part number line followed by a quantity line.",
    ),
    "Nordwind Airlines": CompanyProfile(
        name="Nordwind Airlines",
        domain_matchers=("nordwindairlines.ru",),
        parser_chain=(vendor_parsers.reference_parser,),
        description="P/N references inside prose.",
    ),
    "S7 Airlines": CompanyProfile(
        name="S7 Airlines",
        domain_matchers=("s7.ru",),
        parser_chain=(vendor_parsers.reference_parser,),
    ),
    "UTair Aviation": CompanyProfile(
        name="UTair Aviation",
        domain_matchers=("utair.ru",),
        parser_chain=(vendor_parsers.reference_parser,),
        description="Item/Qty pairs or P/N references.",
    ),
    "Pobeda Airlines": CompanyProfile(
        name="Pobeda Airlines",
        domain_matchers=("pobeda.aero",),
        description="AMOS tables, handled by the generic table parser.",
    ),
    "Ural Airlines": CompanyProfile(
        name="Ural Airlines",
        domain_matchers=("u6.ru",),
    ),
}


def get_profile(name: str | None) -> CompanyProfile | None:
    if not name:
        return None
    return PROFILES.get(name)


def register_profile(profile: CompanyProfile) -> None:
    """Add or replace a profile and make its domains detectable."""
    PROFILES[profile.name] = profile
    for domain in profile.domain_matchers:
        AIRLINE_DOMAIN_MAP[domain.lower()] = profile.name
