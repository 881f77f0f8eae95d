from __future__ import annotations

from email.utils import parseaddr

AIRLINE_DOMAIN_MAP: dict[str, str] = {
    # Russian carriers and MROs
    "aeroflot.ru": "Aeroflot",
    "atechnics.ru": "A-Technics",
    "azurair.ru": "Azur Air",
    "nordwindairlines.ru": "Nordwind Airlines",
    "s7.ru": "S7 Airlines",
    "utair.ru": "UTair Aviation",
    "pobeda.aero": "Pobeda Airlines",
    "rossiya-airlines.com": "Rossiya Airlines",
    "yakutia.aero": "Yakutia Airlines",
    "azimuth.aero": "Azimuth Airlines",
    "smartavia.ru": "Smartavia",
    "pegas-fly.ru": "Pegas Fly",
    "ifly-rus.ru": "iFly Airlines",
    "redwings.aero": "Red Wings Airlines",
    "u6.ru": "Ural Airlines",
    "lukoil.com": "Lukoil",
    # International
    "emirates.com": "Emirates",
    "lufthansa.com": "Lufthansa",
    "airfrance.fr": "Air France",
    "klm.com": "KLM",
    "ba.com": "British Airways",
    "turkishairlines.com": "Turkish Airlines",
    "qatarairways.com": "Qatar Airways",
    "etihad.com": "Etihad Airways",
}


def sender_domain(sender: str) -> str:
    """Lower-cased text after the last ``@``; display names are ignored."""
    _, address = parseaddr(sender or "")
    address = (address or sender or "").strip().strip("<>").lower()
    if "@" not in address:
        return ""
    return address.rsplit("@", 1)[1].strip().rstrip(".>")


def detect_airline(sender: str, domain_map: dict[str, str] | None = None) -> str | None:
    domain_map = AIRLINE_DOMAIN_MAP if domain_map is None else domain_map
    domain = sender_domain(sender)
    if not domain:
        return None
    if domain in domain_map:
        return domain_map[domain]
    # subdomains (mail.aeroflot.ru) and shortened aliases
    for known_domain, company in domain_map.items():
        if known_domain in domain or domain in known_domain:
            return company
    return None
