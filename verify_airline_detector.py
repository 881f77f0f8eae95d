import pytest

from airline_detector import AIRLINE_DOMAIN_MAP, detect_airline, sender_domain
from parser_profiles import PROFILES, get_profile


@pytest.mark.parametrize(
    "sender, expected",
    [
        ("supply@aeroflot.ru", "Aeroflot"),
        ("Supply Dept <Supply@AEROFLOT.RU>", "Aeroflot"),
        ("logistics@mail.atechnics.ru", "A-Technics"),
        ("omts@u6.ru", "Ural Airlines"),
        ("buyer@unknown-mro.net", None),
        ("not-an-address", None),
        ("", None),
    ],
)
def test_detect_airline(sender: str, expected: str | None) -> None:
    assert detect_airline(sender) == expected


def test_sender_domain_ignores_display_name() -> None:
    assert sender_domain('"Ivanov, Petr" <p.ivanov@S7.ru>') == "s7.ru"
    assert sender_domain("plain@example.org") == "example.org"
    assert sender_domain("no at sign") == ""
    print("SUCCESS: sender domain is lower-cased text after the last @.")


def test_custom_domain_map() -> None:
    domain_map = {"example-mro.com": "Example MRO"}
    assert detect_airline("a@example-mro.com", domain_map) == "Example MRO"
    assert detect_airline("a@aeroflot.ru", domain_map) is None
    print("SUCCESS: an explicit domain map replaces the built-in one.")


def test_every_profile_is_reachable_from_a_domain() -> None:
    companies = set(AIRLINE_DOMAIN_MAP.values())
    for name, profile in PROFILES.items():
        assert name in companies
        assert get_profile(name) is profile
        for domain in profile.domain_matchers:
            assert detect_airline(f"rfq@{domain}") == name
    assert get_profile("Unknown Carrier") is None
    assert get_profile(None) is None
    print("SUCCESS: every registered profile maps back from its domain.")


if __name__ == "__main__":
    test_sender_domain_ignores_display_name()
    test_custom_domain_map()
    test_every_profile_is_reachable_from_a_domain()
