from weshare.services.auth import UserContext
from weshare.services.i18n import CATALOGUES, Localizer
from weshare.services.templates import default_card


def test_catalogues_share_keys() -> None:
    assert set(CATALOGUES["es"]) == set(CATALOGUES["en"])


def test_localizer_falls_back_to_english() -> None:
    localizer = Localizer("fr-FR")

    assert localizer.language == "en"
    assert localizer.t("errors.update") == "Failed to update site. Please try again."
    assert localizer.t("unknown.key") == "unknown.key"


def test_localizer_region_and_params() -> None:
    custom = Localizer("es-MX", {"en": {"greet": "Hi {name}"}, "es": {"greet": "Hola {name}"}})

    assert custom.t("greet", name="Ana") == "Hola Ana"
    assert Localizer("es").t("errors.delete") == "No se pudo eliminar el sitio. Inténtalo de nuevo."


def test_default_card_uses_profile_name_or_placeholder() -> None:
    named = default_card(UserContext(id="u1", full_name="Alex Rivera"))
    anonymous = default_card(UserContext(id="u2"))

    assert named.id == ""
    assert named.internal_name == "New Untitled Site"
    assert named.profile.name == "Alex Rivera"
    assert anonymous.internal_name == "New Untitled Site"
    assert anonymous.profile.name == "Your Name"
    assert len({link.id for link in named.links}) == 3
    assert named.analytics.views == 0
