from weshare.renderer import css_variables, public_site_url, render_card_preview, render_web_preview
from weshare.schemas.card import (
    BusinessHours,
    CardData,
    ContactFormConfig,
    DayHours,
    LinkItem,
    Profile,
    ServiceItem,
    Theme,
)
from weshare.services.i18n import Localizer


def _card(**updates) -> CardData:
    card = CardData(
        id="site-1",
        internal_name="Portfolio",
        profile=Profile(name="Alex Rivera", bio="Designer"),
        links=[
            LinkItem(id="l1", title="Website", url="https://alex.dev"),
            LinkItem(id="l2", title="Hidden", url="https://hidden.dev", enabled=False),
        ],
    )
    return card.model_copy(update=updates)


def test_card_preview_escapes_user_text() -> None:
    card = _card(profile=Profile(name="<script>alert(1)</script>", bio='"quoted" & more'))

    html = render_card_preview(card)

    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "&quot;quoted&quot; &amp; more" in html


def test_card_preview_shows_only_enabled_links() -> None:
    html = render_card_preview(_card())

    assert 'href="https://alex.dev"' in html
    assert "Hidden" not in html


def test_unsafe_link_scheme_is_neutralised() -> None:
    card = _card(links=[LinkItem(id="l1", title="Click", url="javascript:alert(1)")])

    html = render_card_preview(card)

    assert "javascript:" not in html
    assert 'href="#"' in html


def test_optional_sections_render_only_when_configured() -> None:
    bare = render_card_preview(_card())
    assert "ws-hours" not in bare
    assert "ws-contact" not in bare
    assert "ws-services" not in bare

    card = _card(
        business_hours=BusinessHours(enabled=True, days=[DayHours(day="monday"), DayHours(day="sunday", closed=True)]),
        contact_form=ContactFormConfig(enabled=True, collect_phone=False),
        services=[ServiceItem(id="s1", title="Branding", description="Logos")],
    )
    html = render_card_preview(card, Localizer("es"))

    assert "Horario" in html
    assert "Cerrado" in html
    assert "Servicios" in html
    assert 'name="phone"' not in html
    assert 'name="message"' in html


def test_custom_color_flows_into_css_variables() -> None:
    card = _card(theme=Theme.CUSTOM, custom_color="#ff0066", font="mono")

    variables = css_variables(card)

    assert "--ws-bg: #ff0066" in variables
    assert "JetBrains Mono" in variables


def test_web_preview_is_full_document_with_public_url() -> None:
    html = render_web_preview(_card(), base_url="weshare.site")

    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Alex Rivera</title>" in html
    assert "weshare.site/u/alexrivera" in html


def test_public_site_url_strips_whitespace() -> None:
    card = _card(profile=Profile(name="  Jane  Q Doe "))

    assert public_site_url(card) == "weshare.site/u/janeqdoe"
    assert public_site_url(card, "https://cards.example/") == "https://cards.example/u/janeqdoe"
