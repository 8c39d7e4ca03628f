"""Tests for HTML/theme synthesis and content merging"""

import json
import pytest
from pydantic import ValidationError
from landify_api.agents import themes
from landify_api.agents.synthesis import (
    INVALID_HTML_MESSAGE,
    INVALID_THEME_MESSAGE,
    SynthesisPolicy,
    generate_html,
    generate_theme_and_layout,
    is_valid_html,
    merge_content,
    synthesize,
    synthesize_fast,
)
from landify_api.models.content import AnalysisResult, Layout, StrategyResult
from landify_api.models.errors import ErrorCode, GatewayError, InvalidArtifactError
from conftest import THEME_JSON, VALID_HTML, ScriptedGateway


@pytest.fixture
def analysis():
    return AnalysisResult(target_market="Families around Elm Street", competitive_edge="Wood-fired oven", confidence=82)


@pytest.fixture
def strategy():
    return StrategyResult(headline="Slices on Elm", confidence=84)


@pytest.mark.parametrize("html, expected", [
    (VALID_HTML, True),
    ("<HTML><BODY>shouting</BODY></HTML>", True),
    ("<html><head></head></html>", False),
    ("<body>fragment</body>", False),
    ("<html><body>unterminated", False),
    ("", False),
    (None, False),
])
def test_is_valid_html(html, expected):
    assert is_valid_html(html) is expected


class TestGenerateHtml:

    @pytest.mark.asyncio
    async def test_strips_fences(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway([f"```html\n{VALID_HTML}\n```"])
        html = await generate_html(gateway, pizza_business, analysis, strategy)
        assert html == VALID_HTML
        assert (gateway.calls[0].temperature, gateway.calls[0].max_tokens) == (0.95, 2000)
        assert "Slices on Elm" in gateway.calls[0].user_prompt

    @pytest.mark.asyncio
    async def test_fast_prompt_settings(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway([VALID_HTML])
        await generate_html(gateway, pizza_business, analysis, strategy, fast=True)
        call = gateway.calls[0]
        assert (call.temperature, call.max_tokens) == (0.9, 1500)
        assert "(555) 123-4567" in call.user_prompt

    @pytest.mark.asyncio
    async def test_missing_body_is_invalid(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway(["<html><head><title>x</title></head></html>"])
        with pytest.raises(InvalidArtifactError) as exc_info:
            await generate_html(gateway, pizza_business, analysis, strategy)
        assert exc_info.value.message == INVALID_HTML_MESSAGE
        assert exc_info.value.artifact == "html"
        assert exc_info.value.code == ErrorCode.INVALID_ARTIFACT


class TestGenerateThemeAndLayout:

    @pytest.mark.asyncio
    async def test_parses_theme_and_layout(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway([THEME_JSON])
        theme, layout = await generate_theme_and_layout(gateway, pizza_business, analysis, strategy)

        assert (gateway.calls[0].temperature, gateway.calls[0].max_tokens) == (0.85, 1800)
        assert theme.id == "theme-ember"
        assert theme.colors.primary == "#b91c1c"
        # Colours the model left out keep their defaults
        assert theme.colors.accent == "#f59e0b"
        assert theme.fonts.heading == "Playfair Display"
        assert layout.type == "story-driven"
        assert [s.id for s in layout.sections] == ["hero", "menu"]
        assert layout.sections[1].model_extra == {"columns": 3}
        assert layout.global_style == {"containerWidth": "max-w-6xl"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        '{"theme": {"id": "t", "name": "Bare"}}',
        '{"layout": {"type": "hero-centric"}}',
        '{"theme": {}, "layout": {}}',
        '{"theme": "dark", "layout": "grid"}',
        "no json",
    ])
    async def test_incomplete_response(self, pizza_business, analysis, strategy, response):
        with pytest.raises(InvalidArtifactError) as exc_info:
            await generate_theme_and_layout(ScriptedGateway([response]), pizza_business, analysis, strategy)
        assert exc_info.value.message == INVALID_THEME_MESSAGE
        assert exc_info.value.artifact == "theme"

    @pytest.mark.asyncio
    async def test_schema_mismatch(self, pizza_business, analysis, strategy):
        response = '{"theme": {"colors": "red"}, "layout": {"sections": [{"variant": "no id"}]}}'
        with pytest.raises(InvalidArtifactError):
            await generate_theme_and_layout(ScriptedGateway([response]), pizza_business, analysis, strategy)


HERO = {"id": "hero", "order": 1, "variant": "split-image"}


class TestLayoutValidation:

    def test_valid_layout(self):
        layout = Layout.model_validate({
            "type": "service-focused",
            "pageFlow": "card-based",
            "sections": [HERO, {"id": "services", "order": 2, "columns": 4}],
            "globalStyle": {"borderRadius": "rounded-xl", "accentGlow": "soft"},
            "responsiveBreakpoints": {"mobile": "block"},
        })
        assert layout.page_flow == "card-based"
        assert layout.global_style["accentGlow"] == "soft"

    @pytest.mark.parametrize("data", [
        {"type": "banana", "sections": [HERO]},
        {"pageFlow": "sideways", "sections": [HERO]},
        {"sections": [HERO, {"id": "about", "order": 1}]},
        {"sections": [{"id": "about", "order": 1}]},
        {"sections": []},
        {"sections": [HERO, {"id": "services", "order": 2, "columns": 7}]},
        {"sections": [HERO, {"id": "services", "order": 2, "columns": "three"}]},
        {"sections": [HERO], "globalStyle": {"borderRadius": "rounded-3xl"}},
        {"sections": [HERO], "responsiveBreakpoints": {"tablet": "sm:block"}},
    ])
    def test_invalid_layout(self, data):
        with pytest.raises(ValidationError):
            Layout.model_validate(data)

    def test_default_layout_is_valid(self):
        layout = themes.default_layout()
        assert Layout.model_validate(layout.to_wire()) == layout

    @pytest.mark.asyncio
    async def test_unknown_layout_type_is_invalid_artifact(self, pizza_business, analysis, strategy):
        response = json.loads(THEME_JSON)
        response["layout"]["type"] = "banana"
        with pytest.raises(InvalidArtifactError) as exc_info:
            await generate_theme_and_layout(ScriptedGateway([json.dumps(response)]), pizza_business, analysis, strategy)
        assert exc_info.value.artifact == "theme"

    @pytest.mark.asyncio
    async def test_layout_without_hero_falls_back(self, pizza_business, analysis, strategy):
        response = json.loads(THEME_JSON)
        response["layout"]["sections"] = [{"id": "menu", "order": 1}]
        gateway = ScriptedGateway([VALID_HTML, json.dumps(response)])
        content = await synthesize(gateway, pizza_business, analysis, strategy, policy=SynthesisPolicy.FALLBACK)

        assert content.layout == themes.default_layout()
        assert content.theme == themes.default_theme(pizza_business)
        assert content.meta.fallbacks == ["theme"]


class TestSynthesize:

    @pytest.mark.asyncio
    async def test_happy_path(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway([VALID_HTML, THEME_JSON])
        content = await synthesize(gateway, pizza_business, analysis, strategy)

        assert content.html_document == VALID_HTML
        assert content.theme.id == "theme-ember"
        assert content.meta.fallbacks == []
        assert content.meta.strategy == "thorough"
        assert content.meta.analysis_confidence == 82
        assert content.meta.strategy_confidence == 84

    @pytest.mark.asyncio
    async def test_invalid_html_strict_raises(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway(["<html>no body</html>"])
        with pytest.raises(InvalidArtifactError) as exc_info:
            await synthesize(gateway, pizza_business, analysis, strategy, policy=SynthesisPolicy.STRICT)
        assert exc_info.value.message == "AI did not return valid HTML"
        # Theme is never requested once the HTML failed
        assert len(gateway.calls) == 1

    @pytest.mark.asyncio
    async def test_invalid_html_fallback_uses_template(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway(["<html>no body</html>", THEME_JSON])
        content = await synthesize(gateway, pizza_business, analysis, strategy, policy=SynthesisPolicy.FALLBACK)

        assert is_valid_html(content.html_document)
        assert "Slices on Elm" in content.html_document
        assert content.meta.fallbacks == ["html"]
        assert content.theme.id == "theme-ember"

    @pytest.mark.asyncio
    async def test_gateway_error_fallback(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway([GatewayError("timeout"), GatewayError("timeout")])
        content = await synthesize(gateway, pizza_business, analysis, strategy)
        assert content.meta.fallbacks == ["html", "theme"]

    @pytest.mark.asyncio
    async def test_missing_layout_strict_raises(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway([VALID_HTML, '{"theme": {"id": "t", "name": "Only theme"}}'])
        with pytest.raises(InvalidArtifactError) as exc_info:
            await synthesize(gateway, pizza_business, analysis, strategy, policy=SynthesisPolicy.STRICT)
        assert exc_info.value.message == "missing theme or layout"

    @pytest.mark.asyncio
    async def test_missing_layout_fallback_is_deterministic(self, pizza_business, analysis, strategy):
        response = '{"theme": {"id": "t", "name": "Only theme"}}'
        first = await synthesize(ScriptedGateway([VALID_HTML, response]), pizza_business, analysis, strategy)
        second = await synthesize(ScriptedGateway([VALID_HTML, response]), pizza_business, analysis, strategy)

        assert first.theme == themes.default_theme(pizza_business)
        assert first.layout == themes.default_layout()
        assert first.theme.id == "theme-restaurant"
        assert first.meta.fallbacks == ["theme"]
        assert first == second

    @pytest.mark.asyncio
    async def test_failed_stages_are_listed(self, pizza_business):
        analysis = AnalysisResult(target_market="x", competitive_edge="y", success=False)
        strategy = StrategyResult(success=False)
        content = await synthesize(ScriptedGateway([VALID_HTML, THEME_JSON]), pizza_business, analysis, strategy)
        assert content.meta.fallbacks == ["analysis", "strategy"]

    @pytest.mark.asyncio
    async def test_fast_uses_category_theme(self, pizza_business, analysis, strategy):
        gateway = ScriptedGateway([VALID_HTML])
        content = await synthesize_fast(gateway, pizza_business, analysis, strategy)

        assert len(gateway.calls) == 1
        assert content.theme == themes.default_theme(pizza_business)
        assert content.layout == themes.default_layout()
        assert content.meta.strategy == "fast"


class TestMergeContent:

    def test_contact_info_copied_verbatim(self, pizza_business):
        content = merge_content(
            pizza_business, StrategyResult(), VALID_HTML, themes.default_theme(pizza_business), themes.default_layout()
        )
        assert content.contact_info.phone == "(555) 123-4567"
        assert content.contact_info.address == "12 Elm Street, Springfield, IL"
        assert content.contact_info.email == "hello@tonyspizza.example"
        assert content.contact_info.website == "https://tonyspizza.example"

    def test_gaps_filled_from_business(self, pizza_business):
        content = merge_content(
            pizza_business, StrategyResult(), VALID_HTML, themes.default_theme(pizza_business), themes.default_layout()
        )
        assert content.headline == "Tony's Pizza"
        assert content.subheadline == "Professional pizza restaurant services"
        assert content.value_propositions == ["Quality Service", "Professional Excellence", "Customer Satisfaction"]
        assert content.services[0].name == "Our Services"
        assert content.call_to_action.primary.text == "Contact Us"
        assert content.trust_signals == themes.DEFAULT_TRUST_SIGNALS
        assert content.location_highlights == ["Serving Springfield", "Fast Response Time", "Local Knowledge"]
        assert content.meta is None

    def test_strategy_values_win(self, minimal_business):
        strategy = StrategyResult(headline="Leaks fixed today", trust_signals=["Licensed since 2004"])
        content = merge_content(
            minimal_business, strategy, VALID_HTML, themes.default_theme(minimal_business), themes.default_layout()
        )
        assert content.headline == "Leaks fixed today"
        assert content.trust_signals == ["Licensed since 2004"]
        assert content.contact_info.phone == ""
        assert content.business_hours is None

    def test_wire_format_is_camel_case(self, pizza_business):
        content = merge_content(
            pizza_business, StrategyResult(), VALID_HTML, themes.default_theme(pizza_business), themes.default_layout()
        )
        wire = content.to_wire()
        assert wire["htmlDocument"] == VALID_HTML
        assert wire["contactInfo"]["phone"] == "(555) 123-4567"
        assert wire["layout"]["pageFlow"] == "vertical-scroll"
        assert wire["theme"]["colors"]["gradientFrom"] == "#dc2626"
