"""Synthesis stage: HTML document, theme/layout and the final merged content"""

import json
import logging
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import ValidationError
from landify_api.agents import themes
from landify_api.agents.analysis import business_profile
from landify_api.agents.client import CompletionGateway
from landify_api.agents.extractor import extract_json, strip_code_fences
from landify_api.models.business import BusinessData
from landify_api.models.content import (
    AnalysisResult,
    CallToAction,
    ContactInfo,
    CtaButton,
    FinalContent,
    GenerationMeta,
    Layout,
    Service,
    StrategyResult,
    Theme,
)
from landify_api.models.errors import GatewayError, InvalidArtifactError

logger = logging.getLogger(__name__)

DESIGNER_SYSTEM_PROMPT = "You are a creative web designer AI."
FAST_DESIGNER_SYSTEM_PROMPT = "You are a web designer. Return only HTML in English."

INVALID_HTML_MESSAGE = "AI did not return valid HTML"
INVALID_THEME_MESSAGE = "missing theme or layout"


class SynthesisPolicy(str, Enum):
    """What synthesis does with an unusable HTML document or theme/layout"""
    STRICT = "strict"  # raise InvalidArtifactError
    FALLBACK = "fallback"  # substitute the deterministic template / category defaults


THEME_LAYOUT_SCHEMA = f"""1. A unique, business-appropriate theme object (as "theme"):
{{
  "id": string, "name": string, "businessType": string,
  "colors": {{"primary", "secondary", "accent", "background", "backgroundSecondary", "text",
             "textSecondary", "cardBackground", "cardBorder", "gradientFrom", "gradientTo"}} (hex strings),
  "fonts": {{"heading": string, "body": string}},
  "layout": {{"type", "structure", "heroStyle", "sectionOrder": [string], "contentLayout", "navigationStyle", "ctaPlacement"}},
  "spacing": {{"sectionGap", "cardPadding", "containerMaxWidth"}} (Tailwind classes),
  "effects": {{"cardBlur": boolean, "gradientBackground": boolean, "animations": boolean, "shadows": string}}
}}

2. A unique, business-appropriate layout object (as "layout"):
{{
  "type": one of {" | ".join(themes.LAYOUT_TYPES)},
  "pageFlow": one of {" | ".join(themes.PAGE_FLOWS)},
  "sections": [{{"id": "hero" | "services" | "about" | "contact" | "trust" | "menu" | "portfolio" | "features" | "hours" | string,
                "order": number, "variant": string, ...any extra keys}}],
  "globalStyle": {{
    "containerWidth": "max-w-7xl" | "max-w-6xl" | "max-w-5xl" | "max-w-4xl" | "full-width",
    "sectionSpacing": "space-y-8" | "space-y-12" | "space-y-16" | "space-y-20",
    "borderRadius": "rounded-none" | "rounded-lg" | "rounded-xl" | "rounded-2xl",
    "shadowIntensity": "shadow-none" | "shadow-md" | "shadow-lg" | "shadow-xl",
    "animationStyle": "none" | "subtle" | "moderate" | "dynamic"
  }},
  "responsiveBreakpoints": {{"mobile": "block" | "hidden", "tablet": "md:block" | "md:hidden", "desktop": "lg:block" | "lg:hidden"}}
}}"""


def is_valid_html(html: Optional[str]) -> bool:
    """A complete document: <html, <body and </html> present (case-insensitive)"""
    if not html:
        return False
    lower = html.lower()
    return "<html" in lower and "<body" in lower and "</html>" in lower


def _context_block(business: BusinessData, analysis: AnalysisResult, strategy: StrategyResult) -> str:
    strategy_wire = strategy.to_wire()
    strategy_wire.pop("success", None)
    return (
        f"Business Data: {business_profile(business)}\n"
        f"Content Strategy: {json.dumps(strategy_wire, indent=2, ensure_ascii=False)}\n"
        f"Business Analysis: {json.dumps(analysis.to_wire(), indent=2, ensure_ascii=False)}\n"
    )


async def generate_html(
    gateway: CompletionGateway,
    business: BusinessData,
    analysis: AnalysisResult,
    strategy: StrategyResult,
    *,
    fast: bool = False,
) -> str:
    """
    One creative call for the full HTML document.

    Raises InvalidArtifactError when the response is not a complete document.
    Gateway errors propagate.
    """
    if fast:
        services = ", ".join(s.name for s in strategy.services) or "N/A"
        prompt = f"""Create a professional landing page HTML for {business.name}.

Business: {business.name} ({business.type})
Location: {business.address or 'N/A'}
Headline: {strategy.headline or business.name}
Services: {services}
Target market: {analysis.target_market}
Competitive edge: {analysis.competitive_edge}

Requirements:
- Use TailwindCSS CDN
- Include hero, services, about, contact sections
- Mobile responsive
- Professional design
- Include contact info: {business.phone or 'N/A'}, {business.address or 'N/A'}

Return only the complete HTML document."""
        text = await gateway.complete(FAST_DESIGNER_SYSTEM_PROMPT, prompt, temperature=0.9, max_tokens=1500)
    else:
        prompt = f"""You are a creative web designer AI. Generate a fully unique, business-specific landing page HTML for the following business.
- Use TailwindCSS via CDN for styling.
- Do NOT use any boilerplate or generic templates; every page must be visually and structurally unique.
- Use semantic HTML5, creative layouts, and vibrant color schemes inspired by the business type.
- Include a hero section, at least 4 distinct sections (e.g., services, about, testimonials, contact), and interactive calls to action.
- Use the provided business data, content strategy, and business analysis for inspiration.
- Output ONLY the full HTML document as a single string, nothing else.

{_context_block(business, analysis, strategy)}"""
        text = await gateway.complete(DESIGNER_SYSTEM_PROMPT, prompt, temperature=0.95, max_tokens=2000)

    html = strip_code_fences(text)
    if not is_valid_html(html):
        logger.warning(f"[Synthesis] Invalid HTML ({len(html)} chars): {html[:120]!r}")
        raise InvalidArtifactError(INVALID_HTML_MESSAGE, artifact="html")
    logger.info(f"[Synthesis] HTML document generated ({len(html)} chars)")
    return html


async def generate_theme_and_layout(
    gateway: CompletionGateway,
    business: BusinessData,
    analysis: AnalysisResult,
    strategy: StrategyResult,
) -> Tuple[Theme, Layout]:
    """
    One JSON call describing both the theme and the layout.

    Raises InvalidArtifactError unless both keys are present and validate.
    Gateway errors propagate.
    """
    prompt = f"""You are a creative web designer AI. Based on the following business data, content strategy, and business analysis, generate:
{THEME_LAYOUT_SCHEMA}

Output a single JSON object with this structure:
{{
  "theme": {{ ... }},
  "layout": {{ ... }}
}}

Do not include any explanation, just the JSON.

{_context_block(business, analysis, strategy)}"""
    text = await gateway.complete(DESIGNER_SYSTEM_PROMPT, prompt, temperature=0.85, max_tokens=1800)

    extraction = extract_json(text, fallback={})
    theme_data = extraction.data.get("theme")
    layout_data = extraction.data.get("layout")
    if not isinstance(theme_data, dict) or not theme_data or not isinstance(layout_data, dict) or not layout_data:
        logger.warning(f"[Synthesis] Theme/layout response incomplete (keys: {list(extraction.data.keys())})")
        raise InvalidArtifactError(INVALID_THEME_MESSAGE, artifact="theme")

    try:
        # Identity fields the model leaves out come from the category default
        base = themes.default_theme(business).to_wire()
        theme = Theme.model_validate({**base, **theme_data})
        layout = Layout.model_validate(layout_data)
    except ValidationError as e:
        logger.warning(f"[Synthesis] Theme/layout failed validation: {e.error_count()} errors")
        raise InvalidArtifactError(INVALID_THEME_MESSAGE, artifact="theme")
    logger.info(f"[Synthesis] Theme '{theme.name}' with {layout.type} layout ({len(layout.sections)} sections)")
    return theme, layout


def merge_content(
    business: BusinessData,
    strategy: StrategyResult,
    html: str,
    theme: Theme,
    layout: Layout,
    meta: Optional[GenerationMeta] = None,
) -> FinalContent:
    """Assemble FinalContent; gaps in the strategy are filled from the business data"""
    business_type = business.type.lower()
    return FinalContent(
        html_document=html,
        theme=theme,
        layout=layout,
        headline=strategy.headline or business.name,
        subheadline=strategy.subheadline or f"Professional {business_type} services",
        value_propositions=strategy.value_propositions or ["Quality Service", "Professional Excellence", "Customer Satisfaction"],
        services=strategy.services or [
            Service(
                name="Our Services",
                description=f"Professional {business_type} services",
                features=["High Quality", "Expert Team", "Customer Satisfaction"],
            )
        ],
        call_to_action=strategy.call_to_action or CallToAction(
            primary=CtaButton(text="Contact Us", action="contact"),
            secondary=CtaButton(text="Learn More", action="info"),
        ),
        about_section=strategy.about_section or f"{business.name} provides exceptional service and professional expertise.",
        contact_info=ContactInfo(
            phone=business.phone,
            email=business.email or "",
            address=business.address,
            website=business.website or "",
            social_media=business.social_media,
        ),
        trust_signals=strategy.trust_signals or list(themes.DEFAULT_TRUST_SIGNALS),
        location_highlights=themes.location_highlights(business),
        business_hours=business.hours,
        meta=meta,
    )


async def _html_with_policy(
    gateway: CompletionGateway,
    business: BusinessData,
    analysis: AnalysisResult,
    strategy: StrategyResult,
    policy: SynthesisPolicy,
    fallbacks: List[str],
    *,
    fast: bool,
) -> str:
    try:
        return await generate_html(gateway, business, analysis, strategy, fast=fast)
    except (InvalidArtifactError, GatewayError) as e:
        if policy == SynthesisPolicy.STRICT:
            raise
        logger.warning(f"[Synthesis] Using template HTML: {e.message}")
        fallbacks.append("html")
        return themes.fallback_html(business, strategy)


def _meta(strategy_name: str, policy: SynthesisPolicy, analysis: AnalysisResult, strategy: StrategyResult, fallbacks: List[str]) -> GenerationMeta:
    applied = ([] if analysis.success else ["analysis"]) + ([] if strategy.success else ["strategy"]) + fallbacks
    return GenerationMeta(
        strategy=strategy_name,
        policy=policy.value,
        analysis_confidence=analysis.confidence,
        strategy_confidence=strategy.confidence,
        fallbacks=applied,
    )


async def synthesize(
    gateway: CompletionGateway,
    business: BusinessData,
    analysis: AnalysisResult,
    strategy: StrategyResult,
    *,
    policy: SynthesisPolicy = SynthesisPolicy.FALLBACK,
) -> FinalContent:
    """Thorough synthesis: AI HTML, AI theme/layout, merge"""
    fallbacks: List[str] = []
    html = await _html_with_policy(gateway, business, analysis, strategy, policy, fallbacks, fast=False)

    try:
        theme, layout = await generate_theme_and_layout(gateway, business, analysis, strategy)
    except (InvalidArtifactError, GatewayError) as e:
        if policy == SynthesisPolicy.STRICT:
            raise
        logger.warning(f"[Synthesis] Using category default theme: {e.message}")
        fallbacks.append("theme")
        theme, layout = themes.default_theme(business), themes.default_layout()

    return merge_content(business, strategy, html, theme, layout, _meta("thorough", policy, analysis, strategy, fallbacks))


async def synthesize_fast(
    gateway: CompletionGateway,
    business: BusinessData,
    analysis: AnalysisResult,
    strategy: StrategyResult,
    *,
    policy: SynthesisPolicy = SynthesisPolicy.FALLBACK,
) -> FinalContent:
    """Fast synthesis: AI HTML with local category theme and default layout"""
    fallbacks: List[str] = []
    html = await _html_with_policy(gateway, business, analysis, strategy, policy, fallbacks, fast=True)
    theme, layout = themes.default_theme(business), themes.default_layout()
    return merge_content(business, strategy, html, theme, layout, _meta("fast", policy, analysis, strategy, fallbacks))
