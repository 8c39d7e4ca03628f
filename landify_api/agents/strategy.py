"""Content strategy stage: headline, value propositions, services and calls to action"""

import json
import logging
from typing import Any, Dict, List
from pydantic import ValidationError
from landify_api.agents.analysis import business_profile
from landify_api.agents.client import CompletionGateway
from landify_api.agents.extractor import extract_json
from landify_api.models.business import BusinessData
from landify_api.models.content import AnalysisResult, CallToAction, CtaButton, Service, StrategyResult
from landify_api.models.errors import GatewayError

logger = logging.getLogger(__name__)

STRATEGY_SYSTEM_PROMPT = """You are a content strategist. Craft a compelling content strategy step by step, referencing business analysis data.
Never use generic phrases such as "quality service" or "customer satisfaction"; every line must name something specific to this business or its location.
Think step by step, outline your reasoning, then output JSON:
{
  "headline": "...",
  "subheadline": "...",
  "valuePropositions": ["..."],
  "services": [{"name": "", "description": "", "features": [""]}],
  "callToAction": {"primary": {"text": "", "action": ""}, "secondary": {"text": "", "action": ""}},
  "aboutSection": "...",
  "confidence": 0-100,
  "reasoning": "..."
}

Example:
Business: "Corner Café"
Analysis: {"targetMarket": "tourists and remote workers", "competitiveEdge": "local sourcing"}
Reasoning:
1. Identify core audience: tourists need convenience, remote workers need atmosphere
2. Frame unique services: local sourcing + wifi/workspace
Final JSON:
{"headline": "Your Local Coffee Haven", "subheadline": "Locally sourced coffee in the heart of downtown", "valuePropositions": ["Premium local beans", "Tourist-friendly location", "Remote work atmosphere"], "confidence": 85}

Example:
Business: "QuickFix Plumbing"
Analysis: {"targetMarket": "suburban homeowners", "competitiveEdge": "24/7 emergency service"}
Reasoning:
1. Local trust focus: homeowners value reliability
2. Highlight 24/7 availability: emergency situations create urgency
Final JSON:
{"headline": "24/7 Emergency Plumbing You Can Trust", "subheadline": "Fast, reliable service when you need it most", "valuePropositions": ["Emergency availability", "Local expertise", "Trustworthy service"], "confidence": 80}"""

CRITIQUE_SYSTEM_PROMPT = "You are an expert reviewer. Respond ONLY in English language. Return the complete JSON with the same keys."

QUICK_SYSTEM_PROMPT = "You are a content strategist. Return only JSON in English."

_KEYS = {
    "headline": "headline",
    "subheadline": "subheadline",
    "valuePropositions": "value_propositions",
    "services": "services",
    "callToAction": "call_to_action",
    "aboutSection": "about_section",
    "trustSignals": "trust_signals",
    "reasoning": "reasoning",
}


def fallback_strategy(business: BusinessData) -> StrategyResult:
    """Deterministic messaging derived only from the business data"""
    return StrategyResult(
        headline=f"Welcome to {business.name}",
        subheadline=f"Expert {business.type} services in {business.address or 'your area'}",
        value_propositions=["Reliable service", "Local expertise", "Customer-first approach"],
        services=[Service(name="Our Services", description=f"Professional {business.type} services tailored to your needs")],
        call_to_action=CallToAction(
            primary=CtaButton(text="Contact Us", action="contact"),
            secondary=CtaButton(text="Learn More", action="info"),
        ),
        about_section=f"{business.name} provides exceptional service and professional expertise.",
        confidence=50,
        reasoning="Fallback due to parse error",
        success=False,
    )


def _normalize_services(raw: Any) -> List[Dict[str, Any]]:
    """Accept ["Delivery", {"name": ...}, ...]; drop entries without a name"""
    if not isinstance(raw, list):
        raw = [raw]
    services = []
    for item in raw:
        if isinstance(item, str) and item.strip():
            services.append({"name": item.strip()})
        elif isinstance(item, dict) and item.get("name"):
            services.append(item)
    return services


def _normalize_cta(raw: Any) -> Any:
    """Accept "Call now", {"text": "Call now"} or {"primary": "Call now"} as well as the full shape"""
    if isinstance(raw, str):
        return {"primary": {"text": raw, "action": "contact"}}
    if isinstance(raw, dict):
        if "text" in raw and "primary" not in raw and "secondary" not in raw:
            return {"primary": raw}
        return {
            slot: {"text": button, "action": "contact" if slot == "primary" else "info"} if isinstance(button, str) else button
            for slot, button in raw.items()
            if slot in ("primary", "secondary") and button
        }
    return raw


def _parse(text: str, business: BusinessData, base: StrategyResult) -> StrategyResult:
    extraction = extract_json(text, fallback={})
    if not extraction.success:
        return fallback_strategy(business)

    data: Dict[str, Any] = extraction.data
    values = {field: data[wire] for wire, field in _KEYS.items() if data.get(wire) not in (None, "", [], {})}
    if "services" in values:
        values["services"] = _normalize_services(values["services"]) or base.services
    if "call_to_action" in values:
        try:
            values["call_to_action"] = CallToAction.model_validate(_normalize_cta(values["call_to_action"]))
        except ValidationError:
            logger.info("[Strategy] Ignoring unusable callToAction, keeping the default buttons")
            del values["call_to_action"]
    values["confidence"] = extraction.confidence if "confidence" in data else base.confidence
    try:
        return StrategyResult.model_validate({**base.model_dump(), **values, "success": True})
    except ValidationError as e:
        logger.warning(f"[Strategy] Response did not fit the strategy schema: {e.error_count()} errors")
        return fallback_strategy(business)


def _build_prompt(business: BusinessData, analysis: AnalysisResult) -> str:
    return f"""Business: {business.name} ({business.type})
Location: {business.address or 'N/A'}

Based on this business analysis:
{json.dumps(analysis.to_wire(), indent=2, ensure_ascii=False)}

Full business record:
{business_profile(business)}

Craft a unique content strategy for a landing page. Mention the neighbourhood or city and what only this business offers. Think step-by-step, then return JSON as specified."""


def _critique_prompt(first: StrategyResult) -> str:
    payload = first.to_wire()
    payload.pop("success", None)
    return (
        "Review and refine this content strategy JSON. Remove anything generic and enhance business/location specificity.\n"
        f"JSON: {json.dumps(payload, indent=2, ensure_ascii=False)}"
    )


async def plan_content(
    gateway: CompletionGateway,
    business: BusinessData,
    analysis: AnalysisResult,
    *,
    critique: bool = True,
) -> StrategyResult:
    """
    Thorough content plan built on the analysis, with an optional critique pass.

    Same recovery rules as analyze_business().
    """
    logger.info(f"[Strategy] Planning content for {business.name}")
    # Fields the model omits fall back to business-derived defaults, but the
    # result still counts as a successful parse
    first_pass_base = fallback_strategy(business).model_copy(update={"confidence": 70, "reasoning": ""})
    try:
        text = await gateway.complete(
            STRATEGY_SYSTEM_PROMPT, _build_prompt(business, analysis), temperature=0.8, max_tokens=2000
        )
    except GatewayError as e:
        logger.warning(f"[Strategy] Gateway failed, using fallback strategy: {e.message}")
        return fallback_strategy(business)

    first = _parse(text, business, first_pass_base)
    if not first.success or not critique:
        logger.info(f"[Strategy] Done (success={first.success}, confidence={first.confidence})")
        return first

    try:
        text = await gateway.complete(CRITIQUE_SYSTEM_PROMPT, _critique_prompt(first), temperature=0.6, max_tokens=1200)
    except GatewayError as e:
        logger.warning(f"[Strategy] Critique failed, keeping first pass: {e.message}")
        return first

    refined = _parse(text, business, first)
    if not refined.success:
        logger.info("[Strategy] Critique unparseable, keeping first pass")
        return first
    logger.info(f"[Strategy] Done after critique (confidence={refined.confidence})")
    return refined


async def quick_content(gateway: CompletionGateway, business: BusinessData) -> StrategyResult:
    """Fast-strategy content call; runs without the analysis"""
    prompt = f"""Business: {business.name} ({business.type})
Location: {business.address or 'N/A'}
Description: {business.description or 'N/A'}

Create compelling content. Return JSON:
{{
  "headline": "catchy main headline",
  "subheadline": "supporting description",
  "valuePropositions": ["benefit 1", "benefit 2", "benefit 3"],
  "services": [{{"name": "service name", "description": "brief description", "features": ["feature 1", "feature 2"]}}],
  "callToAction": {{"primary": {{"text": "action text", "action": "contact"}}, "secondary": {{"text": "secondary text", "action": "info"}}}},
  "aboutSection": "brief about paragraph",
  "trustSignals": ["signal 1", "signal 2", "signal 3"]
}}"""
    try:
        text = await gateway.complete(QUICK_SYSTEM_PROMPT, prompt, temperature=0.8, max_tokens=800)
    except GatewayError as e:
        logger.warning(f"[Strategy] Quick content gateway failure, using fallback: {e.message}")
        return fallback_strategy(business)
    base = fallback_strategy(business).model_copy(update={"confidence": 70, "reasoning": ""})
    return _parse(text, business, base)
