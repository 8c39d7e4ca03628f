"""Business analysis stage: market, positioning and customer insight"""

import json
import logging
from typing import Any, Dict, Optional
from pydantic import ValidationError
from landify_api.agents.client import CompletionGateway
from landify_api.agents.extractor import extract_json
from landify_api.models.business import BusinessData, GenerationPreferences
from landify_api.models.content import AnalysisResult
from landify_api.models.errors import GatewayError

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = """You are a business analyst. Analyze the business context, target market, competitors, and unique positioning.
IMPORTANT: Respond ONLY in English language. All content must be in English.
Think step by step and at each step note your reasoning before summarizing.
Respond in JSON according to this schema exactly:
{
  "targetMarket": "...",
  "competitiveEdge": "...",
  "valueDrivers": ["..."],
  "customerPainPoints": ["..."],
  "conversionTriggers": ["..."],
  "localAdvantages": ["..."],
  "brandPersonality": "...",
  "emotionalTriggers": "...",
  "contentImplications": "...",
  "confidence": 0-100,
  "reasoning": "..."
}

Example:
Business: "Corner Café" at downtown city center. Data: small café, local coffee roasters, tourist foot traffic.
Step-by-step reasoning:
1. Analyze location demographics...
2. Identify competitors like chain coffee shops...
Final JSON:
{"targetMarket": "tourists and remote workers", "competitiveEdge": "local sourcing and prime location", "confidence": 80, "reasoning": "Downtown location attracts both tourists and remote workers"}

Example:
Business: "QuickFix Plumbing" suburban area. Reasoning steps...
Final JSON:
{"targetMarket": "homeowners in suburban areas", "competitiveEdge": "24/7 emergency service", "confidence": 85, "reasoning": "Suburban homeowners need reliable emergency plumbing"}"""

CRITIQUE_SYSTEM_PROMPT = "You are an expert reviewer. Respond ONLY in English language. Return the complete JSON with the same keys."

QUICK_SYSTEM_PROMPT = "You are a business analyst. Return only JSON in English."

# Wire key -> AnalysisResult field
_KEYS = {
    "targetMarket": "target_market",
    "competitiveEdge": "competitive_edge",
    "valueDrivers": "value_drivers",
    "customerPainPoints": "pain_points",
    "emotionalTriggers": "emotional_triggers",
    "localAdvantages": "local_advantages",
    "brandPersonality": "brand_personality",
    "reasoning": "reasoning",
}


def business_profile(business: BusinessData) -> str:
    """JSON dump of every known business field, for prompts"""
    return json.dumps(business.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2, ensure_ascii=False)


def fallback_analysis(business: BusinessData) -> AnalysisResult:
    """Deterministic analysis derived only from the business data"""
    return AnalysisResult(
        target_market=f"Customers of {business.type}",
        competitive_edge="Reliable service",
        confidence=50,
        reasoning="Fallback analysis",
        success=False,
    )


def _build_prompt(business: BusinessData, preferences: Optional[GenerationPreferences]) -> str:
    needs = preferences.model_dump(mode="json", by_alias=True, exclude_none=True) if preferences else {}
    return f"""Business data: {business_profile(business)}
User needs: {json.dumps(needs, indent=2, ensure_ascii=False)}

Please analyze this business in its market context. Use step-by-step reasoning, then output JSON."""


def _critique_prompt(first: AnalysisResult) -> str:
    payload = {wire: getattr(first, field) for wire, field in _KEYS.items()}
    payload["confidence"] = first.confidence
    return (
        "Review this JSON and refine any generic parts to be more specific to this business/location.\n"
        f"JSON: {json.dumps(payload, indent=2, ensure_ascii=False)}"
    )


def _parse(text: str, business: BusinessData, base: AnalysisResult) -> AnalysisResult:
    """Completion text -> AnalysisResult; keys the model left out come from `base`"""
    extraction = extract_json(text, fallback={})
    if not extraction.success:
        return fallback_analysis(business)

    data: Dict[str, Any] = extraction.data
    values = {field: data[wire] for wire, field in _KEYS.items() if data.get(wire) not in (None, "", [])}
    values["confidence"] = extraction.confidence if "confidence" in data else base.confidence
    try:
        return AnalysisResult.model_validate({**base.model_dump(), **values, "success": True})
    except ValidationError as e:
        logger.warning(f"[Analysis] Response did not fit the analysis schema: {e.error_count()} errors")
        return fallback_analysis(business)


async def analyze_business(
    gateway: CompletionGateway,
    business: BusinessData,
    preferences: Optional[GenerationPreferences] = None,
    *,
    critique: bool = True,
) -> AnalysisResult:
    """
    Thorough analysis: one reasoning call plus an optional self-critique pass.

    Malformed output and gateway failures degrade to fallback_analysis();
    configuration errors propagate.
    """
    logger.info(f"[Analysis] Analyzing {business.name} ({business.type})")
    try:
        text = await gateway.complete(
            ANALYSIS_SYSTEM_PROMPT, _build_prompt(business, preferences), temperature=0.7, max_tokens=2000
        )
    except GatewayError as e:
        logger.warning(f"[Analysis] Gateway failed, using fallback analysis: {e.message}")
        return fallback_analysis(business)

    first_pass_base = fallback_analysis(business).model_copy(update={"confidence": 70, "reasoning": ""})
    first = _parse(text, business, first_pass_base)
    if not first.success or not critique:
        logger.info(f"[Analysis] Done (success={first.success}, confidence={first.confidence})")
        return first

    try:
        text = await gateway.complete(CRITIQUE_SYSTEM_PROMPT, _critique_prompt(first), temperature=0.5, max_tokens=1000)
    except GatewayError as e:
        logger.warning(f"[Analysis] Critique failed, keeping first pass: {e.message}")
        return first

    refined = _parse(text, business, first)
    if not refined.success:
        logger.info("[Analysis] Critique unparseable, keeping first pass")
        return first
    logger.info(f"[Analysis] Done after critique (confidence={refined.confidence})")
    return refined


async def quick_analysis(gateway: CompletionGateway, business: BusinessData) -> AnalysisResult:
    """Single short call used by the fast strategy; no critique"""
    prompt = f"""Business: {business.name} ({business.type})
Location: {business.address or 'N/A'}
Description: {business.description or 'N/A'}

Analyze the target market and competitive edge. Return JSON:
{{
  "targetMarket": "primary customer type",
  "competitiveEdge": "main advantage",
  "emotionalTriggers": "key emotional appeal"
}}"""
    try:
        text = await gateway.complete(QUICK_SYSTEM_PROMPT, prompt, temperature=0.7, max_tokens=300)
    except GatewayError as e:
        logger.warning(f"[Analysis] Quick analysis gateway failure, using fallback: {e.message}")
        return fallback_analysis(business)
    base = fallback_analysis(business).model_copy(update={"confidence": 70, "reasoning": ""})
    return _parse(text, business, base)
