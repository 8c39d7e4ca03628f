"""Shared fixtures: a scripted completion gateway and sample business data"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional
import pytest
from landify_api.agents import themes
from landify_api.agents.synthesis import merge_content
from landify_api.models.business import BusinessData
from landify_api.models.content import StrategyResult

ANALYSIS_JSON = json.dumps({
    "targetMarket": "Families and students around Elm Street",
    "competitiveEdge": "Wood-fired oven and 20-minute delivery",
    "valueDrivers": ["Fresh dough daily", "Fast delivery"],
    "customerPainPoints": ["Soggy delivery pizza"],
    "localAdvantages": ["Two blocks from Springfield High"],
    "brandPersonality": "Warm and lively",
    "emotionalTriggers": "Friday night family dinners",
    "confidence": 82,
    "reasoning": "Dense residential area with a school nearby",
})

REFINED_ANALYSIS_JSON = json.dumps({
    "targetMarket": "Springfield families ordering Friday dinner",
    "competitiveEdge": "Wood-fired oven and 20-minute delivery",
    "confidence": 88,
})

STRATEGY_JSON = json.dumps({
    "headline": "Tony's Pizza: Wood-Fired Slices on Elm Street",
    "subheadline": "Springfield's neighbourhood pizzeria since 1998",
    "valuePropositions": ["Dough made fresh every morning", "Delivered in 20 minutes", "Family recipes"],
    "services": [
        {"name": "Dine-in", "description": "Twelve tables and a view of the oven", "features": ["Kids menu"]},
        {"name": "Delivery", "description": "Hot to your door anywhere in Springfield"},
    ],
    "callToAction": {
        "primary": {"text": "Order Now", "action": "order"},
        "secondary": {"text": "See the Menu", "action": "menu"},
    },
    "aboutSection": "Tony opened the shop on Elm Street in 1998.",
    "trustSignals": ["Family owned", "4.8 stars on Google"],
    "confidence": 84,
})

VALID_HTML = "<!DOCTYPE html><html><head><title>Tony's Pizza</title></head><body><h1>Tony's Pizza</h1></body></html>"

THEME_JSON = json.dumps({
    "theme": {
        "id": "theme-ember",
        "name": "Ember",
        "businessType": "pizza restaurant",
        "colors": {"primary": "#b91c1c", "secondary": "#f97316"},
        "fonts": {"heading": "Playfair Display", "body": "Lato"},
    },
    "layout": {
        "type": "story-driven",
        "pageFlow": "sectioned-blocks",
        "sections": [
            {"id": "hero", "order": 1, "variant": "split-image"},
            {"id": "menu", "order": 2, "variant": "cards", "columns": 3},
        ],
        "globalStyle": {"containerWidth": "max-w-6xl"},
    },
})


@dataclass
class Call:
    system_prompt: str
    user_prompt: str
    temperature: float
    max_tokens: int


class ScriptedGateway:
    """
    CompletionGateway test double.

    Answers each call with the next scripted response (a string, or an
    exception to raise), then with `default` once the script runs out.
    Every call is recorded in order.
    """

    def __init__(self, responses: Optional[List[Any]] = None, default: Any = None):
        self.responses = list(responses or [])
        self.default = default
        self.calls: List[Call] = []

    async def complete(self, system_prompt: str, user_prompt: str, *, temperature: float, max_tokens: int) -> str:
        self.calls.append(Call(system_prompt, user_prompt, temperature, max_tokens))
        item = self.responses.pop(0) if self.responses else self.default
        if isinstance(item, BaseException):
            raise item
        if item is None:
            raise AssertionError(f"Unexpected completion call #{len(self.calls)}")
        return item


@pytest.fixture
def pizza_business():
    return BusinessData(
        name="Tony's Pizza",
        type="pizza restaurant",
        address="12 Elm Street, Springfield, IL",
        phone="(555) 123-4567",
        email="hello@tonyspizza.example",
        website="https://tonyspizza.example",
    )


@pytest.fixture
def minimal_business():
    """Only the required field"""
    return BusinessData(name="Ace Plumbing")


@pytest.fixture
def pizza_content(pizza_business):
    """FinalContent assembled without any completion calls"""
    return merge_content(
        pizza_business,
        StrategyResult(headline="Slices on Elm"),
        VALID_HTML,
        themes.default_theme(pizza_business),
        themes.default_layout(),
    )
