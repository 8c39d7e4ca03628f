"""Pipeline stage results, final content and progress events"""

import math
from typing import Any, Dict, List, Literal, Optional, Tuple, Union
from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from landify_api.models.base import FrozenWireModel, WireModel
from landify_api.models.business import BusinessHours, SocialLinks


def _as_list(value: Any) -> Any:
    """Models sometimes answer a list field with a single string"""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return value


def _as_text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    return value


def _clamp_confidence(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 50
    if not math.isfinite(number):
        return 50
    return int(round(min(max(number, 0), 100)))


class AnalysisResult(FrozenWireModel):
    """Market and positioning analysis produced by the business analysis stage"""
    target_market: str
    competitive_edge: str
    value_drivers: List[str] = Field(default_factory=list)
    pain_points: List[str] = Field(default_factory=list)
    emotional_triggers: str = ""
    local_advantages: List[str] = Field(default_factory=list)
    brand_personality: str = ""
    confidence: int = 70
    reasoning: str = ""
    success: bool = True

    @field_validator("value_drivers", "pain_points", "local_advantages", mode="before")
    @classmethod
    def coerce_lists(cls, v):
        return _as_list(v)

    @field_validator("emotional_triggers", "brand_personality", "reasoning", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        return _clamp_confidence(v)


class CtaButton(FrozenWireModel):
    text: str
    action: str = "contact"


class CallToAction(FrozenWireModel):
    primary: CtaButton
    secondary: Optional[CtaButton] = None


class Service(FrozenWireModel):
    name: str
    description: str = ""
    features: List[str] = Field(default_factory=list)
    price: Optional[str] = None
    duration: Optional[str] = None

    @field_validator("features", mode="before")
    @classmethod
    def coerce_features(cls, v):
        return _as_list(v)


class StrategyResult(FrozenWireModel):
    """Messaging produced by the content strategy stage.

    Any field may be missing from a model response; synthesis fills the gaps
    from the business data.
    """
    headline: Optional[str] = None
    subheadline: Optional[str] = None
    value_propositions: List[str] = Field(default_factory=list)
    services: List[Service] = Field(default_factory=list)
    call_to_action: Optional[CallToAction] = None
    about_section: Optional[str] = None
    trust_signals: List[str] = Field(default_factory=list)
    confidence: int = 70
    reasoning: str = ""
    success: bool = True

    @field_validator("value_propositions", "trust_signals", mode="before")
    @classmethod
    def coerce_lists(cls, v):
        return _as_list(v)

    @field_validator("reasoning", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        return _clamp_confidence(v)


class ThemeColors(WireModel):
    primary: str = "#2563eb"
    secondary: str = "#3b82f6"
    accent: str = "#f59e0b"
    background: str = "#ffffff"
    background_secondary: str = "#f8fafc"
    text: str = "#1f2937"
    text_secondary: str = "#6b7280"
    card_background: str = "#ffffff"
    card_border: str = "#e5e7eb"
    gradient_from: str = "#2563eb"
    gradient_to: str = "#3b82f6"


class ThemeFonts(WireModel):
    heading: str = "Inter"
    body: str = "Inter"


class ThemeSpacing(WireModel):
    section_gap: str = "space-y-16"
    card_padding: str = "p-6"
    container_max_width: str = "max-w-6xl"


class ThemeEffects(WireModel):
    card_blur: bool = False
    gradient_background: bool = True
    animations: bool = True
    shadows: str = "shadow-md"


class Theme(WireModel):
    """Colour, font and spacing description of a landing page"""
    id: str
    name: str
    business_type: str = "business"
    colors: ThemeColors = Field(default_factory=ThemeColors)
    fonts: ThemeFonts = Field(default_factory=ThemeFonts)
    spacing: ThemeSpacing = Field(default_factory=ThemeSpacing)
    effects: ThemeEffects = Field(default_factory=ThemeEffects)
    layout: Dict[str, Any] = Field(default_factory=dict)


LayoutType = Literal[
    "hero-centric", "service-focused", "story-driven", "contact-first",
    "visual-portfolio", "minimal-modern", "full-immersive",
]
PageFlow = Literal["vertical-scroll", "sectioned-blocks", "card-based", "magazine-style"]

# Allowed values for the keys the layout prompt constrains; other keys pass through
GLOBAL_STYLE_VALUES: Dict[str, Tuple[str, ...]] = {
    "containerWidth": ("max-w-7xl", "max-w-6xl", "max-w-5xl", "max-w-4xl", "full-width"),
    "sectionSpacing": ("space-y-8", "space-y-12", "space-y-16", "space-y-20"),
    "borderRadius": ("rounded-none", "rounded-lg", "rounded-xl", "rounded-2xl"),
    "shadowIntensity": ("shadow-none", "shadow-md", "shadow-lg", "shadow-xl"),
    "animationStyle": ("none", "subtle", "moderate", "dynamic"),
}
BREAKPOINT_VALUES: Dict[str, Tuple[str, ...]] = {
    "mobile": ("block", "hidden"),
    "tablet": ("md:block", "md:hidden"),
    "desktop": ("lg:block", "lg:hidden"),
}


def _check_enum_values(values: Dict[str, Any], allowed: Dict[str, Tuple[str, ...]]) -> Dict[str, Any]:
    for key, value in values.items():
        if key in allowed and value not in allowed[key]:
            raise ValueError(f"{key} must be one of {', '.join(allowed[key])}, got {value!r}")
    return values


class LayoutSection(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    order: int
    variant: str = "default"


class Layout(WireModel):
    """Section ordering and global styling of a landing page.

    Sections need unique orders and a hero; services grids take 1-4 columns.
    """
    type: LayoutType = "hero-centric"
    page_flow: PageFlow = "vertical-scroll"
    sections: List[LayoutSection] = Field(default_factory=list)
    global_style: Dict[str, Any] = Field(default_factory=dict)
    responsive_breakpoints: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("global_style")
    @classmethod
    def check_global_style(cls, v):
        return _check_enum_values(v, GLOBAL_STYLE_VALUES)

    @field_validator("responsive_breakpoints")
    @classmethod
    def check_breakpoints(cls, v):
        return _check_enum_values(v, BREAKPOINT_VALUES)

    @model_validator(mode="after")
    def check_sections(self):
        orders = [s.order for s in self.sections]
        if len(orders) != len(set(orders)):
            raise ValueError("Section orders must be unique")
        if not any(s.id == "hero" for s in self.sections):
            raise ValueError("Layout must include a hero section")
        for section in self.sections:
            columns = (section.model_extra or {}).get("columns")
            if section.id == "services" and columns is not None and (
                isinstance(columns, bool) or not isinstance(columns, int) or not 1 <= columns <= 4
            ):
                raise ValueError(f"Invalid column count for section {section.id}: {columns!r}")
        return self


class ContactInfo(WireModel):
    phone: str = ""
    email: str = ""
    address: str = ""
    website: str = ""
    social_media: Optional[SocialLinks] = None


class GenerationMeta(WireModel):
    """How a FinalContent was produced"""
    strategy: str
    policy: str
    analysis_confidence: int
    strategy_confidence: int
    fallbacks: List[str] = Field(default_factory=list)


class FinalContent(WireModel):
    """The complete generated landing page returned by one pipeline run"""
    html_document: str
    theme: Theme
    layout: Layout
    headline: str
    subheadline: str
    value_propositions: List[str]
    services: List[Service]
    call_to_action: CallToAction
    about_section: str
    contact_info: ContactInfo
    trust_signals: List[str] = Field(default_factory=list)
    location_highlights: List[str] = Field(default_factory=list)
    business_hours: Optional[BusinessHours] = None
    meta: Optional[GenerationMeta] = None


class ProgressEvent(WireModel):
    """Transient progress notification for one pipeline run"""
    type: Literal["progress"] = "progress"
    stage: str
    progress: int = Field(ge=0, le=100)
    message: str


class ResultEvent(WireModel):
    type: Literal["result"] = "result"
    data: FinalContent


class ErrorEvent(WireModel):
    type: Literal["error"] = "error"
    code: str
    message: str
    retryable: bool = False


PipelineEvent = Union[ProgressEvent, ResultEvent, ErrorEvent]
