"""Deterministic theme data: category inference, default theme/layout and the fallback page"""

import re
from typing import Dict, List, Optional, Tuple, get_args
from landify_api.models.business import BusinessData
from landify_api.models.content import (
    Layout,
    LayoutSection,
    LayoutType,
    PageFlow,
    StrategyResult,
    Theme,
    ThemeColors,
)
from landify_api.utils.sanitization import escape_html, safe_url

# Checked in order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("cafe", ["cafe", "café", "coffee", "bakery", "tea"]),
    ("restaurant", ["restaurant", "food", "pizza", "pizzeria", "meal", "grill", "diner", "bistro", "bar"]),
    ("healthcare", ["health", "healthcare", "medical", "clinic", "dentist", "dental", "doctor", "pharmacy", "hospital"]),
    ("automotive", ["auto", "automotive", "car", "mechanic", "garage", "tire"]),
    ("tech", ["tech", "technology", "software", "computer", "it service", "electronics"]),
    ("beauty", ["beauty", "salon", "spa", "hair", "nail", "barber"]),
    ("fitness", ["fitness", "gym", "yoga", "pilates", "sport"]),
    ("legal", ["legal", "law", "attorney", "lawyer", "notary"]),
    ("lodging", ["lodging", "hotel", "motel", "inn", "hostel"]),
    ("retail", ["store", "shop", "retail", "boutique", "market"]),
]

# (primary, secondary)
COLOR_SCHEMES: Dict[str, Tuple[str, str]] = {
    "restaurant": ("#dc2626", "#fbbf24"),
    "cafe": ("#92400e", "#f59e0b"),
    "retail": ("#7c3aed", "#a855f7"),
    "healthcare": ("#059669", "#34d399"),
    "automotive": ("#1f2937", "#6b7280"),
    "tech": ("#6366f1", "#8b5cf6"),
    "beauty": ("#db2777", "#f472b6"),
    "fitness": ("#ea580c", "#fb923c"),
    "legal": ("#1e3a8a", "#64748b"),
    "lodging": ("#0e7490", "#22d3ee"),
    "business": ("#2563eb", "#3b82f6"),
}

DEFAULT_TRUST_SIGNALS = ["Licensed & Insured", "Local Experts", "100% Satisfaction Guarantee"]

LAYOUT_TYPES = list(get_args(LayoutType))
PAGE_FLOWS = list(get_args(PageFlow))


def infer_category(business_type: str) -> str:
    """Map a free-text business type to one of the known categories"""
    text = (business_type or "").lower().replace("_", " ")
    for category, keywords in CATEGORY_KEYWORDS:
        # Whole words only, so "barber" is not a bar and "care" is not a car
        if any(re.search(rf"\b{re.escape(kw)}(?:s|es)?\b", text) for kw in keywords):
            return category
    return "business"


def extract_city(address: str) -> str:
    """Second-to-last comma part of the address, e.g. "1 Main St, Springfield, IL" -> "Springfield" """
    if not address:
        return "your area"
    parts = address.split(",")
    if len(parts) > 1 and parts[-2].strip():
        return parts[-2].strip()
    return "your area"


def location_highlights(business: BusinessData) -> List[str]:
    return [f"Serving {extract_city(business.address)}", "Fast Response Time", "Local Knowledge"]


def default_theme(business: BusinessData) -> Theme:
    """Category colour scheme on the shared light base theme"""
    category = infer_category(business.type)
    primary, secondary = COLOR_SCHEMES[category]
    return Theme(
        id=f"theme-{category}",
        name=f"{category.capitalize()} Theme",
        business_type=business.type,
        colors=ThemeColors(primary=primary, secondary=secondary, gradient_from=primary, gradient_to=secondary),
        layout={
            "type": "modern",
            "structure": "centered",
            "heroStyle": "gradient",
            "sectionOrder": ["hero", "services", "about", "contact"],
            "contentLayout": "grid",
            "navigationStyle": "top",
            "ctaPlacement": "hero-and-sections",
        },
    )


def default_layout() -> Layout:
    return Layout(
        type="hero-centric",
        page_flow="vertical-scroll",
        sections=[
            LayoutSection(id="hero", order=1, variant="gradient-hero"),
            LayoutSection(id="services", order=2, variant="grid-cards"),
            LayoutSection(id="about", order=3, variant="centered-text"),
            LayoutSection(id="contact", order=4, variant="contact-form"),
        ],
        global_style={
            "containerWidth": "max-w-6xl",
            "sectionSpacing": "space-y-16",
            "borderRadius": "rounded-lg",
            "shadowIntensity": "shadow-md",
            "animationStyle": "moderate",
        },
        responsive_breakpoints={"mobile": "block", "tablet": "md:block", "desktop": "lg:block"},
    )


def _attr(value: str) -> str:
    return escape_html(value).replace('"', "&quot;")


def fallback_html(business: BusinessData, strategy: Optional[StrategyResult] = None, theme: Optional[Theme] = None) -> str:
    """
    Static Tailwind page built only from business data and whatever messaging is available.

    Every interpolated value is HTML-escaped.
    """
    strategy = strategy or StrategyResult()
    theme = theme or default_theme(business)
    city = extract_city(business.address)
    name = escape_html(business.name)
    btype = escape_html(business.type)

    headline = escape_html(strategy.headline or business.name)
    subheadline = escape_html(strategy.subheadline or f"Professional {business.type} services in {city}")
    cta_text = escape_html(strategy.call_to_action.primary.text if strategy.call_to_action else "Contact Us")
    about = escape_html(
        strategy.about_section
        or f"{business.name} is a trusted {business.type} serving {city} and surrounding areas. "
           f"We provide professional, reliable service with a commitment to customer satisfaction."
    )

    if strategy.services:
        service_cards = "".join(
            f"""
                <div class="bg-white p-6 rounded-lg shadow-md">
                    <h3 class="text-xl font-semibold mb-3">{escape_html(s.name)}</h3>
                    <p class="text-gray-600">{escape_html(s.description)}</p>
                </div>"""
            for s in strategy.services
        )
    else:
        service_cards = f"""
                <div class="bg-white p-6 rounded-lg shadow-md">
                    <h3 class="text-xl font-semibold mb-3">Quality Service</h3>
                    <p class="text-gray-600">Professional {btype} services</p>
                </div>"""

    contact_lines = []
    if business.phone:
        contact_lines.append(f'<p class="mb-4"><strong>Phone:</strong> <a href="tel:{_attr(business.phone)}">{escape_html(business.phone)}</a></p>')
    if business.address:
        contact_lines.append(f'<p class="mb-4"><strong>Address:</strong> {escape_html(business.address)}</p>')
    if business.email:
        contact_lines.append(f'<p class="mb-4"><strong>Email:</strong> {escape_html(business.email)}</p>')
    website = safe_url(business.website)
    if website:
        contact_lines.append(f'<p class="mb-4"><strong>Website:</strong> <a href="{website}" rel="noopener noreferrer" target="_blank">{website}</a></p>')
    contact = "\n                ".join(contact_lines)

    gradient = f"background: linear-gradient(90deg, {_attr(theme.colors.gradient_from)}, {_attr(theme.colors.gradient_to)});"
    primary = _attr(theme.colors.primary)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{name} - {btype} in {escape_html(city)}</title>
    <script src="https://cdn.tailwindcss.com"></script>
</head>
<body class="bg-white">
    <header class="text-white py-20" style="{gradient}">
        <div class="container mx-auto px-4 text-center">
            <h1 class="text-5xl font-bold mb-4">{headline}</h1>
            <p class="text-xl mb-8">{subheadline}</p>
            <a href="#contact" class="inline-block bg-white px-8 py-3 rounded-lg font-semibold hover:bg-gray-100 transition-colors" style="color: {primary};">{cta_text}</a>
        </div>
    </header>

    <section class="py-16 bg-gray-50">
        <div class="container mx-auto px-4">
            <h2 class="text-3xl font-bold text-center mb-12">Our Services</h2>
            <div class="grid md:grid-cols-3 gap-8">{service_cards}
            </div>
        </div>
    </section>

    <section class="py-16">
        <div class="container mx-auto px-4">
            <div class="max-w-3xl mx-auto text-center">
                <h2 class="text-3xl font-bold mb-8">About {name}</h2>
                <p class="text-lg text-gray-600">{about}</p>
            </div>
        </div>
    </section>

    <section id="contact" class="py-16 bg-gray-50">
        <div class="container mx-auto px-4 text-center">
            <h2 class="text-3xl font-bold mb-8">Contact Us</h2>
            <div class="max-w-md mx-auto">
                {contact}
            </div>
        </div>
    </section>
</body>
</html>"""
