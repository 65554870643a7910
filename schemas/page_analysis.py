"""PageAnalysis schema — AI-derived marketing insight for a single page.

Mirrors the JSON structure requested by prompts.page_analyzer_system.
Every field is optional: the model omits whatever the page doesn't show,
and ``source_url`` is stamped on after parsing.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schemas._base import LenientModel


class PageBrandVoice(LenientModel):
    tone: list[str] = Field(default_factory=list)
    personality: Optional[str] = None
    language_style: Optional[str] = None


class ValueProposition(LenientModel):
    statement: Optional[str] = None
    benefit: Optional[str] = None
    differentiator: Optional[str] = None


class PageAudience(LenientModel):
    primary: Optional[str] = None
    pain_points: list[str] = Field(default_factory=list)
    desires: list[str] = Field(default_factory=list)


class ProductOrService(LenientModel):
    name: Optional[str] = None
    description: Optional[str] = None
    key_benefits: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)


class SocialProof(LenientModel):
    testimonials: list[str] = Field(default_factory=list)
    stats: list[str] = Field(default_factory=list)
    trust_signals: list[str] = Field(default_factory=list)


class PricingSignals(LenientModel):
    has_pricing: bool = False
    price_points: list[str] = Field(default_factory=list)
    free_trial: bool = False
    money_back_guarantee: bool = False


class VisualThemes(LenientModel):
    primary_colors: list[str] = Field(default_factory=list)
    imagery_style: Optional[str] = None
    mood: Optional[str] = None


class PageAnalysis(LenientModel):
    """Structured insight for one page, tagged with the URL it came from."""

    source_url: Optional[str] = None
    page_type: Optional[str] = Field(
        default=None,
        description="homepage/landing/product/service/pricing/about/other",
    )
    company_name: Optional[str] = None
    tagline: Optional[str] = None
    brand_voice: PageBrandVoice = Field(default_factory=PageBrandVoice)
    value_propositions: list[ValueProposition] = Field(default_factory=list)
    target_audience: PageAudience = Field(default_factory=PageAudience)
    products_services: list[ProductOrService] = Field(default_factory=list)
    social_proof: SocialProof = Field(default_factory=SocialProof)
    calls_to_action: list[str] = Field(default_factory=list)
    pricing_signals: PricingSignals = Field(default_factory=PricingSignals)
    visual_themes: VisualThemes = Field(default_factory=VisualThemes)
    seo_keywords: list[str] = Field(default_factory=list)
