"""Brief schema — the synthesized cross-page brand brief.

Downstream generators (headlines, descriptions, image and video prompts,
visibility scoring) read these field names directly, so the nesting here is
a contract: rename nothing without migrating the consumers.

Stable keys:
  brand_summary{}, messaging_pillars[], target_audience{},
  competitive_advantages[], headline_ingredients{}, visual_direction{},
  video_direction{}, calls_to_action{}, seo_keywords{}, metadata{},
  ready_for_generation
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schemas._base import LenientModel


# ---------------------------------------------------------------------------
# Brand
# ---------------------------------------------------------------------------

class BriefBrandVoice(LenientModel):
    tone: list[str] = Field(default_factory=list)
    personality: Optional[str] = None
    do: list[str] = Field(default_factory=list, description="Write like this.")
    dont: list[str] = Field(default_factory=list, description="Never write like this.")


class BrandSummary(LenientModel):
    company_name: Optional[str] = None
    industry: Optional[str] = None
    one_liner: Optional[str] = None
    tagline: Optional[str] = None
    brand_voice: BriefBrandVoice = Field(default_factory=BriefBrandVoice)


class MessagingPillar(LenientModel):
    pillar: Optional[str] = None
    proof_points: list[str] = Field(default_factory=list)
    emotional_hook: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)


class AudienceProfile(LenientModel):
    primary_persona: Optional[str] = None
    pain_points: list[str] = Field(default_factory=list)
    desires: list[str] = Field(default_factory=list)
    objections: list[str] = Field(default_factory=list)


class CompetitiveAdvantage(LenientModel):
    advantage: Optional[str] = None
    proof: Optional[str] = None


# ---------------------------------------------------------------------------
# Generation inputs
# ---------------------------------------------------------------------------

class HeadlineIngredients(LenientModel):
    power_words: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    social_proof_snippets: list[str] = Field(default_factory=list)
    urgency_triggers: list[str] = Field(default_factory=list)
    question_hooks: list[str] = Field(default_factory=list)


class VisualDirection(LenientModel):
    primary_colors: list[str] = Field(default_factory=list)
    secondary_colors: list[str] = Field(default_factory=list)
    imagery_themes: list[str] = Field(default_factory=list)
    mood_keywords: list[str] = Field(default_factory=list)
    avoid: list[str] = Field(default_factory=list)
    suggested_scenes: list[str] = Field(default_factory=list)


class VideoConcept(LenientModel):
    concept: Optional[str] = None
    opening_hook: Optional[str] = None
    key_visuals: list[str] = Field(default_factory=list)


class VideoDirection(LenientModel):
    tone: Optional[str] = None
    pacing: Optional[str] = None
    suggested_concepts: list[VideoConcept] = Field(default_factory=list)


class CallsToAction(LenientModel):
    primary: Optional[str] = None
    secondary: list[str] = Field(default_factory=list)
    urgency_variants: list[str] = Field(default_factory=list)


class SeoKeywords(LenientModel):
    primary: list[str] = Field(default_factory=list)
    secondary: list[str] = Field(default_factory=list)
    long_tail: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Run metadata + top level
# ---------------------------------------------------------------------------

class BriefMetadata(LenientModel):
    website_url: Optional[str] = None
    analyzed_at: Optional[str] = Field(default=None, description="ISO-8601 UTC timestamp.")
    pipeline_version: Optional[str] = None
    pages_analyzed: int = 0
    analyzed_urls: list[str] = Field(default_factory=list)
    # Model-supplied, kept as-is when present
    confidence_score: Optional[str] = None
    missing_info: list[str] = Field(default_factory=list)


class Brief(LenientModel):
    """Final synthesized brief returned by the pipeline."""

    brand_summary: BrandSummary = Field(default_factory=BrandSummary)
    messaging_pillars: list[MessagingPillar] = Field(default_factory=list)
    target_audience: AudienceProfile = Field(default_factory=AudienceProfile)
    competitive_advantages: list[CompetitiveAdvantage] = Field(default_factory=list)
    headline_ingredients: HeadlineIngredients = Field(default_factory=HeadlineIngredients)
    visual_direction: VisualDirection = Field(default_factory=VisualDirection)
    video_direction: VideoDirection = Field(default_factory=VideoDirection)
    calls_to_action: CallsToAction = Field(default_factory=CallsToAction)
    seo_keywords: SeoKeywords = Field(default_factory=SeoKeywords)
    metadata: BriefMetadata = Field(default_factory=BriefMetadata)
    ready_for_generation: bool = False
