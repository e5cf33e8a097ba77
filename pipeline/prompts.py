"""Prompt Composer: builds the image prompt for one asset type.

Prompts combine the business answers, the industry scene, the visual style and
the colour palette. Later steps are told which asset types already exist so
they can be generated to match them.
"""
import re
from typing import NamedTuple, Sequence

from models.pipeline import AssetType, PreviousAsset
from models.templates import ContentTemplate, TemplateAnswers

# Answer keys that carry the business name, checked in order
_NAME_KEYS = ("business_name", "store_name", "restaurant_name")
_DEFAULT_NAME = "Business"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

_STYLE_MODIFIERS: dict[str, dict[AssetType, str]] = {
    "modern-minimal": {
        "background": "subtle gradient or solid color",
        "logo": "simple lettermark or geometric symbol",
        "text-overlay": "clean rectangular frames and buttons",
        "decorative": "minimal lines and dots as accents",
    },
    "bold-vibrant": {
        "background": "vibrant gradient",
        "logo": "strong, bold lettermark or symbol",
        "text-overlay": "high-contrast buttons and frames",
        "decorative": "bold accent lines and shapes",
    },
    "professional-corporate": {
        "background": "subtle corporate gradient",
        "logo": "professional lettermark or shield symbol",
        "text-overlay": "formal rectangular frames and buttons",
        "decorative": "conservative lines and professional accents",
    },
    "warm-friendly": {
        "background": "warm, welcoming gradient",
        "logo": "friendly rounded lettermark or symbol",
        "text-overlay": "rounded corner frames and buttons",
        "decorative": "soft curved lines and friendly accents",
    },
    "luxury-elegant": {
        "background": "sophisticated dark gradient",
        "logo": "elegant serif lettermark or refined symbol",
        "text-overlay": "premium bordered frames and buttons",
        "decorative": "elegant thin lines and refined accents",
    },
    "playful-creative": {
        "background": "creative colorful gradient",
        "logo": "artistic lettermark or creative symbol",
        "text-overlay": "creative shaped frames and buttons",
        "decorative": "artistic lines and creative accent elements",
    },
}

_DEFAULT_MODIFIERS: dict[AssetType, str] = {
    "background": "professional patterned",
    "logo": "clean symbol",
    "text-overlay": "simple frames",
    "decorative": "complementary elements",
}


class _Scene(NamedTuple):
    subject: str
    environment: str
    lighting: str


_INDUSTRY_SCENES: dict[str, _Scene] = {
    "automotive": _Scene(
        "dealership showroom backdrop",
        "modern car showroom interior, polished tile floors, glass windows, professional lighting",
        "soft key light from camera-left, practical warm lights in background, showroom lighting",
    ),
    "real-estate": _Scene(
        "luxury home interior backdrop",
        "modern living room or kitchen, hardwood floors, large windows, contemporary furniture",
        "natural window light, warm interior lighting, soft shadows",
    ),
    "restaurant": _Scene(
        "restaurant interior backdrop",
        "modern restaurant dining area, clean tables, ambient lighting, professional kitchen background",
        "warm ambient lighting, soft overhead lights, cozy atmosphere",
    ),
    "retail": _Scene(
        "modern retail store backdrop",
        "clean retail space, polished floors, display areas, professional lighting",
        "bright retail lighting, even illumination, clean shadows",
    ),
    "healthcare": _Scene(
        "medical office backdrop",
        "clean medical facility, modern equipment, professional setting",
        "clean white lighting, professional medical environment",
    ),
    "business": _Scene(
        "corporate office backdrop",
        "modern office space, conference room, professional setting",
        "professional office lighting, clean and bright",
    ),
}


def compose_prompt(
    asset_type: AssetType,
    template: ContentTemplate,
    answers: TemplateAnswers,
    style: str,
    color_palette: Sequence[str],
    previous_assets: Sequence[PreviousAsset] | None = None,
) -> str:
    """Build the coordinated prompt for `asset_type`.

    `previous_assets` lists the assets already generated in this run; when given,
    the prompt asks the model to build upon them.
    """
    name = business_name(answers)
    industry = template.industry
    colors = ", ".join(color_palette)
    style_label = style.replace("-", " ")
    modifier = _STYLE_MODIFIERS.get(style, _DEFAULT_MODIFIERS)[asset_type]

    if asset_type == "logo":
        lines = [
            f'Design a {modifier} logo for "{name}", a {industry} business.',
            "Simple transparent PNG logo frame on a clean white or transparent background.",
            f"Modern, memorable, scalable design that reflects the {industry} industry. "
            "No text unless stylized.",
        ]
    elif asset_type == "text-overlay":
        lines = [
            f'Create text overlay elements ({modifier}) for "{name}", a {industry} business.',
            "Transparent PNG format. Call-to-action buttons, price tags, promotional banners "
            "and text frames. No text content, just the frames and containers.",
        ]
    elif asset_type == "decorative":
        lines = [
            f'Design decorative elements ({modifier}) for "{name}" {industry} marketing materials.',
            "Transparent PNG format. Clean lines, subtle geometric accents, dividers and corner "
            "elements that complement the main content without competing.",
        ]
    else:
        scene = _INDUSTRY_SCENES.get(industry, _INDUSTRY_SCENES["business"])
        lines = [
            f'Create a {modifier} background for "{name}", a {industry} business.',
            f"Subject: {scene.subject}",
            "Style: photo-real, shallow depth of field",
            f"Environment: {scene.environment}",
            f"Lighting: {scene.lighting}",
            "Camera: 35mm, f/2.8, ISO 200, 1/125s",
            "Constraints: no text, no people, no brand logos, nothing in foreground, "
            "empty space for product placement",
            "Composition: wide shot, plenty of empty space for compositing",
        ]

    lines.append(f"Colors: {colors}. {style_label} aesthetic.")

    brief = render_brief(template, answers)
    if brief:
        lines.append(f"Business context: {brief}")

    if previous_assets:
        completed = ", ".join(asset.type for asset in previous_assets)
        lines.append(
            f"Building upon the existing {completed} elements to maintain visual harmony "
            "and style consistency."
        )

    return "\n".join(lines)


def business_name(answers: TemplateAnswers) -> str:
    for key in _NAME_KEYS:
        value = _answer_text(answers.get(key))
        if value:
            return value
    return _DEFAULT_NAME


def render_brief(template: ContentTemplate, answers: TemplateAnswers) -> str:
    """Substitute `{question_id}` placeholders in the template's prompt_template.

    Unanswered placeholders render as empty strings.
    """
    if not template.prompt_template:
        return ""
    return _PLACEHOLDER.sub(
        lambda m: _answer_text(answers.get(m.group(1))), template.prompt_template
    ).strip()


def _answer_text(value: str | list[str] | None) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(v.strip() for v in value if v.strip())
    return value.strip()
