"""Pipeline Factory: builds a ready-to-run Pipeline. Pure construction, no I/O."""
import logging
import time
import uuid
from typing import Sequence

from models.pipeline import (
    ASSET_TYPES,
    AssetType,
    CoordinationRules,
    GenerationContext,
    Pipeline,
    Progress,
    Step,
)
from models.templates import ContentTemplate, TemplateAnswers
from pipeline.prompts import compose_prompt

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3

# (name, description, estimated duration in ms) per asset type
_STEP_INFO: dict[AssetType, tuple[str, str, int]] = {
    "background": (
        "Background Design",
        "Creating the foundational background that sets the visual tone",
        45_000,
    ),
    "logo": (
        "Logo Elements",
        "Generating brand identity elements that complement the background",
        50_000,
    ),
    "text-overlay": (
        "Text Overlay Elements",
        "Creating text containers and promotional elements",
        40_000,
    ),
    "decorative": (
        "Decorative Elements",
        "Adding finishing touches and complementary design elements",
        35_000,
    ),
}


def create_pipeline(
    template: ContentTemplate,
    answers: TemplateAnswers,
    style: str,
    color_palette: Sequence[str],
) -> Pipeline:
    """Build a Pipeline with the four fixed steps in dependency order.

    Each step depends on every step before it. Step prompts are composed
    without prior-asset context since nothing has been generated yet.
    Raises pydantic.ValidationError if `color_palette` is empty.
    """
    context = GenerationContext(
        template=template,
        answers=dict(answers),
        style=style,
        color_palette=list(color_palette),
    )

    steps: list[Step] = []
    for index, asset_type in enumerate(ASSET_TYPES):
        name, description, duration = _STEP_INFO[asset_type]
        steps.append(Step(
            id=asset_type,
            type=asset_type,
            name=name,
            description=description,
            prompt=compose_prompt(
                asset_type, template, context.answers, style, context.color_palette
            ),
            max_attempts=MAX_ATTEMPTS,
            dependencies=list(ASSET_TYPES[:index]),
            estimated_duration=duration,
            sequence_index=index,
        ))

    pipeline = Pipeline(
        session_id=_new_session_id(),
        context=context,
        steps=steps,
        progress=Progress(
            total_steps=len(steps),
            current_asset_type=steps[0].type,
            estimated_time_remaining=sum(s.estimated_duration for s in steps),
        ),
        coordination_rules=CoordinationRules(
            sequential_dependencies={s.type: list(s.dependencies) for s in steps},
        ),
    )
    logger.debug(
        "Created pipeline %s (%s, style=%s, %d colours)",
        pipeline.session_id, template.industry, style, len(context.color_palette),
    )
    return pipeline


def _new_session_id() -> str:
    return f"pipeline-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"
