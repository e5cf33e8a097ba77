"""Pipeline Executor: runs the four steps in order and regenerates single assets.

Steps run strictly one after another: each step's prompt is composed with the
assets completed before it, so step N+1 never starts before step N reached
completed, failed or skipped.

Per-step failures never escape a run. A step is retried up to its
`max_attempts`, then marked failed; a step whose dependencies did not complete
is skipped. Only `regenerate_asset` propagates generator errors to the caller.
"""
import logging
import time
import uuid
from typing import Callable, Iterator

from models.events import PipelineEvent
from models.pipeline import (
    AssetMetadata,
    AssetRequest,
    AssetType,
    GeneratedAsset,
    Pipeline,
    PreviousAsset,
    Progress,
    Step,
)
from pipeline.generator import AssetGeneratorClient
from pipeline.prompts import compose_prompt

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Progress], None]
StepCompleteCallback = Callable[[Step, GeneratedAsset], None]
StepFailedCallback = Callable[[Step, str], None]

_TERMINAL_STATUSES = frozenset({"completed", "failed", "skipped"})


class StepNotFoundError(LookupError):
    def __init__(self, step_id: str, session_id: str) -> None:
        super().__init__(f"Step {step_id!r} not found in pipeline {session_id}")
        self.step_id = step_id
        self.session_id = session_id


def execute_pipeline(
    pipeline: Pipeline,
    generator: AssetGeneratorClient,
    on_progress: ProgressCallback | None = None,
    on_step_complete: StepCompleteCallback | None = None,
    on_step_failed: StepFailedCallback | None = None,
) -> list[GeneratedAsset]:
    """Run every step and return the generated assets in completion order.

    Callbacks are invoked synchronously with snapshots. An empty list (and
    progress status "failed") means no step produced an asset.
    """
    assets: list[GeneratedAsset] = []
    for event in stream(pipeline, generator):
        if event.kind == "progress":
            if on_progress:
                on_progress(event.progress)
        elif event.kind == "step_complete":
            assets.append(event.asset)
            if on_step_complete:
                on_step_complete(event.step, event.asset)
        elif on_step_failed:
            on_step_failed(event.step, event.error or "")
    return assets


def stream(pipeline: Pipeline, generator: AssetGeneratorClient) -> Iterator[PipelineEvent]:
    """Run the pipeline, yielding an event at every progress point.

    The run advances only while the caller keeps consuming events; abandoning
    the iterator abandons the run.
    """
    progress = pipeline.progress
    _reset(pipeline)
    completed: list[GeneratedAsset] = []

    progress.status = "generating"
    logger.info("Pipeline %s started (%d steps)", pipeline.session_id, len(pipeline.steps))
    yield _event(pipeline, "progress", "Pipeline started")

    for index, step in enumerate(pipeline.steps):
        progress.current_step = index
        progress.current_asset_type = step.type
        progress.estimated_time_remaining = _remaining_time(pipeline.steps, index)
        yield _event(pipeline, "progress", f"Generating {step.name}")

        missing = _missing_dependencies(step, completed)
        if missing:
            error = f"Dependencies not met: {', '.join(missing)}"
            step.status = "skipped"
            progress.failed_assets.append(step.id)
            logger.warning("  [%s] %s — SKIPPED: %s", step.id, step.name, error)
            yield _event(pipeline, "step_failed", error, step=step, error=error)
            continue

        asset, error = _generate_with_retries(pipeline, step, generator, completed)
        if asset is None:
            step.status = "failed"
            progress.failed_assets.append(step.id)
            logger.warning(
                "  [%s] %s — FAILED after %d attempts: %s",
                step.id, step.name, step.attempts, error,
            )
            yield _event(pipeline, "step_failed", error, step=step, error=error)
            continue

        step.status = "completed"
        step.asset = asset
        completed.append(asset)
        progress.completed_assets.append(asset)
        logger.info("  [%s] %s — completed (attempt %d)", step.id, step.name, step.attempts)
        yield _event(pipeline, "step_complete", f"{step.name} completed", step=step, asset=asset)

    progress.status = "completed" if completed else "failed"
    progress.current_step = progress.total_steps
    progress.estimated_time_remaining = 0
    logger.info(
        "Pipeline %s %s → %d assets, %d failed or skipped",
        pipeline.session_id, progress.status, len(completed), len(progress.failed_assets),
    )
    yield _event(pipeline, "progress", f"Pipeline {progress.status}")


def regenerate_asset(
    pipeline: Pipeline,
    generator: AssetGeneratorClient,
    step_id: str,
    custom_prompt: str | None = None,
) -> GeneratedAsset:
    """Generate a fresh asset for one step with a single generator call.

    Context comes from completed assets earlier in the sequence only. On
    success the new asset replaces any asset of the same type. On failure the
    error propagates and the step keeps its previous status and asset.
    """
    step = _require_step(pipeline, step_id)
    progress = pipeline.progress
    previous = [
        a.as_previous()
        for a in sorted(progress.completed_assets, key=lambda a: a.sequence_index)
        if a.sequence_index < step.sequence_index
    ]
    prompt = custom_prompt or step.custom_prompt or _coordinated_prompt(pipeline, step.type, previous)

    prior_status = step.status
    step.status = "generating"
    step.attempts += 1
    try:
        asset = _generate_asset(pipeline, step, generator, prompt, previous, step.attempts)
    except BaseException as exc:
        step.status = prior_status
        logger.warning("  [%s] regeneration failed: %s", step.id, exc)
        raise

    step.asset = asset
    step.status = "completed"
    others = [a for a in progress.completed_assets if a.type != asset.type]
    progress.completed_assets = sorted([*others, asset], key=lambda a: a.sequence_index)
    progress.failed_assets = [sid for sid in progress.failed_assets if sid != step.id]
    if progress.status == "failed":
        progress.status = "completed"
    logger.info("  [%s] %s — regenerated", step.id, step.name)
    return asset


def update_step_prompt(pipeline: Pipeline, step_id: str, custom_prompt: str | None) -> Step:
    """Set (or clear, with None or "") the user prompt override for a step."""
    step = _require_step(pipeline, step_id)
    step.custom_prompt = custom_prompt or None
    return step


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def _generate_with_retries(
    pipeline: Pipeline,
    step: Step,
    generator: AssetGeneratorClient,
    completed: list[GeneratedAsset],
) -> tuple[GeneratedAsset | None, str]:
    """Try up to step.max_attempts times, without delay. Returns (asset, last_error)."""
    previous = [a.as_previous() for a in completed]
    last_error = ""

    for attempt in range(1, step.max_attempts + 1):
        step.attempts = attempt
        step.status = "generating"
        prompt = step.custom_prompt or _coordinated_prompt(pipeline, step.type, previous)
        try:
            return _generate_asset(pipeline, step, generator, prompt, previous, attempt), ""
        except Exception as exc:
            last_error = str(exc) or type(exc).__name__
            logger.warning(
                "  [%s] attempt %d/%d failed: %s", step.id, attempt, step.max_attempts, last_error,
            )

    return None, last_error


def _generate_asset(
    pipeline: Pipeline,
    step: Step,
    generator: AssetGeneratorClient,
    prompt: str,
    previous: list[PreviousAsset],
    attempt: int,
) -> GeneratedAsset:
    context = pipeline.context
    request = AssetRequest(
        prompt=prompt,
        style=context.style,
        color_palette=context.color_palette,
        asset_type=step.type,
        sequence_index=step.sequence_index,
        previous_assets=previous,
    )
    started = time.monotonic()
    result = generator.generate(request)
    elapsed_ms = int((time.monotonic() - started) * 1000)

    return GeneratedAsset(
        id=f"asset-{step.type}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}",
        type=step.type,
        url=result.image_url,
        prompt=prompt,
        style=context.style,
        sequence_index=step.sequence_index,
        generation_attempt=attempt,
        metadata=AssetMetadata.model_validate({**result.metadata, "generation_time": elapsed_ms}),
    )


def _coordinated_prompt(pipeline: Pipeline, asset_type: AssetType, previous: list[PreviousAsset]) -> str:
    context = pipeline.context
    return compose_prompt(
        asset_type,
        context.template,
        context.answers,
        context.style,
        context.color_palette,
        previous,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _require_step(pipeline: Pipeline, step_id: str) -> Step:
    step = pipeline.step(step_id)
    if step is None:
        raise StepNotFoundError(step_id, pipeline.session_id)
    return step


def _reset(pipeline: Pipeline) -> None:
    """Clear state left by an earlier run so every execution starts fresh."""
    for step in pipeline.steps:
        step.status = "pending"
        step.attempts = 0
        step.asset = None
    progress = pipeline.progress
    progress.current_step = 0
    progress.current_asset_type = pipeline.steps[0].type
    progress.completed_assets = []
    progress.failed_assets = []
    progress.estimated_time_remaining = sum(s.estimated_duration for s in pipeline.steps)


def _missing_dependencies(step: Step, completed: list[GeneratedAsset]) -> list[str]:
    completed_types = {a.type for a in completed}
    return [dep for dep in step.dependencies if dep not in completed_types]


def _remaining_time(steps: list[Step], current_index: int) -> int:
    """Estimated ms for the steps after `current_index`."""
    return sum(s.estimated_duration for s in steps[current_index + 1:])


def _event(
    pipeline: Pipeline,
    kind: str,
    message: str,
    step: Step | None = None,
    asset: GeneratedAsset | None = None,
    error: str | None = None,
) -> PipelineEvent:
    done = sum(1 for s in pipeline.steps if s.status in _TERMINAL_STATUSES)
    return PipelineEvent(
        kind=kind,
        fraction=done / len(pipeline.steps),
        message=message,
        progress=pipeline.progress.model_copy(deep=True),
        step=step.model_copy(deep=True) if step is not None else None,
        asset=asset,
        error=error,
    )
