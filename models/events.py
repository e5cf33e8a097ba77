from typing import Literal

from pydantic import BaseModel, Field

from models.pipeline import GeneratedAsset, Progress, Step


class PipelineEvent(BaseModel):
    """Emitted by the executor's stream() interface for progress reporting.

    `progress`, `step` and `asset` are snapshots; mutating them has no effect
    on the running pipeline.
    """

    kind: Literal["progress", "step_complete", "step_failed"]
    fraction: float = Field(ge=0.0, le=1.0)  # share of steps that reached a terminal state
    message: str
    progress: Progress
    step: Step | None = None
    asset: GeneratedAsset | None = None
    error: str | None = None
