"""Pipeline data model: steps, progress, generated assets and coordination rules.

A `Pipeline` is owned by exactly one run. The executor is its only writer;
observers receive deep copies.
"""
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from models.templates import ContentTemplate, TemplateAnswers

AssetType = Literal["background", "logo", "text-overlay", "decorative"]
StepStatus = Literal["pending", "generating", "completed", "failed", "skipped"]
ProgressStatus = Literal["idle", "generating", "completed", "failed"]

# Fixed step order. Every pipeline has exactly these four steps in this order.
ASSET_TYPES: tuple[AssetType, ...] = ("background", "logo", "text-overlay", "decorative")


class AssetMetadata(BaseModel):
    """Image metadata. Providers may attach extra type-specific fields."""

    model_config = ConfigDict(extra="allow")

    width: int = Field(ge=1)
    height: int = Field(ge=1)
    format: str = "png"
    generation_time: int = Field(default=0, ge=0)  # milliseconds


class PreviousAsset(BaseModel):
    """Read-only view of an earlier asset, passed as coordination context."""

    model_config = ConfigDict(frozen=True)

    type: AssetType
    style: str


class GeneratedAsset(BaseModel):
    """Output of one successful generation. Never mutated; regeneration replaces it."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: AssetType
    url: str
    prompt: str
    style: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sequence_index: int = Field(ge=0)
    generation_attempt: int = Field(ge=1)
    metadata: AssetMetadata

    def as_previous(self) -> PreviousAsset:
        return PreviousAsset(type=self.type, style=self.style)


class Step(BaseModel):
    id: str
    type: AssetType
    name: str
    description: str
    status: StepStatus = "pending"
    prompt: str
    custom_prompt: str | None = None
    attempts: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=3, ge=1)
    dependencies: list[AssetType] = Field(default_factory=list)
    estimated_duration: int = Field(ge=0)  # milliseconds, estimate only
    sequence_index: int = Field(ge=0)
    asset: GeneratedAsset | None = None


class Progress(BaseModel):
    current_step: int = Field(default=0, ge=0)
    total_steps: int = len(ASSET_TYPES)
    current_asset_type: AssetType = "background"
    status: ProgressStatus = "idle"
    completed_assets: list[GeneratedAsset] = Field(default_factory=list)  # completion order
    failed_assets: list[str] = Field(default_factory=list)  # step ids, failed or skipped
    estimated_time_remaining: int = Field(default=0, ge=0)  # milliseconds


class CoordinationRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    color_consistency: bool = True
    style_consistency: bool = True
    industry_alignment: bool = True
    visual_harmony: bool = True
    sequential_dependencies: dict[AssetType, list[AssetType]] = Field(default_factory=dict)


class GenerationContext(BaseModel):
    """Inputs a pipeline was created from; reused whenever a prompt is recomposed."""

    template: ContentTemplate
    answers: TemplateAnswers = Field(default_factory=dict)
    style: str
    color_palette: list[str] = Field(min_length=1)


class Pipeline(BaseModel):
    session_id: str
    context: GenerationContext
    steps: list[Step]
    progress: Progress
    coordination_rules: CoordinationRules

    @model_validator(mode="after")
    def check_step_layout(self) -> "Pipeline":
        if len(self.steps) != len(ASSET_TYPES) or self.progress.total_steps != len(ASSET_TYPES):
            raise ValueError(
                f"a pipeline has exactly {len(ASSET_TYPES)} steps "
                f"(got {len(self.steps)} steps, total_steps={self.progress.total_steps})"
            )
        types = tuple(step.type for step in self.steps)
        if types != ASSET_TYPES:
            raise ValueError(f"steps must be ordered {list(ASSET_TYPES)}, got {list(types)}")
        for index, step in enumerate(self.steps):
            if step.sequence_index != index:
                raise ValueError(f"step {step.id!r} has sequence_index {step.sequence_index}, expected {index}")
        return self

    def step(self, step_id: str) -> Step | None:
        return next((s for s in self.steps if s.id == step_id), None)


class AssetRequest(BaseModel):
    """Request sent to the asset generator for one attempt."""

    prompt: str
    style: str
    color_palette: list[str]
    asset_type: AssetType
    sequence_index: int = Field(ge=0)
    previous_assets: list[PreviousAsset] = Field(default_factory=list)


class GenerationResult(BaseModel):
    image_url: str
    metadata: dict = Field(default_factory=dict)


class CoordinationReport(BaseModel):
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def is_coordinated(self) -> bool:
        """True iff no issues were found. Suggestions are advisory only."""
        return not self.issues
