from datetime import datetime, timezone
from pathlib import Path

import pytest

from models.pipeline import AssetMetadata, AssetRequest, GeneratedAsset, GenerationResult, Pipeline
from models.templates import ContentTemplate
from pipeline.factory import create_pipeline
from pipeline.generator import AssetGenerationError
from settings import Settings

STYLE = "modern-minimal"
PALETTE = ["#3B82F6", "#1E40AF"]

# Failure count meaning "fail on every call"
ALWAYS = 1_000_000


class ScriptedGenerator:
    """Stand-in for AssetGeneratorClient.

    `failures` maps an asset type to the number of leading calls that raise.
    Every request is recorded in `requests`.
    """

    def __init__(self, failures: dict[str, int] | None = None) -> None:
        self.failures = dict(failures or {})
        self.requests: list[AssetRequest] = []

    def generate(self, request: AssetRequest) -> GenerationResult:
        self.requests.append(request)
        remaining = self.failures.get(request.asset_type, 0)
        if remaining:
            self.failures[request.asset_type] = remaining - 1
            raise AssetGenerationError(f"{request.asset_type} generation failed")
        return GenerationResult(
            image_url=f"https://images.test/{request.asset_type}-{len(self.requests)}.png",
            metadata={"width": 1024, "height": 1024, "format": "png"},
        )

    def calls_for(self, asset_type: str) -> list[AssetRequest]:
        return [r for r in self.requests if r.asset_type == asset_type]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with sessions stored under a temp dir. No real API key needed for unit tests."""
    return Settings(
        openai_api_key="test-key-not-used-in-unit-tests",
        session_dir=tmp_path / "sessions",
    )


@pytest.fixture
def auto_template() -> ContentTemplate:
    return ContentTemplate(
        id="test-template",
        name="Test Template",
        type="built-in",
        industry="automotive",
        description="Test template for automotive industry",
    )


@pytest.fixture
def pipeline(auto_template: ContentTemplate) -> Pipeline:
    return create_pipeline(auto_template, {"business_name": "Test Auto Shop"}, STYLE, PALETTE)


@pytest.fixture
def scripted_generator():
    """Factory: scripted_generator({"logo": 2}) fails the first two logo calls."""
    return ScriptedGenerator


@pytest.fixture
def make_asset():
    def _make(asset_type: str, sequence_index: int, style: str = STYLE, asset_id: str | None = None):
        return GeneratedAsset(
            id=asset_id or f"asset-{asset_type}",
            type=asset_type,
            url=f"https://images.test/{asset_type}.png",
            prompt="test prompt",
            style=style,
            created_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
            sequence_index=sequence_index,
            generation_attempt=1,
            metadata=AssetMetadata(width=1024, height=1024, format="png", generation_time=1000),
        )
    return _make
