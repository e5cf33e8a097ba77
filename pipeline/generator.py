"""Asset Generator Client: one image per request via the OpenAI Images API.

The client enhances the composed prompt with per-type guidance and retries
transient failures with exponential backoff. Invalid requests, rate limits and
content-policy rejections are raised immediately so the caller can decide.
"""
import logging
import time as time_module
from typing import Literal, NamedTuple

from openai import APIError, BadRequestError, OpenAI, RateLimitError

from models.pipeline import ASSET_TYPES, AssetRequest, AssetType, GenerationResult
from settings import Settings

logger = logging.getLogger(__name__)

ErrorCategory = Literal["invalid_request", "rate_limited", "content_policy", "no_image", "failed"]

_NON_RETRYABLE: frozenset[str] = frozenset({"invalid_request", "rate_limited", "content_policy"})

_CONTENT_POLICY_MARKER = "content_policy_violation"


class AssetGenerationError(Exception):
    def __init__(
        self,
        message: str,
        category: ErrorCategory = "failed",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.category not in _NON_RETRYABLE


class _AssetConfig(NamedTuple):
    size: str
    quality: str
    image_style: str
    guidance: str


_ASSET_CONFIG: dict[AssetType, _AssetConfig] = {
    "background": _AssetConfig(
        "1024x1024", "standard", "natural",
        "Simple, clean background. Subtle and professional. Should work well behind text "
        "and other content. No busy patterns or distracting elements.",
    ),
    "logo": _AssetConfig(
        "1024x1024", "hd", "natural",
        "Simple, professional logo. Clean and readable. Should work at small sizes.",
    ),
    "text-overlay": _AssetConfig(
        "1024x1024", "standard", "natural",
        "Simple buttons and text frames. Clean rectangular shapes. No decorative flourishes.",
    ),
    "decorative": _AssetConfig(
        "1024x1024", "standard", "natural",
        "Minimal accent elements: simple lines, dots, basic shapes. Very subtle and clean.",
    ),
}


class AssetGeneratorClient:
    def __init__(self, settings: Settings, client: OpenAI | None = None) -> None:
        self._settings = settings
        # SDK-level retries are disabled; retry policy lives in generate().
        self._client = client or OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.request_timeout_seconds,
            max_retries=0,
        )

    def generate(self, request: AssetRequest) -> GenerationResult:
        """Generate one image for `request`.

        Raises AssetGenerationError once retries are exhausted or on a
        non-retryable rejection.
        """
        config = _ASSET_CONFIG[request.asset_type]
        prompt = build_enhanced_prompt(request, config.guidance)
        max_retries = self._settings.client_max_retries
        last_error: AssetGenerationError | None = None

        for attempt in range(max_retries + 1):
            try:
                return self._call_images_api(prompt, config, attempt)
            except AssetGenerationError as exc:
                if not exc.retryable:
                    raise
                last_error = exc
            if attempt < max_retries:
                delay = 2 ** attempt * self._settings.backoff_base_seconds
                logger.debug(
                    "%s generation failed (%s); retrying in %.1fs (attempt %d/%d).",
                    request.asset_type, last_error, delay, attempt + 1, max_retries + 1,
                )
                time_module.sleep(delay)

        if last_error is None:  # pragma: no cover
            raise RuntimeError("Unreachable")
        raise last_error

    def _call_images_api(self, prompt: str, config: _AssetConfig, attempt: int) -> GenerationResult:
        try:
            response = self._client.images.generate(
                model=self._settings.image_model,
                prompt=prompt,
                n=1,
                size=config.size,
                quality=config.quality,
                style=config.image_style,
            )
        except BadRequestError as exc:
            if _CONTENT_POLICY_MARKER in str(exc) or getattr(exc, "code", None) == _CONTENT_POLICY_MARKER:
                raise AssetGenerationError(
                    "Content policy violation. Please try a different prompt.", "content_policy", 400
                ) from exc
            raise AssetGenerationError(
                f"Invalid request to image API: {exc}", "invalid_request", 400
            ) from exc
        except RateLimitError as exc:
            raise AssetGenerationError(
                "Rate limit exceeded. Please try again later.", "rate_limited", 429
            ) from exc
        except APIError as exc:
            raise AssetGenerationError(
                f"Failed to generate image: {exc}", "failed", getattr(exc, "status_code", None)
            ) from exc

        image_url = response.data[0].url if response.data else None
        if not image_url:
            raise AssetGenerationError("No image generated", "no_image")

        width, height = (int(v) for v in config.size.split("x"))
        return GenerationResult(
            image_url=image_url,
            metadata={
                "width": width,
                "height": height,
                "format": "png",
                "attempt": attempt + 1,
                "quality": config.quality,
                "image_style": config.image_style,
            },
        )


def build_enhanced_prompt(request: AssetRequest, guidance: str) -> str:
    """Append coordination, per-type guidance, palette and sequence position."""
    parts = [request.prompt.rstrip()]
    if request.previous_assets:
        completed = ", ".join(a.type for a in request.previous_assets)
        parts.append(
            f"This asset should harmonize with the existing {completed} elements "
            f"while maintaining the {request.style} aesthetic."
        )
    parts.append(guidance)
    parts.append(f"Colors: {', '.join(request.color_palette)}.")
    parts.append("Professional quality, clean, simple, usable for real marketing materials.")
    parts.append(f"Sequence: {request.sequence_index + 1}/{len(ASSET_TYPES)}.")
    return " ".join(parts)
