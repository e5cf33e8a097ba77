#!/usr/bin/env python3
"""Generate a coordinated set of marketing assets end-to-end.

Usage:
    python run_pipeline.py --template automotive --answer business_name="Smith Auto" \\
        --style modern-minimal --colors "#3B82F6" "#1E40AF"
    python run_pipeline.py --template my_template.yaml --answers answers.yaml
    python run_pipeline.py --session pipeline-123-abc --regenerate logo --prompt "Shield emblem"
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from settings import Settings
from models.pipeline import GeneratedAsset, Progress, Step
from models.templates import ContentTemplate, TemplateAnswers, built_in_template, load_answers
from pipeline.coordination import validate_asset_coordination
from pipeline.executor import StepNotFoundError, execute_pipeline, regenerate_asset
from pipeline.factory import create_pipeline
from pipeline.generator import AssetGenerationError, AssetGeneratorClient
from pipeline.session_store import SessionStore

logger = logging.getLogger("run_pipeline")

_DEFAULT_COLORS = ["#3B82F6", "#1E40AF"]


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--template", default="automotive",
                        help="Built-in industry id (automotive, retail, restaurant) or a template YAML file")
    parser.add_argument("--answers", type=Path, help="YAML file mapping question ids to answers")
    parser.add_argument("--answer", action="append", default=[], metavar="KEY=VALUE",
                        help="Single answer; may be repeated and overrides --answers")
    parser.add_argument("--style", help="Visual style id (default from settings)")
    parser.add_argument("--colors", nargs="+", default=_DEFAULT_COLORS, help="Colour palette tokens")
    parser.add_argument("--session", help="Stored session id; alone, re-validates its assets")
    parser.add_argument("--regenerate", metavar="STEP", help="Regenerate one step of --session")
    parser.add_argument("--prompt", help="Custom prompt for --regenerate")
    return parser.parse_args(argv)


def _load_template(value: str) -> ContentTemplate:
    path = Path(value)
    if path.suffix in (".yaml", ".yml"):
        return ContentTemplate.load(path)
    return built_in_template(value)


def _collect_answers(args: argparse.Namespace) -> TemplateAnswers:
    answers: TemplateAnswers = load_answers(args.answers) if args.answers else {}
    for item in args.answer:
        key, sep, value = item.partition("=")
        if not sep:
            raise SystemExit(f"--answer expects KEY=VALUE, got {item!r}")
        answers[key.strip()] = value.strip()
    return answers


def _log_progress(progress: Progress) -> None:
    logger.info(
        "Step %d/%d (%s) — %s, ~%ds remaining",
        min(progress.current_step + 1, progress.total_steps),
        progress.total_steps,
        progress.current_asset_type,
        progress.status,
        progress.estimated_time_remaining // 1000,
    )


def _log_step_complete(step: Step, asset: GeneratedAsset) -> None:
    logger.info("✓ %s → %s", step.name, asset.url)


def _log_step_failed(step: Step, error: str) -> None:
    logger.warning("✗ %s (%s): %s", step.name, step.status, error)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )

    store = SessionStore(settings)
    generator = AssetGeneratorClient(settings)

    if args.regenerate:
        if not args.session:
            raise SystemExit("--regenerate requires --session")
        pipeline = store.load(args.session)
        try:
            asset = regenerate_asset(pipeline, generator, args.regenerate, args.prompt)
        except (StepNotFoundError, AssetGenerationError) as exc:
            logger.error("Regeneration of %s failed: %s", args.regenerate, exc)
            store.save(pipeline)
            return 1
        logger.info("=== Regenerated %s → %s ===", args.regenerate, asset.url)
        assets = pipeline.progress.completed_assets
    elif args.session:
        pipeline = store.load(args.session)
        assets = pipeline.progress.completed_assets
        logger.info("=== Session %s: %s ===", pipeline.session_id, pipeline.progress.status)
    else:
        pipeline = create_pipeline(
            _load_template(args.template),
            _collect_answers(args),
            args.style or settings.default_style,
            args.colors,
        )
        logger.info("=== Pipeline %s ===", pipeline.session_id)
        assets = execute_pipeline(
            pipeline,
            generator,
            on_progress=_log_progress,
            on_step_complete=_log_step_complete,
            on_step_failed=_log_step_failed,
        )

    report = validate_asset_coordination(assets, pipeline.coordination_rules)
    for issue in report.issues:
        logger.warning("Coordination issue: %s", issue)
    for suggestion in report.suggestions:
        logger.info("Suggestion: %s", suggestion)

    path = store.save(pipeline)
    logger.info("=== Done → %s (%d assets) ===", path, len(assets))
    return 0 if assets else 1


if __name__ == "__main__":
    sys.exit(main())
