"""Coordination Validator: checks a set of generated assets for visual harmony.

Checks, in order:
  1. Style consistency (when the rules ask for it): all assets share one style.
  2. Coverage: every required asset type is present.
  3. Sequencing (advisory): assets are listed in sequence order.

Pure function: inputs are never modified.
"""
from typing import Sequence

from models.pipeline import ASSET_TYPES, CoordinationReport, CoordinationRules, GeneratedAsset


def validate_asset_coordination(
    assets: Sequence[GeneratedAsset],
    rules: CoordinationRules,
) -> CoordinationReport:
    issues: list[str] = []
    suggestions: list[str] = []

    if rules.style_consistency and len({a.style for a in assets}) > 1:
        issues.append("Inconsistent styles detected across assets")
        suggestions.append("Regenerate assets with consistent style parameters")

    present = {a.type for a in assets}
    missing = [t for t in ASSET_TYPES if t not in present]
    if missing:
        issues.append(f"Missing asset types: {', '.join(missing)}")
        suggestions.append("Generate missing asset types for complete template")

    in_sequence = sorted(assets, key=lambda a: a.sequence_index)
    if any(a is not b for a, b in zip(in_sequence, assets)):
        suggestions.append("Assets were generated out of sequence - coordination may be affected")

    return CoordinationReport(issues=issues, suggestions=suggestions)
