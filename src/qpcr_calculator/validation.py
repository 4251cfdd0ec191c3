"""
Validation logic for qPCR Calculator.

This module handles optional pre-checks of an experiment config including:
- Sample layout checks (targets, groups, repeat)
- Recipe volume checks (negative, non-finite, below pipetting limit)
- Primer checks (concentration, names)
- Comprehensive error and warning messages

The calculator itself never validates; callers that want domain-sensible
output run these checks first.
"""

import math
from collections import Counter

from qpcr_calculator.compute import compute_reactions_per_target
from qpcr_calculator.config import (
    MIN_PIPETTE_VOLUME_UL,
    MAX_REACTIONS_PER_PLATE,
    ERROR_EMPTY_LIST,
    ERROR_BLANK_NAME,
    ERROR_REPEAT_TOO_LOW,
    ERROR_NEGATIVE_VOLUME,
    ERROR_NOT_FINITE,
    ERROR_BLANK_PRIMER_NAME,
    ERROR_NON_POSITIVE_CONCENTRATION,
    WARN_DUPLICATE_NAME,
    WARN_DUPLICATE_TARGET,
    WARN_ZERO_VOLUME,
    WARN_BELOW_MIN_PIPETTE,
    WARN_PLATE_CAPACITY,
    WARN_SAME_PRIMER_NAME,
)
from qpcr_calculator.models import (
    PrimersConfig,
    QPCRConfig,
    Recipe,
    Samples,
    ValidationResult,
)


def _duplicates(names: tuple[str, ...]) -> list[str]:
    """Names that appear more than once, in order of first appearance."""
    counts = Counter(names)
    return [name for name in counts if counts[name] > 1]


def validate_samples(samples: Samples) -> tuple[list[str], list[str]]:
    """
    Validate the experiment layout.

    Args:
        samples: Targets, groups and repeat count

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    if not samples.targets:
        errors.append(ERROR_EMPTY_LIST.format(field="Targets", item="target"))
    if not samples.groups:
        errors.append(ERROR_EMPTY_LIST.format(field="Groups", item="group"))
    if samples.repeat < 1:
        errors.append(ERROR_REPEAT_TOO_LOW.format(value=samples.repeat))

    for field, names in (("Targets", samples.targets), ("Groups", samples.groups)):
        for index, name in enumerate(names, start=1):
            if name.strip() == "":
                errors.append(ERROR_BLANK_NAME.format(field=field, index=index))

    for dup in _duplicates(samples.targets):
        warnings.append(WARN_DUPLICATE_TARGET.format(value=dup))
    for dup in _duplicates(samples.groups):
        warnings.append(WARN_DUPLICATE_NAME.format(field="group", value=dup))

    total_reactions = compute_reactions_per_target(samples) * len(samples.targets)
    if total_reactions > MAX_REACTIONS_PER_PLATE:
        warnings.append(WARN_PLATE_CAPACITY.format(
            count=total_reactions, capacity=MAX_REACTIONS_PER_PLATE
        ))

    return errors, warnings


def validate_recipe(recipe: Recipe) -> tuple[list[str], list[str]]:
    """
    Validate per-reaction volumes.

    Water may legitimately be 0 µl; a zero mix, primer or cDNA volume
    is reported as a warning.

    Args:
        recipe: Per-reaction volumes

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    fields = {
        "Mix": recipe.mix,
        "Primers": recipe.primers,
        "cDNA": recipe.cdna,
        "Water": recipe.water,
    }

    for field, volume in fields.items():
        if not math.isfinite(volume):
            errors.append(ERROR_NOT_FINITE.format(field=f"Recipe, {field}", value=volume))
        elif volume < 0:
            errors.append(ERROR_NEGATIVE_VOLUME.format(field=field, value=volume))
        elif volume == 0:
            if field != "Water":
                warnings.append(WARN_ZERO_VOLUME.format(field=field))
        elif volume < MIN_PIPETTE_VOLUME_UL:
            warnings.append(WARN_BELOW_MIN_PIPETTE.format(
                field=field, volume=volume, min_vol=MIN_PIPETTE_VOLUME_UL
            ))

    return errors, warnings


def validate_primers(primers: PrimersConfig) -> tuple[list[str], list[str]]:
    """
    Validate the primer pair.

    Args:
        primers: Forward and reverse primers

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    for label, primer in (("Forward", primers.forward), ("Reverse", primers.reverse)):
        if primer.name == "":
            errors.append(ERROR_BLANK_PRIMER_NAME.format(primer=label))
        if not math.isfinite(primer.concentration):
            errors.append(ERROR_NOT_FINITE.format(
                field=f"Primers, {label}", value=primer.concentration
            ))
        elif primer.concentration <= 0:
            errors.append(ERROR_NON_POSITIVE_CONCENTRATION.format(
                primer=label, value=primer.concentration
            ))

    if primers.forward.name and primers.forward.name == primers.reverse.name:
        warnings.append(WARN_SAME_PRIMER_NAME.format(name=primers.forward.name))

    return errors, warnings


def run_all_validations(config: QPCRConfig) -> ValidationResult:
    """
    Run all validation checks on an experiment config.

    Args:
        config: Experiment description

    Returns:
        ValidationResult with errors, warnings, summary and validity status
    """
    reactions_per_target = compute_reactions_per_target(config.samples)
    summary = {
        "num_targets": len(config.samples.targets),
        "num_groups": len(config.samples.groups),
        "repeat": config.samples.repeat,
        "reactions_per_target": reactions_per_target,
        "total_reactions": reactions_per_target * len(config.samples.targets),
    }
    result = ValidationResult(is_valid=True, summary=summary)

    for check, part in (
        (validate_samples, config.samples),
        (validate_recipe, config.recipe),
        (validate_primers, config.primers),
    ):
        errors, warnings = check(part)
        for error in errors:
            result.add_error(error)
        for warning in warnings:
            result.add_warning(warning)

    return result


def ensure_valid_config(config: QPCRConfig) -> ValidationResult:
    """
    Validate a config and fail fast on blocking errors.

    Args:
        config: Experiment description

    Returns:
        ValidationResult (may still carry warnings)

    Raises:
        ValueError: If any blocking error was found; message is the full report
    """
    result = run_all_validations(config)
    if not result.is_valid:
        raise ValueError(f"Invalid qPCR configuration:\n{result.get_report()}")
    return result
