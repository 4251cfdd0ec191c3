"""
Unit tests for validation module.

Tests sample layout, recipe and primer checks, and the aggregated report.
"""

import math

import pytest

from qpcr_calculator.models import Primer, PrimersConfig, Recipe, Samples, create_qpcr_config
from qpcr_calculator.validation import (
    ensure_valid_config,
    run_all_validations,
    validate_primers,
    validate_recipe,
    validate_samples,
)


def make_primers(forward="GAPDH-F", reverse="GAPDH-R", forward_conc=10.0, reverse_conc=10.0):
    return PrimersConfig(
        forward=Primer(name=forward, concentration=forward_conc),
        reverse=Primer(name=reverse, concentration=reverse_conc),
    )


# ============================================================================
# validate_samples Tests
# ============================================================================


def test_validate_samples_valid():
    """validate_samples should return no errors for a normal layout."""
    errors, warnings = validate_samples(
        Samples(targets=["GeneA", "GeneB"], repeat=3, groups=["Control", "Treatment"])
    )

    assert errors == []
    assert warnings == []


def test_validate_samples_empty_targets_and_groups():
    """Empty targets and groups should each be an error."""
    errors, _ = validate_samples(Samples(targets=[], repeat=3, groups=[]))

    assert len(errors) == 2
    assert "Targets" in errors[0]
    assert "Groups" in errors[1]


@pytest.mark.parametrize("repeat", [0, -1])
def test_validate_samples_repeat_too_low(repeat):
    """Repeat below 1 should be an error."""
    errors, _ = validate_samples(Samples(targets=["GeneA"], repeat=repeat, groups=["Control"]))

    assert len(errors) == 1
    assert "Repeat" in errors[0]


def test_validate_samples_blank_name():
    """Blank target names should be reported with their position."""
    errors, _ = validate_samples(Samples(targets=["GeneA", "  "], repeat=1, groups=["Control"]))

    assert errors == ["Targets: Entry 2 cannot be empty"]


def test_validate_samples_duplicates_are_warnings():
    """Duplicate targets and groups should warn, not block."""
    errors, warnings = validate_samples(
        Samples(targets=["GeneA", "GeneA"], repeat=1, groups=["Control", "Control"])
    )

    assert errors == []
    assert len(warnings) == 2
    assert "GeneA" in warnings[0]
    assert "Control" in warnings[1]


def test_validate_samples_plate_capacity_warning():
    """More reactions than a 384-well plate should warn."""
    _, warnings = validate_samples(
        Samples(targets=[f"T{i}" for i in range(10)], repeat=4, groups=[f"G{i}" for i in range(10)])
    )

    assert any("384-well plate" in w for w in warnings)


# ============================================================================
# validate_recipe Tests
# ============================================================================


def test_validate_recipe_valid():
    """validate_recipe should accept a typical recipe."""
    errors, warnings = validate_recipe(Recipe(mix=10, primers=1, cdna=2, water=6))

    assert errors == []
    assert warnings == []


def test_validate_recipe_negative_volume():
    """Negative volumes should be errors."""
    errors, _ = validate_recipe(Recipe(mix=10, primers=-1, cdna=2, water=6))

    assert len(errors) == 1
    assert "Primers" in errors[0]
    assert "-1.0" in errors[0]


@pytest.mark.parametrize("value", [math.nan, math.inf])
def test_validate_recipe_non_finite(value):
    """NaN and infinite volumes should be errors."""
    errors, _ = validate_recipe(Recipe(mix=value, primers=1, cdna=2, water=6))

    assert len(errors) == 1
    assert "finite" in errors[0]


def test_validate_recipe_zero_water_allowed():
    """Zero water is a legitimate recipe; zero cDNA warns."""
    errors, warnings = validate_recipe(Recipe(mix=10, primers=1, cdna=0, water=0))

    assert errors == []
    assert warnings == ["Recipe, cDNA: Volume is 0 µl"]


def test_validate_recipe_below_pipetting_limit():
    """Per-reaction volumes below the pipetting limit should warn."""
    _, warnings = validate_recipe(Recipe(mix=10, primers=0.2, cdna=2, water=6))

    assert len(warnings) == 1
    assert "minimum pipetting volume" in warnings[0]


# ============================================================================
# validate_primers Tests
# ============================================================================


def test_validate_primers_valid():
    """validate_primers should accept a normal primer pair."""
    assert validate_primers(make_primers()) == ([], [])


def test_validate_primers_non_positive_concentration():
    """Zero or negative concentration should be an error."""
    errors, _ = validate_primers(make_primers(forward_conc=0, reverse_conc=-5))

    assert len(errors) == 2
    assert "Forward" in errors[0]
    assert "Reverse" in errors[1]


def test_validate_primers_blank_name():
    """Blank primer names should be errors."""
    errors, _ = validate_primers(make_primers(reverse=" "))

    assert errors == ["Primers, Reverse: Name cannot be empty"]


def test_validate_primers_same_name_warns():
    """Forward and reverse sharing a name should warn."""
    _, warnings = validate_primers(make_primers(forward="P1", reverse="P1"))

    assert len(warnings) == 1
    assert "P1" in warnings[0]


# ============================================================================
# run_all_validations / ensure_valid_config Tests
# ============================================================================


def make_config(**overrides):
    values = dict(targets=["GeneA", "GeneB"], groups=["Control", "Treatment"], repeat=3,
                  mix=10, primers=1, cdna=2, water=6)
    values.update(overrides)
    return create_qpcr_config(**values)


def test_run_all_validations_valid():
    """A valid config should pass with a filled summary."""
    result = run_all_validations(make_config())

    assert result.is_valid
    assert result.summary["reactions_per_target"] == 6
    assert result.summary["total_reactions"] == 12


def test_run_all_validations_collects_all_errors():
    """Errors from every section should be aggregated."""
    result = run_all_validations(make_config(targets=[], repeat=0, water=-1, forward_concentration=0))

    assert not result.is_valid
    assert len(result.errors) == 4


def test_ensure_valid_config_raises_with_report():
    """ensure_valid_config should raise ValueError carrying the report."""
    with pytest.raises(ValueError, match="Groups: At least one group is required"):
        ensure_valid_config(make_config(groups=[]))


def test_ensure_valid_config_returns_warnings():
    """ensure_valid_config should return the result when only warnings exist."""
    result = ensure_valid_config(make_config(targets=["GeneA", "GeneA"]))

    assert result.is_valid
    assert result.has_warnings


def test_run_all_validations_reports_errors_and_warnings_together():
    """An invalid config should keep its warnings and summary alongside the errors."""
    result = run_all_validations(make_config(targets=["GeneA", "GeneA"], repeat=0))

    assert not result.is_valid
    assert result.has_errors
    assert result.has_warnings
    assert result.summary["total_reactions"] == 0
    assert "ERRORS:" in result.get_report()
    assert "WARNINGS:" in result.get_report()
