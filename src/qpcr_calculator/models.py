"""
Data models for qPCR Calculator using Pydantic.

This module defines the core data structures used throughout the application.
Every model accepts both snake_case field names and the camelCase names used by
the original JSON interface (e.g. ``forwardPrimer``, ``totalcDNAVolume``).

The input models deliberately carry no range constraints: the calculator accepts
degenerate experiments (no targets, zero repeats) and produces degenerate
results. Range checks live in ``qpcr_calculator.validation``.
"""

from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_serializer, field_validator

from qpcr_calculator.config import (
    DEFAULT_FORWARD_PRIMER_NAME,
    DEFAULT_REVERSE_PRIMER_NAME,
    DEFAULT_PRIMER_CONCENTRATION_UM,
)


# ============================================================================
# Input Data Models
# ============================================================================


class Primer(BaseModel):
    """A single primer and its stock concentration."""

    name: str = Field(..., description="Primer name")
    concentration: float = Field(..., description="Stock concentration in µM")

    @field_validator("name")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip leading/trailing whitespace from the name."""
        return v.strip()

    model_config = {"frozen": True}


class PrimersConfig(BaseModel):
    """Forward and reverse primer pair."""

    forward: Primer
    reverse: Primer

    model_config = {"frozen": True}


class Recipe(BaseModel):
    """
    Per-reaction volumes in µl.

    ``primers`` is the volume of *each* primer; forward and reverse use the same value.
    """

    mix: float = Field(..., description="Master-mix reagent per reaction (µl)")
    primers: float = Field(..., description="Volume of each primer per reaction (µl)")
    cdna: float = Field(..., alias="cDNA", description="cDNA per reaction (µl)")
    water: float = Field(..., description="Water per reaction (µl)")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [{"mix": 10.0, "primers": 1.0, "cDNA": 2.0, "water": 6.0}]
        },
    }


class Samples(BaseModel):
    """
    Experiment layout: targets, technical replicates and sample groups.

    Target names should be unique; duplicates are not rejected here.
    Lists are stored as tuples so a frozen config cannot change under a caller.
    """

    targets: tuple[str, ...] = Field(default=(), description="Target names, in order")
    repeat: int = Field(..., description="Technical replicates per target/group")
    groups: tuple[str, ...] = Field(default=(), description="Sample group names, in order")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "targets": ["GeneA", "GeneB"],
                    "repeat": 3,
                    "groups": ["Control", "Treatment"],
                }
            ]
        },
    }


class QPCRConfig(BaseModel):
    """Complete experiment description; the sole input to the calculator."""

    samples: Samples
    recipe: Recipe
    primers: PrimersConfig

    model_config = {"frozen": True}


# ============================================================================
# Result Models
# ============================================================================


class WorkingSolution(BaseModel):
    """
    Reagent premix covering every reaction of one target.

    Excludes cDNA, which is added per sample.
    """

    mix: float
    forward_primer: float = Field(..., alias="forwardPrimer")
    reverse_primer: float = Field(..., alias="reversePrimer")
    water: float
    total_volume: float = Field(..., alias="totalVolume")

    model_config = {"frozen": True, "populate_by_name": True}


class MasterMix(BaseModel):
    """Reagent premix covering every reaction of every target."""

    mix: float
    forward_primer: float = Field(..., alias="forwardPrimer")
    reverse_primer: float = Field(..., alias="reversePrimer")
    water: float
    total_volume: float = Field(..., alias="totalVolume")

    model_config = {"frozen": True, "populate_by_name": True}


class CalculationResult(BaseModel):
    """Output of ``calculate_qpcr_volumes``."""

    total_reactions: int = Field(..., alias="totalReactions")
    working_solutions: Mapping[str, WorkingSolution] = Field(..., alias="workingSolutions")
    master_mix: MasterMix = Field(..., alias="masterMix")
    total_cdna_volume: float = Field(..., alias="totalcDNAVolume")

    @field_validator("working_solutions", mode="after")
    @classmethod
    def freeze_working_solutions(cls, v: Mapping[str, WorkingSolution]) -> Mapping[str, WorkingSolution]:
        """Expose working solutions as a read-only mapping."""
        return MappingProxyType(dict(v))

    @field_serializer("working_solutions", mode="wrap")
    def serialize_working_solutions(self, v, handler):
        return handler(dict(v))

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "totalReactions": 12,
                    "workingSolutions": {
                        "GeneA": {
                            "mix": 60.0,
                            "forwardPrimer": 6.0,
                            "reversePrimer": 6.0,
                            "water": 36.0,
                            "totalVolume": 108.0,
                        }
                    },
                    "masterMix": {
                        "mix": 120.0,
                        "forwardPrimer": 12.0,
                        "reversePrimer": 12.0,
                        "water": 72.0,
                        "totalVolume": 216.0,
                    },
                    "totalcDNAVolume": 24.0,
                }
            ]
        },
    }


# ============================================================================
# Validation Models
# ============================================================================


class ValidationResult(BaseModel):
    """
    Result of config validation checks.

    Contains all errors, warnings, and summary information.
    """

    is_valid: bool = Field(..., description="True if no blocking errors")
    errors: list[str] = Field(default_factory=list, description="Blocking validation errors")
    warnings: list[str] = Field(default_factory=list, description="Non-blocking warnings")
    summary: dict[str, Any] = Field(default_factory=dict, description="Summary statistics")

    @property
    def has_errors(self) -> bool:
        """Check if there are any errors."""
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        """Check if there are any warnings."""
        return len(self.warnings) > 0

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def get_report(self) -> str:
        """
        Generate a human-readable report.

        Returns:
            Formatted string with errors, warnings, and summary
        """
        lines = []

        if self.has_errors:
            lines.append("ERRORS:")
            for error in self.errors:
                lines.append(f"  - {error}")
            lines.append("")

        if self.has_warnings:
            lines.append("WARNINGS:")
            for warning in self.warnings:
                lines.append(f"  - {warning}")
            lines.append("")

        if self.summary:
            lines.append("SUMMARY:")
            for key, value in self.summary.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)


# ============================================================================
# Helper Functions for Model Creation
# ============================================================================


def create_qpcr_config(
    targets: list[str],
    groups: list[str],
    repeat: int,
    mix: float,
    primers: float,
    cdna: float,
    water: float,
    forward_name: str = DEFAULT_FORWARD_PRIMER_NAME,
    forward_concentration: float = DEFAULT_PRIMER_CONCENTRATION_UM,
    reverse_name: str = DEFAULT_REVERSE_PRIMER_NAME,
    reverse_concentration: float = DEFAULT_PRIMER_CONCENTRATION_UM,
) -> QPCRConfig:
    """
    Create a QPCRConfig from flat form values.

    Args:
        targets: Target names
        groups: Sample group names
        repeat: Technical replicates per target/group
        mix: Master-mix reagent per reaction (µl)
        primers: Volume of each primer per reaction (µl)
        cdna: cDNA per reaction (µl)
        water: Water per reaction (µl)
        forward_name: Forward primer name
        forward_concentration: Forward primer stock (µM)
        reverse_name: Reverse primer name
        reverse_concentration: Reverse primer stock (µM)

    Returns:
        QPCRConfig instance (not range-checked)
    """
    return QPCRConfig(
        samples=Samples(targets=targets, repeat=repeat, groups=groups),
        recipe=Recipe(mix=mix, primers=primers, cdna=cdna, water=water),
        primers=PrimersConfig(
            forward=Primer(name=forward_name, concentration=forward_concentration),
            reverse=Primer(name=reverse_name, concentration=reverse_concentration),
        ),
    )
