"""
Computation engine for qPCR Calculator.

This module handles:
- Reaction counts (groups × repeats per target, × targets overall)
- Per-target working solution volumes
- Master mix volumes across all targets
- Total cDNA volume
- Volume formatting for display

Architecture note: All functions are pure. No rounding happens here; rounding is
a presentation concern handled by format_volume.
"""

import logging

from qpcr_calculator.config import VOLUME_DECIMALS, VOLUME_UNIT_SUFFIX
from qpcr_calculator.models import (
    CalculationResult,
    MasterMix,
    QPCRConfig,
    Recipe,
    Samples,
    WorkingSolution,
)

LOGGER = logging.getLogger(__name__)


def compute_reactions_per_target(samples: Samples) -> int:
    """
    Number of reactions run for each target.

    Formula: reactions = number of groups × repeat

    Args:
        samples: Experiment layout

    Returns:
        Reaction count per target
    """
    return len(samples.groups) * samples.repeat


def compute_working_solution(recipe: Recipe, reactions: int) -> WorkingSolution:
    """
    Scale the recipe (without cDNA) to cover ``reactions`` reactions of one target.

    Args:
        recipe: Per-reaction volumes
        reactions: Reactions per target

    Returns:
        WorkingSolution with the summed total volume
    """
    mix_volume = recipe.mix * reactions
    forward_primer_volume = recipe.primers * reactions
    reverse_primer_volume = recipe.primers * reactions
    water_volume = recipe.water * reactions
    total_volume = mix_volume + forward_primer_volume + reverse_primer_volume + water_volume

    return WorkingSolution(
        mix=mix_volume,
        forward_primer=forward_primer_volume,
        reverse_primer=reverse_primer_volume,
        water=water_volume,
        total_volume=total_volume,
    )


def compute_master_mix(recipe: Recipe, total_reactions: int) -> MasterMix:
    """
    Scale the recipe (without cDNA) to cover every reaction of the experiment.

    The total volume uses the closed form
    (mix + 2 × primers + water) × total_reactions
    rather than summing the scaled fields, so floating-point rounding
    matches the reference results exactly.

    Args:
        recipe: Per-reaction volumes
        total_reactions: Reactions across all targets

    Returns:
        MasterMix volumes
    """
    return MasterMix(
        mix=recipe.mix * total_reactions,
        forward_primer=recipe.primers * total_reactions,
        reverse_primer=recipe.primers * total_reactions,
        water=recipe.water * total_reactions,
        total_volume=(recipe.mix + recipe.primers * 2 + recipe.water) * total_reactions,
    )


def calculate_qpcr_volumes(config: QPCRConfig, validate: bool = False) -> CalculationResult:
    """
    Calculate working solutions, master mix and cDNA volume for an experiment.

    Algorithm:
    1. reactions_per_target = len(groups) × repeat
    2. total_reactions = reactions_per_target × len(targets)
    3. One working solution per target, scaled by reactions_per_target
    4. Master mix scaled by total_reactions
    5. total_cdna_volume = cDNA × total_reactions

    Degenerate inputs are not rejected unless ``validate`` is set: an empty
    target list gives an empty mapping and zero volumes, a repeat of 0 gives
    zero reactions.

    Args:
        config: Experiment description
        validate: Run ensure_valid_config first and fail fast on errors

    Returns:
        CalculationResult

    Raises:
        ValueError: If validate is True and the config has blocking errors
    """
    if validate:
        # Imported here: validation depends on this module
        from qpcr_calculator.validation import ensure_valid_config

        ensure_valid_config(config)

    samples = config.samples
    recipe = config.recipe

    reactions_per_target = compute_reactions_per_target(samples)
    total_reactions = reactions_per_target * len(samples.targets)

    working_solutions = {}
    for target in samples.targets:
        working_solutions[target] = compute_working_solution(recipe, reactions_per_target)

    master_mix = compute_master_mix(recipe, total_reactions)
    total_cdna_volume = recipe.cdna * total_reactions

    LOGGER.debug(
        "Calculated %d reactions (%d per target) for %d targets",
        total_reactions,
        reactions_per_target,
        len(samples.targets),
    )

    return CalculationResult(
        total_reactions=total_reactions,
        working_solutions=working_solutions,
        master_mix=master_mix,
        total_cdna_volume=total_cdna_volume,
    )


def format_volume(volume: float) -> str:
    """
    Format a volume for display, e.g. 12.34 -> "12.3 ul".

    Uses Python float formatting: correctly rounded on the exact binary
    value, with exact ties going to the even digit (0.25 -> "0.2 ul").
    """
    return f"{volume:.{VOLUME_DECIMALS}f}{VOLUME_UNIT_SUFFIX}"
