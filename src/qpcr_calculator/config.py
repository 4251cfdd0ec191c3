"""
Configuration constants and defaults for qPCR Calculator.

This module contains default recipe values, validation thresholds, column name
mappings and message templates used throughout the application.
"""

from typing import Final

# ============================================================================
# Units and Display
# ============================================================================

# Suffix appended to every formatted volume
VOLUME_UNIT_SUFFIX: Final[str] = " ul"

# Decimal places shown by format_volume
VOLUME_DECIMALS: Final[int] = 1

# ============================================================================
# Default Parameters
# ============================================================================

# Per-reaction recipe (µl)
DEFAULT_MIX_UL: Final[float] = 10.0
DEFAULT_PRIMER_UL: Final[float] = 1.0
DEFAULT_CDNA_UL: Final[float] = 2.0
DEFAULT_WATER_UL: Final[float] = 6.0

# Primer stock concentration (µM)
DEFAULT_PRIMER_CONCENTRATION_UM: Final[float] = 10.0
DEFAULT_FORWARD_PRIMER_NAME: Final[str] = "Forward"
DEFAULT_REVERSE_PRIMER_NAME: Final[str] = "Reverse"

# Technical replicates per target/group combination
DEFAULT_REPEAT: Final[int] = 3

# Default Excel sheet to read (None = first sheet)
DEFAULT_SHEET_NAME: Final[str | None] = None

# ============================================================================
# Validation Thresholds
# ============================================================================

# Minimum pipetting volume (µl) - per-reaction volumes below this get a warning
MIN_PIPETTE_VOLUME_UL: Final[float] = 0.5

# Wells on a 384-well plate - larger experiments get a warning
MAX_REACTIONS_PER_PLATE: Final[int] = 384

# ============================================================================
# Sample Sheet Column Names (Case-Insensitive Matching)
# ============================================================================

TARGET_COLUMN: Final[str] = "Target"
GROUP_COLUMN: Final[str] = "Group"

SAMPLE_SHEET_COLUMNS: Final[list[str]] = [TARGET_COLUMN, GROUP_COLUMN]

COLUMN_ALIASES: Final[dict[str, str]] = {
    # Target variants
    "target": TARGET_COLUMN,
    "targets": TARGET_COLUMN,
    "gene": TARGET_COLUMN,
    "target_gene": TARGET_COLUMN,
    "assay": TARGET_COLUMN,
    # Group variants
    "group": GROUP_COLUMN,
    "groups": GROUP_COLUMN,
    "condition": GROUP_COLUMN,
    "sample_group": GROUP_COLUMN,
}

# ============================================================================
# Output Column Names
# ============================================================================

OUTPUT_WORKING_SOLUTION_COLUMNS: Final[list[str]] = [
    "Target",
    "Mix (µl)",
    "Forward Primer (µl)",
    "Reverse Primer (µl)",
    "Water (µl)",
    "Total Volume (µl)",
]

OUTPUT_MASTER_MIX_COLUMNS: Final[list[str]] = [
    "Reagent",
    "Volume (µl)",
]

# ============================================================================
# Validation Messages
# ============================================================================

ERROR_EMPTY_LIST: Final[str] = "{field}: At least one {item} is required"
ERROR_BLANK_NAME: Final[str] = "{field}: Entry {index} cannot be empty"
ERROR_REPEAT_TOO_LOW: Final[str] = "Repeat: Must be at least 1, got {value}"
ERROR_NEGATIVE_VOLUME: Final[str] = "Recipe, {field}: Volume must be >= 0, got {value}"
ERROR_NOT_FINITE: Final[str] = "{field}: Value must be a finite number, got {value}"
ERROR_BLANK_PRIMER_NAME: Final[str] = "Primers, {primer}: Name cannot be empty"
ERROR_NON_POSITIVE_CONCENTRATION: Final[str] = (
    "Primers, {primer}: Concentration must be > 0, got {value}"
)

WARN_DUPLICATE_NAME: Final[str] = "Duplicate {field} found: '{value}'"
WARN_DUPLICATE_TARGET: Final[str] = (
    "Duplicate target '{value}' - its reactions are counted, but it shares one working solution"
)
WARN_ZERO_VOLUME: Final[str] = "Recipe, {field}: Volume is 0 µl"
WARN_BELOW_MIN_PIPETTE: Final[str] = (
    "Recipe, {field}: Per-reaction volume ({volume:.2f} µl) is below minimum pipetting volume ({min_vol:.2f} µl)"
)
WARN_PLATE_CAPACITY: Final[str] = (
    "Total reactions ({count}) exceed a single {capacity}-well plate"
)
WARN_SAME_PRIMER_NAME: Final[str] = "Primers: Forward and reverse primer share the name '{name}'"

# ============================================================================
# UI Server
# ============================================================================

SERVER_NAME_ENV: Final[str] = "GRADIO_SERVER_NAME"
SERVER_PORT_ENV: Final[str] = "GRADIO_SERVER_PORT"
DEFAULT_SERVER_NAME: Final[str] = "127.0.0.1"
DEFAULT_SERVER_PORT: Final[int] = 7860

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME: Final[str] = "qPCR Calculator"

# ============================================================================
# Helper Functions
# ============================================================================


def normalize_column_name(name: str) -> str:
    """
    Normalize a sample sheet column name for matching.

    Converts to lowercase, strips whitespace, and looks up aliases.

    Args:
        name: Raw column name from input file

    Returns:
        Standardized column name, or original if no match found
    """
    normalized = name.strip().lower()

    if normalized in COLUMN_ALIASES:
        return COLUMN_ALIASES[normalized]

    for col in SAMPLE_SHEET_COLUMNS:
        if col.lower() == normalized:
            return col

    return name
