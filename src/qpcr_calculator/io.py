"""
Input/Output operations for qPCR Calculator.

This module handles reading experiment configs and sample sheets, tabulating
results with pandas, and exporting results to Excel files.
"""

import json
import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd
from pydantic import ValidationError

from qpcr_calculator import __version__
from qpcr_calculator.config import (
    APP_NAME,
    DEFAULT_SHEET_NAME,
    GROUP_COLUMN,
    OUTPUT_MASTER_MIX_COLUMNS,
    OUTPUT_WORKING_SOLUTION_COLUMNS,
    TARGET_COLUMN,
    normalize_column_name,
)
from qpcr_calculator.models import CalculationResult, QPCRConfig, Samples

LOGGER = logging.getLogger(__name__)

# Leading bytes of .xlsx (zip) and .xls (OLE2) files
EXCEL_SIGNATURES = (b"PK\x03\x04", b"\xd0\xcf\x11\xe0")


# ============================================================================
# Config Loading
# ============================================================================


def config_from_dict(data: dict[str, Any]) -> QPCRConfig:
    """
    Build a QPCRConfig from a dictionary (snake_case or camelCase keys).

    Raises:
        ValueError: If data doesn't describe a well-typed config
    """
    try:
        return QPCRConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid qPCR config: {e}") from e


def load_config(source: str | Path | bytes) -> QPCRConfig:
    """
    Load an experiment config from a JSON file or JSON bytes.

    A ``str`` is treated as a file path.

    Args:
        source: Path to JSON file, or raw JSON bytes

    Returns:
        QPCRConfig (not range-checked)

    Raises:
        FileNotFoundError: If file path doesn't exist
        ValueError: If content is not valid JSON or not a valid config
    """
    if isinstance(source, (str, Path)):
        file_path = Path(source)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        raw = file_path.read_bytes()
    else:
        raw = source

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Error reading config JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Error reading config JSON: top level must be an object")

    config = config_from_dict(data)
    LOGGER.info(
        "Loaded config with %d targets and %d groups",
        len(config.samples.targets),
        len(config.samples.groups),
    )
    return config


# ============================================================================
# Sample Sheets
# ============================================================================


def _read_sheet_bytes(data: bytes, sheet_name: str | int) -> pd.DataFrame:
    """Read Excel bytes (.xlsx or .xls, by file signature), otherwise CSV text."""
    if data.startswith(EXCEL_SIGNATURES):
        return pd.read_excel(BytesIO(data), sheet_name=sheet_name)
    return pd.read_csv(BytesIO(data))


def load_sample_sheet(
    file_path_or_bytes: str | Path | bytes | BinaryIO,
    sheet_name: str | int | None = DEFAULT_SHEET_NAME,
) -> pd.DataFrame:
    """
    Load a sample sheet from file path or bytes and normalize its column names.

    Args:
        file_path_or_bytes: Path to Excel/CSV file, Excel or CSV bytes, or binary file-like object
        sheet_name: Sheet name or index to read (None = first sheet)

    Returns:
        DataFrame with normalized column names and empty rows removed

    Raises:
        FileNotFoundError: If file path doesn't exist
        ValueError: If file format is unsupported or corrupted
    """
    try:
        # pandas returns a dict of sheets when sheet_name=None
        if sheet_name is None:
            sheet_name = 0

        if isinstance(file_path_or_bytes, (str, Path)):
            file_path = Path(file_path_or_bytes)
            if not file_path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")

            if file_path.suffix.lower() == ".csv":
                df = pd.read_csv(file_path)
            else:
                df = pd.read_excel(file_path, sheet_name=sheet_name)
        elif isinstance(file_path_or_bytes, bytes):
            df = _read_sheet_bytes(file_path_or_bytes, sheet_name)
        else:
            df = _read_sheet_bytes(file_path_or_bytes.read(), sheet_name)

        df = df.dropna(how="all").reset_index(drop=True)

    except FileNotFoundError:
        raise
    except Exception as e:
        raise ValueError(f"Error reading sample sheet: {e}") from e

    return df.rename(columns=lambda col: normalize_column_name(str(col)))


def _unique_names(column: pd.Series) -> list[str]:
    """Non-blank cell values as strings, first appearance order, duplicates dropped."""
    names = []
    for value in column:
        if pd.isna(value):
            continue
        name = str(value).strip()
        if name and name not in names:
            names.append(name)
    return names


def samples_from_sheet(df: pd.DataFrame, repeat: int) -> Samples:
    """
    Build Samples from a sample sheet with Target and Group columns.

    The two columns are read independently; they need not be the same length.

    Args:
        df: DataFrame with normalized column names
        repeat: Technical replicates per target/group

    Returns:
        Samples instance

    Raises:
        ValueError: If a required column is missing
    """
    missing = [col for col in (TARGET_COLUMN, GROUP_COLUMN) if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    return Samples(
        targets=_unique_names(df[TARGET_COLUMN]),
        repeat=repeat,
        groups=_unique_names(df[GROUP_COLUMN]),
    )


# ============================================================================
# Tabulation
# ============================================================================


def working_solutions_to_dataframe(result: CalculationResult) -> pd.DataFrame:
    """
    Tabulate per-target working solutions, one row per target.

    Args:
        result: Calculator output

    Returns:
        DataFrame with OUTPUT_WORKING_SOLUTION_COLUMNS
    """
    rows = []
    for target, solution in result.working_solutions.items():
        rows.append([
            target,
            solution.mix,
            solution.forward_primer,
            solution.reverse_primer,
            solution.water,
            solution.total_volume,
        ])

    return pd.DataFrame(rows, columns=OUTPUT_WORKING_SOLUTION_COLUMNS)


def master_mix_to_dataframe(
    result: CalculationResult,
    config: QPCRConfig | None = None,
) -> pd.DataFrame:
    """
    Tabulate the master mix as Reagent / Volume rows.

    Primer rows use the primer names from ``config`` when given, and a
    cDNA row is appended after the total.

    Args:
        result: Calculator output
        config: Experiment config used for the calculation (optional)

    Returns:
        DataFrame with OUTPUT_MASTER_MIX_COLUMNS
    """
    master = result.master_mix

    forward_label = "Forward Primer"
    reverse_label = "Reverse Primer"
    if config is not None:
        forward_label = f"Forward Primer ({config.primers.forward.name})"
        reverse_label = f"Reverse Primer ({config.primers.reverse.name})"

    rows = [
        ["Mix", master.mix],
        [forward_label, master.forward_primer],
        [reverse_label, master.reverse_primer],
        ["Water", master.water],
        ["Total", master.total_volume],
    ]
    if config is not None:
        rows.append(["cDNA (added separately)", result.total_cdna_volume])

    return pd.DataFrame(rows, columns=OUTPUT_MASTER_MIX_COLUMNS)


# ============================================================================
# Excel Export
# ============================================================================


def export_results_to_excel(
    working_df: pd.DataFrame,
    master_df: pd.DataFrame,
    output_path: str | Path | None = None,
    config: QPCRConfig | None = None,
) -> bytes | None:
    """
    Export calculation results to Excel file with multiple sheets.

    Args:
        working_df: DataFrame with per-target working solutions
        master_df: DataFrame with master mix volumes
        output_path: Optional path to save file (if None, returns bytes)
        config: Optional experiment config for the metadata sheet

    Returns:
        Bytes of Excel file if output_path is None, otherwise None
    """
    if output_path is None:
        buffer = BytesIO()
        writer_target = buffer
    else:
        writer_target = Path(output_path)

    with pd.ExcelWriter(writer_target, engine="openpyxl") as writer:
        working_df.to_excel(
            writer, sheet_name="WorkingSolutions", index=False, freeze_panes=(1, 0)
        )
        master_df.to_excel(
            writer, sheet_name="MasterMix", index=False, freeze_panes=(1, 0)
        )

        metadata = _create_metadata_dict(config)
        metadata_df = pd.DataFrame(list(metadata.items()), columns=["Parameter", "Value"])
        metadata_df.to_excel(writer, sheet_name="Metadata", index=False, freeze_panes=(1, 0))

        for sheet_name in writer.sheets:
            _auto_adjust_column_widths(writer.sheets[sheet_name])

    if output_path is None:
        buffer.seek(0)
        LOGGER.info("Exported results to in-memory workbook")
        return buffer.getvalue()

    LOGGER.info("Exported results to %s", output_path)
    return None


def generate_export_filename(prefix: str = "qpcr_plan") -> str:
    """
    Generate a timestamped filename for exports.

    Args:
        prefix: Prefix for filename

    Returns:
        Filename string with timestamp
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.xlsx"


def _create_metadata_dict(config: QPCRConfig | None = None) -> dict[str, str]:
    """
    Create metadata dictionary for export.

    Args:
        config: Optional experiment config

    Returns:
        Dictionary of metadata key-value pairs
    """
    metadata = {
        "Generated At": datetime.now().isoformat(),
        "App Name": APP_NAME,
        "App Version": __version__,
    }

    if config:
        samples = config.samples
        recipe = config.recipe
        primers = config.primers
        metadata["Targets"] = ", ".join(samples.targets)
        metadata["Groups"] = ", ".join(samples.groups)
        metadata["Repeat"] = str(samples.repeat)
        metadata["Mix per Reaction (µl)"] = str(recipe.mix)
        metadata["Each Primer per Reaction (µl)"] = str(recipe.primers)
        metadata["cDNA per Reaction (µl)"] = str(recipe.cdna)
        metadata["Water per Reaction (µl)"] = str(recipe.water)
        metadata["Forward Primer"] = f"{primers.forward.name} ({primers.forward.concentration} µM)"
        metadata["Reverse Primer"] = f"{primers.reverse.name} ({primers.reverse.concentration} µM)"

    return metadata


def _auto_adjust_column_widths(worksheet) -> None:
    """
    Auto-adjust column widths in an openpyxl worksheet.

    Args:
        worksheet: openpyxl worksheet object
    """
    for column in worksheet.columns:
        max_length = 0
        column_letter = column[0].column_letter

        for cell in column:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))

        adjusted_width = min(max_length + 2, 50)  # Cap at 50 characters
        worksheet.column_dimensions[column_letter].width = adjusted_width
