"""
Tests for the Gradio UI processing functions.

Exercises process_inputs and helpers without launching a server.
"""

from pathlib import Path

import pytest

from qpcr_calculator.ui import (
    build_app,
    load_config_into_form,
    parse_name_list,
    prepare_download,
    process_inputs,
)


# Fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


def run(**overrides):
    values = dict(
        targets_text="GeneA, GeneB",
        groups_text="Control\nTreatment",
        repeat=3,
        mix=10.0,
        primers=1.0,
        cdna=2.0,
        water=6.0,
        forward_name="GAPDH-F",
        forward_concentration=10.0,
        reverse_name="GAPDH-R",
        reverse_concentration=10.0,
    )
    values.update(overrides)
    return process_inputs(**values)


# ============================================================================
# parse_name_list Tests
# ============================================================================


@pytest.mark.parametrize(
    "text, expected",
    [
        ("GeneA, GeneB", ["GeneA", "GeneB"]),
        ("GeneA\nGeneB\n", ["GeneA", "GeneB"]),
        (" , ,GeneA", ["GeneA"]),
        ("", []),
        (None, []),
    ],
)
def test_parse_name_list(text, expected):
    """parse_name_list should split on commas and newlines and drop blanks."""
    assert parse_name_list(text) == expected


# ============================================================================
# process_inputs Tests
# ============================================================================


def test_process_inputs_success():
    """Valid inputs should produce formatted tables and an Excel file."""
    status, working_df, master_df, excel_bytes = run()

    assert "VALIDATION PASSED" in status
    assert "Total reactions: 12" in status
    assert "216.0 ul" in status
    assert list(working_df["Target"]) == ["GeneA", "GeneB"]
    assert working_df.loc[0, "Total Volume (µl)"] == "108.0 ul"
    assert "24.0 ul" in master_df["Volume (µl)"].values
    assert isinstance(excel_bytes, bytes)


def test_process_inputs_validation_failure():
    """Missing targets should fail validation and return no results."""
    status, working_df, master_df, excel_bytes = run(targets_text="")

    assert "VALIDATION FAILED" in status
    assert "Targets" in status
    assert working_df is None
    assert master_df is None
    assert excel_bytes is None


def test_process_inputs_warnings_shown():
    """Warnings should be listed in a successful status."""
    status, working_df, _, _ = run(targets_text="GeneA, GeneA")

    assert "Warnings (1)" in status
    assert len(working_df) == 1


def test_process_inputs_fractional_repeat():
    """A fractional repeat should be reported, not computed."""
    status, working_df, _, _ = run(repeat=2.5)

    assert "whole number" in status
    assert working_df is None


def test_process_inputs_missing_number_reports_error():
    """An empty numeric field should be reported as an error."""
    status, working_df, _, excel_bytes = run(mix=None)

    assert "ERROR" in status
    assert working_df is None
    assert excel_bytes is None


def test_process_inputs_sample_sheet_replaces_names():
    """An uploaded sample sheet should supply targets and groups."""
    status, working_df, _, _ = run(
        targets_text="Ignored", sample_sheet=str(FIXTURES_DIR / "sample_sheet.csv")
    )

    assert "Targets: 3" in status
    assert "Total reactions: 18" in status
    assert list(working_df["Target"]) == ["GeneA", "GeneB", "GeneC"]


def test_process_inputs_missing_sample_sheet():
    """A sample sheet path that doesn't exist should be reported."""
    status, working_df, _, _ = run(sample_sheet="nonexistent_sheet.csv")

    assert "ERROR" in status
    assert working_df is None


# ============================================================================
# load_config_into_form Tests
# ============================================================================


def test_load_config_into_form():
    """An uploaded config should fill every form field."""
    values = load_config_into_form(str(FIXTURES_DIR / "example_config.json"))

    status, targets_text, groups_text, repeat, mix, primers, cdna, water = values[:8]
    assert "2 targets" in status
    assert parse_name_list(targets_text) == ["GeneA", "GeneB"]
    assert parse_name_list(groups_text) == ["Control", "Treatment"]
    assert (repeat, mix, primers, cdna, water) == (3, 10.0, 1.0, 2.0, 6.0)
    assert values[8:] == ("GAPDH-F", 10.0, "GAPDH-R", 10.0)


def test_load_config_into_form_round_trips_through_process_inputs():
    """Form values from a loaded config should compute the reference setup."""
    values = load_config_into_form(str(FIXTURES_DIR / "example_config.json"))

    status, _, _, _ = process_inputs(*values[1:])

    assert "Total reactions: 12" in status


def test_load_config_into_form_no_file():
    """No upload should return a prompt and leave the form unchanged."""
    values = load_config_into_form(None)

    assert "upload a config" in values[0]
    assert len(values) == 12


def test_load_config_into_form_bad_file(tmp_path):
    """A malformed config should be reported."""
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    values = load_config_into_form(str(path))

    assert "ERROR" in values[0]
    assert len(values) == 12


# ============================================================================
# prepare_download / build_app Tests
# ============================================================================


def test_prepare_download_none():
    """prepare_download should return None when there is nothing to download."""
    assert prepare_download(None) is None


def test_prepare_download_writes_file():
    """prepare_download should write bytes to a temp .xlsx file."""
    path = Path(prepare_download(b"data"))

    try:
        assert path.suffix == ".xlsx"
        assert path.read_bytes() == b"data"
    finally:
        path.unlink()


def test_build_app():
    """build_app should construct the Blocks interface without launching it."""
    app = build_app()

    assert app is not None
