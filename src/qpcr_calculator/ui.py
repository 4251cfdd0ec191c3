"""
Gradio UI for qPCR Calculator

This module provides a web-based user interface using Gradio for the qPCR reaction setup calculator.
"""

import logging
import os
import re
import tempfile
from pathlib import Path

import gradio as gr
import pandas as pd

from qpcr_calculator import __version__
from qpcr_calculator.compute import calculate_qpcr_volumes, format_volume
from qpcr_calculator.config import (
    DEFAULT_CDNA_UL,
    DEFAULT_FORWARD_PRIMER_NAME,
    DEFAULT_MIX_UL,
    DEFAULT_PRIMER_CONCENTRATION_UM,
    DEFAULT_PRIMER_UL,
    DEFAULT_REPEAT,
    DEFAULT_REVERSE_PRIMER_NAME,
    DEFAULT_SERVER_NAME,
    DEFAULT_SERVER_PORT,
    DEFAULT_WATER_UL,
    SERVER_NAME_ENV,
    SERVER_PORT_ENV,
)
from qpcr_calculator.io import (
    export_results_to_excel,
    generate_export_filename,
    load_config,
    load_sample_sheet,
    master_mix_to_dataframe,
    samples_from_sheet,
    working_solutions_to_dataframe,
)
from qpcr_calculator.models import create_qpcr_config
from qpcr_calculator.validation import run_all_validations

LOGGER = logging.getLogger(__name__)


def parse_name_list(text: str | None) -> list[str]:
    """
    Split a comma- or newline-separated list of names.

    Blank entries are dropped; order is kept.
    """
    if not text:
        return []
    return [name.strip() for name in re.split(r"[,\n]", text) if name.strip()]


def _format_volume_columns(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Copy of df with the given numeric columns rendered by format_volume."""
    df_display = df.copy()
    for col in columns:
        df_display[col] = df_display[col].map(format_volume)
    return df_display


def process_inputs(
    targets_text: str,
    groups_text: str,
    repeat: float,
    mix: float,
    primers: float,
    cdna: float,
    water: float,
    forward_name: str,
    forward_concentration: float,
    reverse_name: str,
    reverse_concentration: float,
    sample_sheet=None,
) -> tuple[str, pd.DataFrame | None, pd.DataFrame | None, bytes | None]:
    """
    Build a config from form values and compute the reaction setup.

    Args:
        targets_text: Target names, comma or newline separated
        groups_text: Group names, comma or newline separated
        repeat: Technical replicates (Gradio numbers arrive as float)
        mix: Master-mix reagent per reaction (µl)
        primers: Volume of each primer per reaction (µl)
        cdna: cDNA per reaction (µl)
        water: Water per reaction (µl)
        forward_name: Forward primer name
        forward_concentration: Forward primer stock (µM)
        reverse_name: Reverse primer name
        reverse_concentration: Reverse primer stock (µM)
        sample_sheet: Optional uploaded CSV/Excel sheet; its Target and Group
            columns replace the typed-in names

    Returns:
        Tuple of (status_message, working_df, master_df, excel_bytes)
    """
    try:
        if repeat is None or float(repeat) != int(repeat):
            return "❌ Error: Repeat must be a whole number", None, None, None

        targets = parse_name_list(targets_text)
        groups = parse_name_list(groups_text)

        if sample_sheet is not None:
            # Gradio passes either a filepath or an object with .name
            sheet_path = getattr(sample_sheet, "name", sample_sheet)
            samples = samples_from_sheet(load_sample_sheet(sheet_path), repeat=int(repeat))
            targets = list(samples.targets)
            groups = list(samples.groups)

        config = create_qpcr_config(
            targets=targets,
            groups=groups,
            repeat=int(repeat),
            mix=mix,
            primers=primers,
            cdna=cdna,
            water=water,
            forward_name=forward_name or "",
            forward_concentration=forward_concentration,
            reverse_name=reverse_name or "",
            reverse_concentration=reverse_concentration,
        )

        validation_result = run_all_validations(config)

        if not validation_result.is_valid:
            error_msg = "❌ **VALIDATION FAILED**\n\n"
            error_msg += f"**Errors ({len(validation_result.errors)}):**\n"
            for err in validation_result.errors:
                error_msg += f"- {err}\n"
            if validation_result.warnings:
                error_msg += f"\n**Warnings ({len(validation_result.warnings)}):**\n"
                for warn in validation_result.warnings:
                    error_msg += f"- {warn}\n"
            return error_msg, None, None, None

        status_msg = "✅ **VALIDATION PASSED**\n\n"
        status_msg += f"- Targets: {len(config.samples.targets)}\n"
        status_msg += f"- Groups: {len(config.samples.groups)}\n"
        status_msg += f"- Repeats: {config.samples.repeat}\n"

        if validation_result.warnings:
            status_msg += f"\n⚠️ **Warnings ({len(validation_result.warnings)}):**\n"
            for warn in validation_result.warnings:
                status_msg += f"- {warn}\n"

        result = calculate_qpcr_volumes(config)

        working_df = working_solutions_to_dataframe(result)
        master_df = master_mix_to_dataframe(result, config)

        excel_bytes = export_results_to_excel(working_df, master_df, config=config)

        working_display = _format_volume_columns(working_df, list(working_df.columns[1:]))
        master_display = _format_volume_columns(master_df, ["Volume (µl)"])

        status_msg += "\n✅ **Reaction setup computed successfully!**\n"
        status_msg += f"- Total reactions: {result.total_reactions}\n"
        status_msg += f"- Master mix volume: {format_volume(result.master_mix.total_volume)}\n"
        status_msg += f"- Total cDNA: {format_volume(result.total_cdna_volume)}\n"
        status_msg += "- Ready to download Excel file\n"

        return status_msg, working_display, master_display, excel_bytes

    except Exception as e:
        LOGGER.exception("Failed to compute reaction setup")
        error_msg = f"❌ **ERROR**: {str(e)}\n\n"
        error_msg += "Please check your inputs and try again."
        return error_msg, None, None, None


def load_config_into_form(config_file) -> tuple:
    """
    Read an uploaded JSON experiment config and return values for the form.

    Args:
        config_file: Uploaded JSON file (filepath or object with .name)

    Returns:
        Tuple of (status_message, targets_text, groups_text, repeat, mix, primers,
        cdna, water, forward_name, forward_concentration, reverse_name,
        reverse_concentration). On failure every form value is gr.update(),
        leaving the form unchanged.
    """
    unchanged = tuple(gr.update() for _ in range(11))

    if config_file is None:
        return ("Please upload a config file first.",) + unchanged

    try:
        config = load_config(getattr(config_file, "name", config_file))
    except (FileNotFoundError, ValueError) as e:
        LOGGER.warning("Could not load config: %s", e)
        return (f"❌ **ERROR**: {e}",) + unchanged

    samples = config.samples
    recipe = config.recipe
    primers = config.primers

    return (
        f"✅ Loaded config with {len(samples.targets)} targets and {len(samples.groups)} groups.",
        "\n".join(samples.targets),
        "\n".join(samples.groups),
        samples.repeat,
        recipe.mix,
        recipe.primers,
        recipe.cdna,
        recipe.water,
        primers.forward.name,
        primers.forward.concentration,
        primers.reverse.name,
        primers.reverse.concentration,
    )


def prepare_download(excel_bytes: bytes | None) -> str | None:
    """
    Write exported bytes to a timestamped temp file for the download button.

    Returns:
        Path to the written file, or None if there is nothing to download
    """
    if excel_bytes is None:
        return None

    temp_path = Path(tempfile.gettempdir()) / generate_export_filename()
    temp_path.write_bytes(excel_bytes)

    return str(temp_path)


def build_app() -> gr.Blocks:
    """
    Build and return the Gradio interface.

    Returns:
        Configured Gradio Blocks interface
    """
    with gr.Blocks(title="qPCR Calculator") as app:
        gr.Markdown(
            f"""
            # 🧬 qPCR Reaction Setup Calculator
            **Version {__version__}**

            Calculate working solution, master mix and cDNA volumes for a qPCR plate.
            """
        )

        with gr.Row():
            with gr.Column(scale=1):
                gr.Markdown("## 📁 Input")

                config_upload = gr.File(
                    label="Load Experiment Config (JSON) [Optional]",
                    file_types=[".json"],
                    type="filepath",
                )

                gr.Markdown("## 🧪 Samples")

                targets_input = gr.Textbox(
                    label="Targets",
                    placeholder="GeneA, GeneB",
                    lines=3,
                    info="Comma or newline separated target genes",
                )

                groups_input = gr.Textbox(
                    label="Groups",
                    placeholder="Control, Treatment",
                    lines=3,
                    info="Comma or newline separated sample groups",
                )

                sample_sheet_upload = gr.File(
                    label="Sample Sheet (Excel/CSV) [Optional]",
                    file_types=[".xlsx", ".csv"],
                    type="filepath",
                )

                repeat_input = gr.Number(
                    label="Repeat",
                    value=DEFAULT_REPEAT,
                    minimum=1,
                    step=1,
                    precision=0,
                    info="Technical replicates per target and group",
                )

                gr.Markdown("### Recipe (per reaction)")

                mix_input = gr.Number(label="Mix (µl)", value=DEFAULT_MIX_UL, minimum=0, step=0.1)
                primers_input = gr.Number(
                    label="Each Primer (µl)",
                    value=DEFAULT_PRIMER_UL,
                    minimum=0,
                    step=0.1,
                    info="Used for both forward and reverse primer",
                )
                cdna_input = gr.Number(label="cDNA (µl)", value=DEFAULT_CDNA_UL, minimum=0, step=0.1)
                water_input = gr.Number(label="Water (µl)", value=DEFAULT_WATER_UL, minimum=0, step=0.1)

                gr.Markdown("### Primers")

                with gr.Row():
                    forward_name_input = gr.Textbox(label="Forward Name", value=DEFAULT_FORWARD_PRIMER_NAME)
                    forward_conc_input = gr.Number(
                        label="Forward (µM)", value=DEFAULT_PRIMER_CONCENTRATION_UM, minimum=0
                    )

                with gr.Row():
                    reverse_name_input = gr.Textbox(label="Reverse Name", value=DEFAULT_REVERSE_PRIMER_NAME)
                    reverse_conc_input = gr.Number(
                        label="Reverse (µM)", value=DEFAULT_PRIMER_CONCENTRATION_UM, minimum=0
                    )

                calculate_btn = gr.Button(
                    "🧮 Calculate Volumes",
                    variant="primary",
                    size="lg",
                )

            with gr.Column(scale=2):
                gr.Markdown("## 📊 Results")

                status_output = gr.Markdown(
                    value="Enter targets and groups and click 'Calculate Volumes' to begin.",
                    label="Status",
                )

                with gr.Tabs():
                    with gr.Tab("🧫 Working Solutions"):
                        working_table = gr.DataFrame(label="Per-Target Working Solutions", wrap=True)

                    with gr.Tab("🧪 Master Mix"):
                        master_table = gr.DataFrame(label="Combined Master Mix", wrap=True)

                download_btn = gr.DownloadButton(
                    label="📥 Download Reaction Setup (Excel)",
                    variant="secondary",
                    size="lg",
                    visible=False,
                )

        excel_state = gr.State(value=None)

        def calculate_wrapper(*args):
            status, working_df, master_df, excel_bytes = process_inputs(*args)

            return (
                status,
                working_df,
                master_df,
                excel_bytes,
                gr.update(visible=excel_bytes is not None),
            )

        calculate_btn.click(
            fn=calculate_wrapper,
            inputs=[
                targets_input,
                groups_input,
                repeat_input,
                mix_input,
                primers_input,
                cdna_input,
                water_input,
                forward_name_input,
                forward_conc_input,
                reverse_name_input,
                reverse_conc_input,
                sample_sheet_upload,
            ],
            outputs=[
                status_output,
                working_table,
                master_table,
                excel_state,
                download_btn,
            ],
        )

        config_upload.upload(
            fn=load_config_into_form,
            inputs=[config_upload],
            outputs=[
                status_output,
                targets_input,
                groups_input,
                repeat_input,
                mix_input,
                primers_input,
                cdna_input,
                water_input,
                forward_name_input,
                forward_conc_input,
                reverse_name_input,
                reverse_conc_input,
            ],
        )

        download_btn.click(
            fn=prepare_download,
            inputs=[excel_state],
            outputs=download_btn,
        )

        gr.Markdown(
            """
            ---
            ### 📖 Quick Start Guide

            1. **List your targets** (genes) and **sample groups**, or upload a sample sheet
               with `Target` and `Group` columns, or load a saved JSON experiment config
            2. **Set the repeat count** for technical replicates
            3. **Enter the per-reaction recipe**: mix, each primer, cDNA and water
            4. **Click "Calculate Volumes"**:
               - *Working solutions*: one premix per target (no cDNA)
               - *Master mix*: one premix for every reaction, plus the total cDNA needed
            5. **Download the Excel file** for the bench
            """
        )

    return app


def main():
    """Main entry point to launch the Gradio app."""
    logging.basicConfig(level=logging.INFO)

    app = build_app()

    # Set GRADIO_SERVER_NAME=0.0.0.0 when running in Docker
    server_name = os.getenv(SERVER_NAME_ENV, DEFAULT_SERVER_NAME)
    server_port = int(os.getenv(SERVER_PORT_ENV, str(DEFAULT_SERVER_PORT)))

    app.launch(
        server_name=server_name,
        server_port=server_port,
        share=False,
        show_error=True,
    )


if __name__ == "__main__":
    main()
