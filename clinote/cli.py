import json
import random
import sys
from pathlib import Path

import click
import pandas as pd
from tabulate import tabulate
from tqdm import tqdm

from .config import apply_runtime_config
from .errors import InputError, ProcessingError
from .pipeline import TextPipeline, clean_text
from .report import render_report, report_filename
from .samples import SAMPLE_NOTES
from .utils import logger, normalize_note


def _make_pipeline(seed):
    return TextPipeline(rng=random.Random(seed) if seed is not None else None)


def validate_input(df: pd.DataFrame) -> pd.DataFrame:
    if "clinical_note" not in df.columns:
        raise KeyError("Missing required column: 'clinical_note'.")
    df = df.dropna(subset=["clinical_note"]).copy()
    df["clinical_note"] = df["clinical_note"].apply(normalize_note)
    df = df[df["clinical_note"] != ""]
    if "patient_id" not in df.columns:
        df = df.reset_index(drop=True)
        df["patient_id"] = df.index + 1
    return df


def flatten_result(case_id, result) -> dict:
    fields = result.structured_fields
    vitals = fields.vital_signs
    return {
        "Case": case_id,
        "Patient ID": fields.patient_id,
        "Name": fields.patient_name,
        "Age": fields.age,
        "Gender": fields.gender,
        "Diagnosis": fields.diagnosis,
        "Medications": "; ".join(fields.medications),
        "Symptoms": "; ".join(fields.symptoms),
        "Blood Pressure": vitals.blood_pressure,
        "Heart Rate": vitals.heart_rate,
        "Temperature": vitals.temperature,
        "Corrections": len(result.corrections),
        "Sentiment": result.sentiment.label,
        "Sentiment Score": round(result.sentiment.score, 3),
        "Entities": len(result.entities),
        "Summary": result.summary,
    }


def run_batch(input_df: pd.DataFrame, pipeline: TextPipeline):
    """Process every note of a validated frame; returns (results, flat DataFrame)."""
    df = validate_input(input_df)
    results = []
    rows = []
    for case_id, note in tqdm(
        zip(df["patient_id"], df["clinical_note"]), total=len(df), desc="Processing Notes", unit="note"
    ):
        result = pipeline.process(note)
        results.append((case_id, result))
        rows.append(flatten_result(case_id, result))
    return results, pd.DataFrame(rows)


@click.group()
@click.option('--config', 'config_path', type=click.Path(), default=None, help='Path to a JSON runtime config.')
def cli(config_path):
    """clinote: mock NLP processing for free-text clinical notes."""
    applied = apply_runtime_config(config_path)
    if applied:
        logger.debug(f"Applied runtime config: {sorted(applied)}")


@cli.command()
@click.option('--input-csv', type=click.Path(exists=True), required=True, help='CSV file with a clinical_note column.')
@click.option('--output-csv', type=click.Path(), help='Path to save one flattened row per note.')
@click.option('--output-json', type=click.Path(), help='Path to save the full results as JSON.')
@click.option('--display/--no-display', default=False, help='Display results in the terminal.')
@click.option('--report-dir', type=click.Path(file_okay=False), help='Directory for one text report per note.')
@click.option('--seed', type=int, envvar='CLINOTE_RANDOM_SEED', help='Seed for generated patient ids.')
def process(input_csv, output_csv, output_json, display, report_dir, seed):
    """Processes a CSV of clinical notes through the full pipeline."""
    logger.log("Starting note processing...")
    try:
        results, flat_df = run_batch(pd.read_csv(input_csv), _make_pipeline(seed))
    except (KeyError, pd.errors.EmptyDataError, InputError, ProcessingError) as e:
        logger.log(f"Error during note processing: {e}")
        sys.exit(1)

    if flat_df.empty:
        logger.log("No notes to process.")
        return

    if output_csv:
        flat_df.to_csv(output_csv, index=False)
        logger.log(f"Saved tabular results to {output_csv}")
    if output_json:
        payload = [{"case": str(case_id), **result.to_dict()} for case_id, result in results]
        Path(output_json).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.log(f"Saved full results to {output_json}")
    if report_dir:
        out_dir = Path(report_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        for _, result in results:
            (out_dir / report_filename(result)).write_text(render_report(result), encoding="utf-8")
        logger.log(f"Saved {len(results)} report(s) to {out_dir}")
    if display:
        cols = ["Case", "Name", "Age", "Gender", "Diagnosis", "Corrections", "Sentiment"]
        print(tabulate(flat_df[cols], headers="keys", tablefmt="psql", showindex=False))

    logger.log(f"Processed {len(results)} note(s).")


@cli.command()
@click.option('--text', required=True, help='Clinical note to clean.')
def clean(text):
    """Applies the spelling and terminology corrections only."""
    cleaned, corrections = clean_text(text)
    click.echo(cleaned)
    if corrections:
        rows = [(c.original, c.corrected, c.category) for c in corrections]
        click.echo(tabulate(rows, headers=["Original", "Corrected", "Category"], tablefmt="psql"))


@cli.command()
@click.option('--text', help='Clinical note to analyze.')
@click.option('--sample', type=click.IntRange(1, len(SAMPLE_NOTES)), help='Use one of the built-in sample notes.')
@click.option('--seed', type=int, envvar='CLINOTE_RANDOM_SEED', help='Seed for the generated patient id.')
@click.option('--report/--json', 'as_report', default=False, help='Print a text report instead of JSON.')
def analyze(text, sample, seed, as_report):
    """Runs the full pipeline on a single note."""
    if sample:
        text = SAMPLE_NOTES[sample - 1]
    try:
        result = _make_pipeline(seed).process(text)
    except (InputError, ProcessingError) as e:
        logger.log(f"Error analyzing note: {e}")
        sys.exit(1)

    if as_report:
        click.echo(render_report(result))
    else:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@cli.command()
@click.option('--host', default="127.0.0.1", help='Interface to bind.')
@click.option('--port', default=8000, type=int, help='Port to listen on.')
@click.option('--reload/--no-reload', default=False, help='Reload on code changes.')
def serve(host, port, reload):
    """Serves the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("webapp.backend.app:app", host=host, port=port, reload=reload)


def main():
    cli()


if __name__ == '__main__':
    main()
