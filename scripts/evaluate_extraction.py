import argparse
import json
import random
from pathlib import Path

import pandas as pd

from clinote.cli import validate_input
from clinote.pipeline import TextPipeline

# expected-JSON key -> getter on StructuredFields
FIELD_GETTERS = {
    "patientName": lambda f: f.patient_name,
    "age": lambda f: f.age,
    "gender": lambda f: f.gender,
    "diagnosis": lambda f: f.diagnosis,
    "medications": lambda f: list(f.medications),
    "symptoms": lambda f: list(f.symptoms),
    "bloodPressure": lambda f: f.vital_signs.blood_pressure,
    "heartRate": lambda f: f.vital_signs.heart_rate,
    "temperature": lambda f: f.vital_signs.temperature,
}


def load_expected(path: Path) -> dict[int, dict]:
    data = json.loads(path.read_text(encoding="utf-8"))
    return {int(k): v for k, v in data.items()}


def analyse_case(patient_id: int, expected: dict, fields) -> dict:
    checks = []
    for key, value in expected.items():
        getter = FIELD_GETTERS.get(key)
        if getter is None:
            continue
        predicted = getter(fields)
        checks.append(
            {
                "field": key,
                "expected": value,
                "predicted": predicted,
                "match": predicted == value,
            }
        )
    matched = sum(1 for c in checks if c["match"])
    return {
        "patient_id": patient_id,
        "checks": checks,
        "accuracy": matched / len(checks) if checks else 0.0,
    }


def render_markdown(report_path: Path, field_df: pd.DataFrame, case_details: list[dict]) -> None:
    lines: list[str] = []
    lines.append("# Structured Field Extraction Evaluation")
    lines.append("")
    lines.append("## Per-field Accuracy")
    lines.append("")
    lines.append(field_df.to_markdown(index=False) if not field_df.empty else "_no fields checked_")
    lines.append("")
    lines.append("## Case Details")
    lines.append("")

    for detail in case_details:
        lines.append(f"### Case {detail['patient_id']}")
        lines.append("")
        lines.append(f"- Accuracy: {detail['accuracy']:.2f}")
        misses = [c for c in detail["checks"] if not c["match"]]
        if misses:
            lines.append("- Mismatches:")
            for c in misses:
                lines.append(f"  - {c['field']}: expected `{c['expected']}`, got `{c['predicted']}`")
        else:
            lines.append("- Mismatches: none")
        lines.append("")

    report_path.write_text("\n".join(lines), encoding="utf-8")


def main():
    parser = argparse.ArgumentParser(description="Evaluate structured field extraction against expected values.")
    parser.add_argument(
        "--notes-csv",
        type=Path,
        default=Path("examples/notes.csv"),
        help="CSV with clinical_note and patient_id columns.",
    )
    parser.add_argument(
        "--expected-json",
        type=Path,
        default=Path("examples/expected.json"),
        help="JSON mapping patient_id to expected structured field values.",
    )
    parser.add_argument(
        "--report-md",
        type=Path,
        default=Path("reports/extraction_eval_report.md"),
        help="Where to write the markdown report.",
    )
    args = parser.parse_args()

    notes_df = validate_input(pd.read_csv(args.notes_csv))
    notes_df["patient_id"] = notes_df["patient_id"].astype(int)
    expected_map = load_expected(args.expected_json)

    pipeline = TextPipeline(rng=random.Random(0))
    case_details = []
    for patient_id, expected in expected_map.items():
        notes = notes_df.loc[notes_df["patient_id"] == patient_id, "clinical_note"]
        if notes.empty:
            print(f"Skipping case {patient_id}: no note found.")
            continue
        result = pipeline.process(notes.iloc[0])
        case_details.append(analyse_case(patient_id, expected, result.structured_fields))

    all_checks = pd.DataFrame([c for d in case_details for c in d["checks"]])
    if all_checks.empty:
        field_df = pd.DataFrame()
        overall = 0.0
    else:
        field_df = all_checks.groupby("field")["match"].agg(["sum", "count"]).reset_index()
        field_df["accuracy"] = (field_df["sum"] / field_df["count"]).round(2)
        field_df = field_df.rename(columns={"sum": "matched", "count": "checked"})
        overall = all_checks["match"].mean()

    args.report_md.parent.mkdir(parents=True, exist_ok=True)
    render_markdown(args.report_md, field_df, case_details)

    print("Overall field accuracy:", f"{overall:.2f}")
    print("Report saved to:", args.report_md)


if __name__ == "__main__":
    main()
