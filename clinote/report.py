from .pipeline import PipelineResult


def _bullets(items) -> str:
    return "\n".join(f"- {item}" for item in items)


def report_filename(result: PipelineResult) -> str:
    return f"nlp_healthcare_report_{result.structured_fields.patient_id}.txt"


def render_report(result: PipelineResult) -> str:
    """
    Render a processed note as the plain-text report offered for download
    by the dashboard.
    """
    fields = result.structured_fields
    vitals = fields.vital_signs

    corrections = _bullets(f"{c.original} → {c.corrected} ({c.category})" for c in result.corrections)
    entities = _bullets(f"{e.text} ({e.category})" for e in result.entities)

    sections = [
        "NLP-Processed Healthcare Report",
        "\n".join(
            [
                "Patient Information:",
                f"Patient ID: {fields.patient_id}",
                f"Name: {fields.patient_name}",
                f"Age: {fields.age}",
                f"Gender: {fields.gender}",
            ]
        ),
        f"Diagnosis: {fields.diagnosis}",
        f"Medications:\n{_bullets(fields.medications)}",
        f"Symptoms:\n{_bullets(fields.symptoms)}",
        "\n".join(
            [
                "Vital Signs:",
                f"- Blood Pressure: {vitals.blood_pressure}",
                f"- Heart Rate: {vitals.heart_rate} bpm",
                f"- Temperature: {vitals.temperature:g}°C",
            ]
        ),
        f"Cleaned Medical Notes:\n{result.cleaned_text}",
        f"Corrections Made:\n{corrections}",
        "\n".join(
            [
                "Sentiment Analysis:",
                f"Score: {result.sentiment.score}",
                f"Label: {result.sentiment.label}",
            ]
        ),
        f"Named Entities:\n{entities}",
        f"Summarization:\n{result.summary}",
    ]
    return "\n\n".join(sections).strip()
