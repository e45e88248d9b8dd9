"""
Service layer that bridges the FastAPI endpoints with the clinote pipeline.
"""

from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict, List, Optional

from clinote.errors import InputError
from clinote.pipeline import PipelineResult, TextPipeline, clean_text
from clinote.report import render_report, report_filename

from .deps import Settings

logger = logging.getLogger(__name__)

# Canned record returned by the lightweight clean-only endpoint.
EXAMPLE_STRUCTURED_FIELDS: Dict[str, Any] = {
    "patientId": "P12345",
    "patientName": "John Doe",
    "age": 45,
    "gender": "Male",
    "diagnosis": "Hypertension",
    "medications": ["Lisinopril", "Amlodipine"],
    "symptoms": ["Headache", "Dizziness", "Shortness of breath"],
    "vitalSigns": {
        "bloodPressure": "140/90 mmHg",
        "heartRate": 78,
        "temperature": 37.2,
    },
}

MOCK_TEXT_ENTITIES: Dict[str, Any] = {
    "patientName": "John Doe",
    "diagnosis": "Common Cold",
    "medications": ["Acetaminophen", "Ibuprofen"],
    "symptoms": ["Fever", "Cough", "Runny Nose"],
}


def _require_text(text: Optional[str]) -> str:
    if not isinstance(text, str) or not text:
        raise InputError("Invalid input text")
    return text


def _build_pipeline(settings: Settings) -> TextPipeline:
    rng = random.Random(settings.random_seed) if settings.random_seed is not None else None
    return TextPipeline(rng=rng)


def load_dataset_sample(path: str, size: int) -> List[Dict[str, Any]]:
    """
    Best-effort read of the reference dataset; a missing or malformed file
    yields an empty sample.
    """
    if not path or size <= 0:
        return []
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        logger.warning("Healthcare dataset not found at %s. Continuing without it.", path)
        return []
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read healthcare dataset %s: %s", path, exc)
        return []

    if not isinstance(data, list):
        logger.warning("Healthcare dataset %s is not a JSON list; ignoring it.", path)
        return []
    records = [item for item in data if isinstance(item, dict)]
    if len(records) != len(data):
        logger.warning("Skipped %d non-object record(s) in healthcare dataset %s.", len(data) - len(records), path)
    return records[:size]


def run_pipeline(text: Optional[str], settings: Settings) -> PipelineResult:
    return _build_pipeline(settings).process(_require_text(text))


def run_process(text: Optional[str], settings: Settings) -> Dict[str, Any]:
    """
    Run the full pipeline for a single clinical note and attach a slice of
    the reference dataset.
    """

    result = run_pipeline(text, settings)
    return {
        "processedData": result.to_dict(),
        "datasetSample": load_dataset_sample(settings.dataset_path, settings.dataset_sample_size),
    }


def run_clean_only(text: Optional[str]) -> Dict[str, Any]:
    note = _require_text(text)
    cleaned, corrections = clean_text(note)
    return {
        "originalText": note,
        "cleanedText": cleaned,
        "corrections": [
            {"original": c.original, "corrected": c.corrected, "category": c.category} for c in corrections
        ],
        "structuredFields": EXAMPLE_STRUCTURED_FIELDS,
    }


def run_process_text(text: Optional[str]) -> Dict[str, Any]:
    note = _require_text(text)
    return {
        "summary": f"Processed summary of: {note[:100]}...",
        "entities": MOCK_TEXT_ENTITIES,
    }


def run_report(text: Optional[str], settings: Settings) -> Dict[str, str]:
    result = run_pipeline(text, settings)
    return {"filename": report_filename(result), "content": render_report(result)}
