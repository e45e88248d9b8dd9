"""
Pydantic models for request and response payloads.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, StrictStr
from pydantic.alias_generators import to_camel

from clinote.samples import SAMPLE_NOTES


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TextRequest(BaseModel):
    text: Optional[StrictStr] = Field(None, description="Clinical note content to process.")

    class Config:
        json_schema_extra = {"example": {"text": SAMPLE_NOTES[0]}}


class Correction(CamelModel):
    original: str
    corrected: str
    category: Literal["spelling", "grammar", "formatting", "terminology"]


class VitalSigns(CamelModel):
    blood_pressure: str
    heart_rate: int
    temperature: float


class StructuredFields(CamelModel):
    patient_id: str
    patient_name: str
    age: int = Field(..., ge=0)
    gender: str
    diagnosis: str
    medications: List[str]
    symptoms: List[str]
    vital_signs: VitalSigns


class Sentiment(CamelModel):
    score: float = Field(..., ge=-1.0, le=1.0)
    label: Literal["positive", "neutral", "negative"]


class NamedEntity(CamelModel):
    text: str
    category: str


class PipelineResult(CamelModel):
    original_text: str
    cleaned_text: str
    corrections: List[Correction]
    structured_fields: StructuredFields
    sentiment: Sentiment
    entities: List[NamedEntity]
    summary: str


class ProcessResponse(CamelModel):
    processed_data: PipelineResult
    dataset_sample: List[Dict[str, Any]] = []


class CleanResponse(CamelModel):
    original_text: str
    cleaned_text: str
    corrections: List[Correction]
    structured_fields: StructuredFields


class MockEntities(CamelModel):
    patient_name: str
    diagnosis: str
    medications: List[str]
    symptoms: List[str]


class ProcessTextResponse(CamelModel):
    summary: str
    entities: MockEntities


class SamplesResponse(BaseModel):
    samples: List[str]
