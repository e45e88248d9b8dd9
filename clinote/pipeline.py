import math
import random
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, NamedTuple, Optional

from .errors import InputError, ProcessingError
from .utils import logger


# ======================= Result Types =======================
@dataclass(frozen=True)
class CorrectionEntry:
    original: str
    corrected: str
    category: str


@dataclass(frozen=True)
class VitalSigns:
    blood_pressure: str = "Unknown"
    heart_rate: int = 0
    temperature: float = 0.0


@dataclass(frozen=True)
class StructuredFields:
    patient_id: str
    patient_name: str = "Unknown"
    age: int = 0
    gender: str = "Unknown"
    diagnosis: str = "Unknown"
    medications: tuple = ()
    symptoms: tuple = ()
    vital_signs: VitalSigns = field(default_factory=VitalSigns)


@dataclass(frozen=True)
class SentimentResult:
    score: float
    label: str


@dataclass(frozen=True)
class NamedEntity:
    text: str
    category: str


@dataclass(frozen=True)
class PipelineResult:
    original_text: str
    cleaned_text: str
    corrections: tuple
    structured_fields: StructuredFields
    sentiment: SentimentResult
    entities: tuple
    summary: str

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys used on the wire."""
        return _camelize(asdict(self))


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {_to_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_camelize(v) for v in value]
    return value


# ======================= Stage A: Clean =======================
CORRECTION_RULES = (
    ("paitent", "patient", "spelling"),
    ("feaver", "fever", "spelling"),
    ("caugh", "cough", "spelling"),
    ("hi blood presure", "high blood pressure", "terminology"),
    ("diabetis", "diabetes", "spelling"),
    ("hart attack", "heart attack", "spelling"),
)


def clean_text(text: str, rules=CORRECTION_RULES) -> tuple[str, list[CorrectionEntry]]:
    """
    Apply each correction rule as a case-insensitive whole-word substitution.
    One CorrectionEntry is recorded per matched rule, in rule order.
    """
    corrections = []
    cleaned = text
    for original, corrected, category in rules:
        pattern = re.compile(rf"\b{re.escape(original)}\b", re.IGNORECASE)
        if pattern.search(cleaned):
            cleaned = pattern.sub(corrected, cleaned)
            corrections.append(CorrectionEntry(original, corrected, category))
    return cleaned, corrections


# ======================= Stage B: Structured Fields =======================
PAT_PERSON_NAME = re.compile(r"\b([A-Z][a-z]+ [A-Z][a-z]+)\b")
PAT_LIST_SEPARATOR = re.compile(r",\s*")


class FieldMatcher(NamedTuple):
    label: str
    pattern: re.Pattern
    extract: Callable[[re.Match], Any]
    default: Any


def _split_list(match: re.Match) -> tuple:
    items = (item.strip() for item in PAT_LIST_SEPARATOR.split(match.group(1)))
    return tuple(item for item in items if item)


FIELD_MATCHERS = (
    FieldMatcher(
        "age",
        re.compile(r"\b(\d+)[\s-]*(?:year|yr)s?[\s-]*old\b", re.IGNORECASE),
        lambda m: int(m.group(1)),
        0,
    ),
    FieldMatcher(
        "gender",
        re.compile(r"\b(male|female)\b", re.IGNORECASE),
        lambda m: m.group(1).capitalize(),
        "Unknown",
    ),
    FieldMatcher("patient_name", PAT_PERSON_NAME, lambda m: m.group(1), "Unknown"),
    FieldMatcher(
        "diagnosis",
        re.compile(r"\bdiagnos(?:is|ed with)\s+(\w+(?:\s+\w+)*)", re.IGNORECASE),
        lambda m: m.group(1),
        "Unknown",
    ),
    FieldMatcher("medications", re.compile(r"\bmedications?:?\s+([\w\s,]+)", re.IGNORECASE), _split_list, ()),
    FieldMatcher("symptoms", re.compile(r"\bsymptoms?:?\s+([\w\s,]+)", re.IGNORECASE), _split_list, ()),
    FieldMatcher(
        "blood_pressure",
        re.compile(r"\bBP:?\s+(\d+/\d+)\s*mmHg\b", re.IGNORECASE),
        lambda m: m.group(1),
        "Unknown",
    ),
    FieldMatcher(
        "heart_rate",
        re.compile(r"\bheart\s+rate:?\s+(\d+)\s*bpm\b", re.IGNORECASE),
        lambda m: int(m.group(1)),
        0,
    ),
    FieldMatcher(
        "temperature",
        re.compile(r"\btemp(?:erature)?:?\s+(\d+\.?\d*)\s*°?[CF]\b", re.IGNORECASE),
        lambda m: float(m.group(1)),
        0.0,
    ),
)

VITAL_SIGN_FIELDS = {"blood_pressure", "heart_rate", "temperature"}


def generate_patient_id(rng: random.Random) -> str:
    return f"P{rng.randrange(100000)}"


def extract_structured_fields(text: str, rng: random.Random) -> StructuredFields:
    values = {}
    for matcher in FIELD_MATCHERS:
        match = matcher.pattern.search(text)
        values[matcher.label] = matcher.extract(match) if match else matcher.default

    vitals = VitalSigns(**{k: values.pop(k) for k in VITAL_SIGN_FIELDS})
    return StructuredFields(patient_id=generate_patient_id(rng), vital_signs=vitals, **values)


# ======================= Stage C: Sentiment =======================
POSITIVE_WORDS = frozenset({"good", "great", "excellent", "improving", "better", "stable"})
NEGATIVE_WORDS = frozenset({"bad", "poor", "worse", "critical", "unstable", "severe"})
SENTIMENT_THRESHOLD = 0.3


def analyze_sentiment(text: str) -> SentimentResult:
    raw = 0
    for word in re.split(r"\W+", text.lower()):
        if word in POSITIVE_WORDS:
            raw += 1
        elif word in NEGATIVE_WORDS:
            raw -= 1

    score = math.tanh(raw / 5)
    if score > SENTIMENT_THRESHOLD:
        label = "positive"
    elif score < -SENTIMENT_THRESHOLD:
        label = "negative"
    else:
        label = "neutral"
    return SentimentResult(score=score, label=label)


# ======================= Stage D: Named Entities =======================
CONDITION_TRIGGERS = ("diagnosed with", "suffers from", "condition:")
MEDICATION_TRIGGERS = ("prescribed", "taking", "medication:")


def _trigger_captures(text: str, trigger: str) -> list[str]:
    pattern = re.compile(rf"{re.escape(trigger)}\s+(\w+(?:\s+\w+)*)", re.IGNORECASE)
    return [m.group(1) for m in pattern.finditer(text)]


def extract_named_entities(text: str) -> list[NamedEntity]:
    """
    Heuristic entity spotting. Results are neither deduplicated nor
    reconciled with the structured fields.
    """
    entities = [NamedEntity(name, "PERSON") for name in PAT_PERSON_NAME.findall(text)]
    for category, triggers in (("CONDITION", CONDITION_TRIGGERS), ("MEDICATION", MEDICATION_TRIGGERS)):
        for trigger in triggers:
            entities.extend(NamedEntity(phrase, category) for phrase in _trigger_captures(text, trigger))
    return entities


# ======================= Stage E: Summary =======================
SUMMARY_KEYWORDS = ("diagnosed", "symptoms", "medication", "treatment")


def generate_summary(text: str) -> str:
    sentences = [s.strip() for s in re.split(r"[.!?]+", text) if s.strip()]
    important = [s for s in sentences if any(k in s.lower() for k in SUMMARY_KEYWORDS)]
    return ". ".join(important) + "."


# ======================= Pipeline =======================
class TextPipeline:
    """
    Runs clean -> extract -> sentiment -> entities -> summarize over one note.

    The only source of non-determinism is the patient id; pass a seeded
    `random.Random` to make it reproducible.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def process(self, raw_text) -> PipelineResult:
        if not isinstance(raw_text, str) or not raw_text:
            raise InputError("Invalid input text")

        try:
            cleaned, corrections = clean_text(raw_text)
            logger.debug(f"[CLEAN] {len(corrections)} correction(s) applied")
            fields = extract_structured_fields(cleaned, self.rng)
            sentiment = analyze_sentiment(cleaned)
            entities = extract_named_entities(cleaned)
            summary = generate_summary(cleaned)
            logger.debug(
                f"[PIPELINE] patient_id={fields.patient_id} sentiment={sentiment.label} entities={len(entities)}"
            )
        except Exception as exc:
            logger.log(f"Error in pipeline: {exc}")
            raise ProcessingError("Failed to process text") from exc

        return PipelineResult(
            original_text=raw_text,
            cleaned_text=cleaned,
            corrections=tuple(corrections),
            structured_fields=fields,
            sentiment=sentiment,
            entities=tuple(entities),
            summary=summary,
        )


def process_text(raw_text, rng: Optional[random.Random] = None) -> PipelineResult:
    return TextPipeline(rng=rng).process(raw_text)
