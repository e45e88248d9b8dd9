"""Unit tests for the clinical-note text pipeline."""

import random

import pytest

from clinote.errors import InputError, ProcessingError
from clinote.pipeline import (
    CORRECTION_RULES,
    TextPipeline,
    analyze_sentiment,
    clean_text,
    extract_named_entities,
    extract_structured_fields,
    generate_summary,
)
from clinote.samples import SAMPLE_NOTES

EXAMPLE_NOTE = "Patient John Doe, a 45-year-old male, presented with hi blood presure."


class TestCleanText:
    @pytest.mark.parametrize("original, corrected, category", CORRECTION_RULES)
    def test_each_rule_applies_once(self, original, corrected, category):
        text = f"Noted {original.upper()} today and {original} again."
        cleaned, corrections = clean_text(text)

        assert corrected in cleaned
        assert original not in cleaned.lower()
        matching = [c for c in corrections if c.original == original]
        assert len(matching) == 1
        assert matching[0].corrected == corrected
        assert matching[0].category == category

    def test_whole_word_only(self):
        cleaned, corrections = clean_text("The caughing stopped.")
        assert cleaned == "The caughing stopped."
        assert corrections == []

    def test_corrections_follow_rule_order(self):
        _, corrections = clean_text("hart attack, feaver and paitent")
        assert [c.original for c in corrections] == ["paitent", "feaver", "hart attack"]

    @pytest.mark.parametrize("note", SAMPLE_NOTES)
    def test_idempotent(self, note):
        cleaned, _ = clean_text(note)
        again, corrections = clean_text(cleaned)
        assert again == cleaned
        assert corrections == []


class TestStructuredFields:
    def test_example_note(self):
        fields = extract_structured_fields(clean_text(EXAMPLE_NOTE)[0], random.Random(1))
        assert fields.age == 45
        assert fields.gender == "Male"

    def test_age_with_yrs_abbreviation(self):
        fields = extract_structured_fields("Seen today, 18 yrs old.", random.Random(1))
        assert fields.age == 18

    def test_vitals_and_lists(self):
        text = (
            "Jane Roe, female. Medications: Lisinopril, Metformin. Symptoms: headache, nausea. "
            "BP: 140/90 mmHg, heart rate: 78 bpm, temperature: 37.2°C."
        )
        fields = extract_structured_fields(text, random.Random(1))
        assert fields.patient_name == "Jane Roe"
        assert fields.gender == "Female"
        assert fields.medications == ("Lisinopril", "Metformin")
        assert fields.symptoms == ("headache", "nausea")
        assert fields.vital_signs.blood_pressure == "140/90"
        assert fields.vital_signs.heart_rate == 78
        assert fields.vital_signs.temperature == pytest.approx(37.2)

    def test_diagnosis(self):
        fields = extract_structured_fields("She was diagnosed with acute bronchitis. Rest advised.", random.Random(1))
        assert fields.diagnosis == "acute bronchitis"

    def test_defaults(self):
        fields = extract_structured_fields("hello world", random.Random(1))
        assert fields.patient_name == "Unknown"
        assert fields.age == 0
        assert fields.gender == "Unknown"
        assert fields.diagnosis == "Unknown"
        assert fields.medications == ()
        assert fields.symptoms == ()
        assert fields.vital_signs.blood_pressure == "Unknown"
        assert fields.vital_signs.heart_rate == 0
        assert fields.vital_signs.temperature == 0.0

    def test_patient_id_format(self):
        fields = extract_structured_fields("hello world", random.Random(7))
        assert fields.patient_id.startswith("P")
        assert 0 <= int(fields.patient_id[1:]) < 100000


class TestSentiment:
    def test_neutral_without_sentiment_words(self):
        result = analyze_sentiment("hello world")
        assert result.score == 0
        assert result.label == "neutral"

    def test_positive(self):
        result = analyze_sentiment("Condition stable, improving, feeling better.")
        assert result.score > 0.3
        assert result.label == "positive"

    def test_negative(self):
        result = analyze_sentiment("Severe pain, critical and unstable.")
        assert result.score < -0.3
        assert result.label == "negative"

    def test_single_word_stays_neutral(self):
        # tanh(1/5) is below the 0.3 threshold
        assert analyze_sentiment("good").label == "neutral"

    def test_bounded(self):
        result = analyze_sentiment(" ".join(["excellent"] * 200))
        assert -1.0 <= result.score <= 1.0


class TestNamedEntities:
    def test_categories(self):
        text = "Sarah Smith was diagnosed with a respiratory infection. She is taking amoxicillin."
        entities = extract_named_entities(text)
        pairs = [(e.text, e.category) for e in entities]
        assert ("Sarah Smith", "PERSON") in pairs
        assert ("a respiratory infection", "CONDITION") in pairs
        assert ("amoxicillin", "MEDICATION") in pairs

    def test_no_deduplication(self):
        entities = extract_named_entities("John Doe met John Doe.")
        assert [e.text for e in entities] == ["John Doe", "John Doe"]

    def test_all_triggers_in_order(self):
        text = (
            "Mary Jones suffers from asthma. Diagnosed with bronchitis. Condition: stable. "
            "Prescribed albuterol. She is taking prednisone. Medication: inhaler."
        )
        pairs = [(e.text, e.category) for e in extract_named_entities(text)]
        assert pairs == [
            ("Mary Jones", "PERSON"),
            ("bronchitis", "CONDITION"),
            ("asthma", "CONDITION"),
            ("stable", "CONDITION"),
            ("albuterol", "MEDICATION"),
            ("prednisone", "MEDICATION"),
            ("inhaler", "MEDICATION"),
        ]

    def test_repeated_trigger_keeps_every_capture(self):
        entities = extract_named_entities("Diagnosed with flu. Later diagnosed with gout.")
        assert [(e.text, e.category) for e in entities] == [("flu", "CONDITION"), ("gout", "CONDITION")]

    def test_empty(self):
        assert extract_named_entities("hello world") == []


class TestSummary:
    def test_keeps_keyword_sentences(self):
        text = "Arrived at noon. Diagnosed with flu! Symptoms include cough? Went home."
        assert generate_summary(text) == "Diagnosed with flu. Symptoms include cough."

    def test_no_keywords(self):
        assert generate_summary("hello world") == "."


class TestTextPipeline:
    def test_example_note(self):
        result = TextPipeline(rng=random.Random(3)).process(EXAMPLE_NOTE)
        assert "high blood pressure" in result.cleaned_text
        assert result.original_text == EXAMPLE_NOTE
        assert result.structured_fields.age == 45
        assert result.structured_fields.gender == "Male"
        assert [c.category for c in result.corrections] == ["terminology"]

    def test_unrecognized_text(self):
        result = TextPipeline().process("hello world")
        assert result.cleaned_text == "hello world"
        assert result.corrections == ()
        assert result.structured_fields.age == 0
        assert result.structured_fields.gender == "Unknown"
        assert result.structured_fields.medications == ()
        assert result.sentiment.label == "neutral"
        assert result.summary == "."

    @pytest.mark.parametrize("bad", ["", None, 42, ["text"]])
    def test_rejects_invalid_input(self, bad):
        with pytest.raises(InputError):
            TextPipeline().process(bad)

    def test_whitespace_only_gets_default_result(self):
        result = TextPipeline().process("   ")
        assert result.cleaned_text == "   "
        assert result.structured_fields.age == 0
        assert result.structured_fields.gender == "Unknown"
        assert result.entities == ()
        assert result.summary == "."

    def test_patient_id_varies(self):
        pipeline = TextPipeline()
        ids = {pipeline.process(EXAMPLE_NOTE).structured_fields.patient_id for _ in range(20)}
        assert len(ids) > 1

    def test_seeded_patient_id_is_reproducible(self):
        first = TextPipeline(rng=random.Random(11)).process(EXAMPLE_NOTE)
        second = TextPipeline(rng=random.Random(11)).process(EXAMPLE_NOTE)
        assert first.structured_fields.patient_id == second.structured_fields.patient_id

    def test_stage_failure_becomes_processing_error(self, monkeypatch):
        def boom(text):
            raise RuntimeError("stage exploded")

        monkeypatch.setattr("clinote.pipeline.generate_summary", boom)
        with pytest.raises(ProcessingError) as excinfo:
            TextPipeline().process(EXAMPLE_NOTE)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_to_dict_uses_camel_case(self):
        data = TextPipeline(rng=random.Random(5)).process(EXAMPLE_NOTE).to_dict()
        assert set(data) == {
            "originalText",
            "cleanedText",
            "corrections",
            "structuredFields",
            "sentiment",
            "entities",
            "summary",
        }
        assert data["structuredFields"]["vitalSigns"] == {
            "bloodPressure": "Unknown",
            "heartRate": 0,
            "temperature": 0.0,
        }
        assert data["corrections"][0] == {
            "original": "hi blood presure",
            "corrected": "high blood pressure",
            "category": "terminology",
        }
