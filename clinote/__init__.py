"""
Mock clinical-note NLP pipeline.

`clinote.pipeline.TextPipeline` turns a free-text note into corrections,
structured patient fields, sentiment, named entities and a summary.
"""
