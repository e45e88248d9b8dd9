"""
Backend package for the clinical-note dashboard.

This package exposes a FastAPI application that reuses the `clinote`
pipeline to provide HTTP endpoints for the dashboard frontend.
"""
