"""
FastAPI application exposing the clinote pipeline over HTTP.
"""

from __future__ import annotations

import logging
from typing import Callable

from anyio import to_thread
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinote.samples import SAMPLE_NOTES

from .deps import Settings, get_settings
from .schemas import (
    CleanResponse,
    ProcessResponse,
    ProcessTextResponse,
    SamplesResponse,
    TextRequest,
)
from .services import run_clean_only, run_process, run_process_text, run_report

logger = logging.getLogger(__name__)

INVALID_INPUT = "Invalid input text"

app = FastAPI(
    title="Clinical Note NLP API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow local frontend development by default.
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": INVALID_INPUT})


async def _run(func: Callable, *args):
    try:
        return await to_thread.run_sync(func, *args)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to process clinical note")
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@app.get("/health")
async def health_check() -> dict:
    settings: Settings = get_settings()
    return {
        "status": "ok",
        "dataset_path": settings.dataset_path,
        "dataset_sample_size": settings.dataset_sample_size,
        "seeded": settings.random_seed is not None,
    }


@app.get("/api/samples", response_model=SamplesResponse)
async def samples() -> SamplesResponse:
    return SamplesResponse(samples=list(SAMPLE_NOTES))


@app.post("/api/process-healthcare-data", response_model=ProcessResponse)
async def process_healthcare_data(request: TextRequest) -> ProcessResponse:
    result = await _run(run_process, request.text, get_settings())
    return ProcessResponse(**result)


@app.post("/api/clean-healthcare-data", response_model=CleanResponse)
async def clean_healthcare_data(request: TextRequest) -> CleanResponse:
    result = await _run(run_clean_only, request.text)
    return CleanResponse(**result)


@app.post("/api/process-text", response_model=ProcessTextResponse)
async def process_text(request: TextRequest) -> ProcessTextResponse:
    result = await _run(run_process_text, request.text)
    return ProcessTextResponse(**result)


@app.post("/api/report", response_class=PlainTextResponse)
async def report(request: TextRequest) -> PlainTextResponse:
    result = await _run(run_report, request.text, get_settings())
    return PlainTextResponse(
        result["content"],
        headers={"Content-Disposition": f'attachment; filename="{result["filename"]}"'},
    )
