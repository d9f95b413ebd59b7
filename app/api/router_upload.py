"""
Upload endpoint: decode a CSV/ZIP export and replace the loaded dataset.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from app.api.dependencies import get_store_or_empty
from app.api.response_models import UploadResponse
from app.data.errors import IngestionBusyError, IngestionError
from app.data.store import AnalyticsStore

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload", response_model=UploadResponse)
async def upload_export(
    file: UploadFile = File(...),
    store: AnalyticsStore = Depends(get_store_or_empty),
):
    """Upload one attendance export (.csv, or .zip containing it)."""
    if not file.filename:
        raise HTTPException(400, "Missing filename")

    content = await file.read()
    try:
        # Parsing and aggregation are CPU-bound; run them off the event loop
        result = await run_in_threadpool(store.ingest, content, file.filename)
    except IngestionBusyError as exc:
        raise HTTPException(409, str(exc))
    except IngestionError as exc:
        raise HTTPException(400, f"Failed to process file: {exc}")

    return UploadResponse(
        status="processed",
        file=file.filename,
        processed=result.processed,
        skipped=result.skipped,
        groups=len(result.aggregated),
        message=result.message,
    )
