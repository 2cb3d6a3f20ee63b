import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from fincat.api.dependencies import get_pipeline
from fincat.api.schemas import BatchRequest, BatchResponse, BatchSummary, CategorizeRequest
from fincat.logger import get_logger
from fincat.models import Transaction
from fincat.services.categorization import (
    BatchInputError,
    BatchLimitError,
    CategorizationPipeline,
    parse_batch_input,
)
from fincat.storage.transactions import StorageError

logger = get_logger(__name__)

router = APIRouter()


@router.post("/categorize", response_model=Transaction)
async def categorize_transaction(
    req: CategorizeRequest,
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> Transaction:
    try:
        return await asyncio.to_thread(pipeline.categorize_text, req.text, persist=req.save)
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/categorize/batch", response_model=BatchResponse)
async def categorize_batch(
    req: BatchRequest,
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> BatchResponse:
    try:
        texts = list(req.texts or [])
        if req.content:
            texts.extend(parse_batch_input(req.content))
        transactions = await asyncio.to_thread(pipeline.categorize_batch, texts, persist=req.save)
    except BatchLimitError as exc:
        logger.warning("[BATCH] Rejected: %s", exc)
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except BatchInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    flagged = sum(1 for tx in transactions if pipeline.needs_review(tx))
    return BatchResponse(
        transactions=transactions,
        summary=BatchSummary(
            total=len(transactions),
            high_confidence=len(transactions) - flagged,
            needs_review=flagged,
        ),
    )
