import asyncio
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from fincat.api.dependencies import get_pipeline, get_store
from fincat.domain.transactions import matches_query
from fincat.logger import get_logger
from fincat.models import StorageStats, Transaction, UserFeedback
from fincat.services.categorization import CategorizationPipeline
from fincat.services.export import ImportFormatError, export_csv, export_json, import_json
from fincat.storage.transactions import StorageError, TransactionStore

logger = get_logger(__name__)

router = APIRouter(prefix="/api")


@router.get("/transactions", response_model=list[Transaction])
async def list_transactions(
    store: Annotated[TransactionStore, Depends(get_store)],
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
    q: str | None = None,
    review: bool = False,
) -> list[Transaction]:
    transactions = await asyncio.to_thread(pipeline.review_queue if review else store.get_all)
    if q:
        transactions = [tx for tx in transactions if matches_query(tx, q)]
    return transactions


@router.get("/transactions/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: str,
    store: Annotated[TransactionStore, Depends(get_store)],
) -> Transaction:
    transaction = await asyncio.to_thread(store.get, transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    store: Annotated[TransactionStore, Depends(get_store)],
) -> dict[str, str]:
    if not await asyncio.to_thread(store.delete, transaction_id):
        raise HTTPException(status_code=404, detail="Transaction not found")
    return {"status": "deleted"}


@router.delete("/transactions")
async def delete_all_transactions(
    store: Annotated[TransactionStore, Depends(get_store)],
) -> dict[str, str]:
    await asyncio.to_thread(store.delete_all)
    logger.info("[STORE] All transactions deleted.")
    return {"status": "deleted"}


@router.put("/transactions/{transaction_id}/feedback", response_model=Transaction)
async def submit_feedback(
    transaction_id: str,
    feedback: UserFeedback,
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> Transaction:
    try:
        transaction = await asyncio.to_thread(pipeline.record_feedback, transaction_id, feedback)
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.get("/stats", response_model=StorageStats)
async def get_stats(
    store: Annotated[TransactionStore, Depends(get_store)],
) -> StorageStats:
    return await asyncio.to_thread(store.get_stats)


@router.get("/export")
async def export_transactions(
    store: Annotated[TransactionStore, Depends(get_store)],
    format: Literal["json", "csv"] = "json",
) -> Response:
    transactions = await asyncio.to_thread(store.get_all)
    if format == "csv":
        content, media_type = export_csv(transactions), "text/csv"
    else:
        content, media_type = export_json(transactions), "application/json"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="transactions.{format}"'},
    )


@router.post("/import")
async def import_transactions(
    request: Request,
    store: Annotated[TransactionStore, Depends(get_store)],
) -> dict[str, int | str]:
    raw = await request.body()
    try:
        transactions = import_json(raw)
        await asyncio.to_thread(store.save_all, transactions)
    except ImportFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    logger.info("[STORE] Imported %d transactions.", len(transactions))
    return {"status": "imported", "count": len(transactions)}
