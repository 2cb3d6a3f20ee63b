import asyncio
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException

from fincat.api.dependencies import get_service, get_taxonomy_store
from fincat.domain.taxonomy import TaxonomyError, dump_taxonomy
from fincat.logger import get_logger
from fincat.manager import CategorizerService
from fincat.services import taxonomy as taxonomy_service
from fincat.storage.taxonomy import TaxonomyStore
from fincat.storage.transactions import StorageError

logger = get_logger(__name__)

router = APIRouter()


@router.get("/taxonomy")
async def get_taxonomy(
    service: Annotated[CategorizerService, Depends(get_service)],
) -> list[dict[str, Any]]:
    return dump_taxonomy(service.get_taxonomy())


@router.put("/taxonomy")
async def update_taxonomy(
    payload: Annotated[Any, Body()],
    service: Annotated[CategorizerService, Depends(get_service)],
    store: Annotated[TaxonomyStore, Depends(get_taxonomy_store)],
) -> list[dict[str, Any]]:
    try:
        taxonomy = await asyncio.to_thread(taxonomy_service.replace_taxonomy, service, store, payload)
    except TaxonomyError as exc:
        logger.warning("[TAXONOMY] Rejected update: %s", exc)
        raise HTTPException(status_code=422, detail={"errors": exc.errors}) from exc
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return dump_taxonomy(taxonomy)


@router.post("/taxonomy/reset")
async def reset_taxonomy(
    service: Annotated[CategorizerService, Depends(get_service)],
    store: Annotated[TaxonomyStore, Depends(get_taxonomy_store)],
) -> list[dict[str, Any]]:
    try:
        taxonomy = await asyncio.to_thread(taxonomy_service.reset_taxonomy, service, store)
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return dump_taxonomy(taxonomy)
