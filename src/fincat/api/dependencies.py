from fastapi import HTTPException, Request

from fincat.manager import CategorizerService
from fincat.services.categorization import CategorizationPipeline
from fincat.storage.taxonomy import TaxonomyStore
from fincat.storage.transactions import TransactionStore


def get_service(request: Request) -> CategorizerService:
    service = getattr(request.app.state, "service", None)
    if not service:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return service


def get_store(request: Request) -> TransactionStore:
    store = getattr(request.app.state, "store", None)
    if not store:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return store


def get_taxonomy_store(request: Request) -> TaxonomyStore:
    store = getattr(request.app.state, "taxonomy_store", None)
    if not store:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return store


def get_pipeline(request: Request) -> CategorizationPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if not pipeline:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return pipeline
