from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fincat.api.routes import categorize, health, taxonomy, transactions
from fincat.core import settings
from fincat.logger import get_logger, setup_logging
from fincat.manager import CategorizerService
from fincat.services.categorization import CategorizationPipeline
from fincat.services.taxonomy import resolve_startup_taxonomy
from fincat.storage.taxonomy import TaxonomyStore
from fincat.storage.transactions import TransactionStore

logger = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        data_dir = settings.get_data_dir()
        settings.ensure_dir(data_dir)

        taxonomy_store = TaxonomyStore(data_dir=data_dir)
        initial_taxonomy = resolve_startup_taxonomy(taxonomy_store, settings.get_taxonomy_path())
        service = CategorizerService(taxonomy=initial_taxonomy)
        store = TransactionStore(data_dir=data_dir)
        pipeline = CategorizationPipeline(
            service=service,
            store=store,
            review_threshold=settings.get_review_threshold(),
            batch_limit=settings.get_batch_limit(),
        )

        app.state.service = service
        app.state.store = store
        app.state.taxonomy_store = taxonomy_store
        app.state.pipeline = pipeline

        logger.info("Services initialized with %d categories.", len(service.get_taxonomy()))
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="FinCat", lifespan=lifespan)

    app.include_router(categorize.router)
    app.include_router(taxonomy.router)
    app.include_router(transactions.router)
    app.include_router(health.router)

    return app


app = create_app()
