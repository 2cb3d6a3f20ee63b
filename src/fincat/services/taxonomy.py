from collections.abc import Iterable
from typing import Any

from fincat.domain.taxonomy import Category, TaxonomyError, build_taxonomy, dump_taxonomy
from fincat.logger import get_logger
from fincat.manager import CategorizerService
from fincat.storage.taxonomy import TaxonomyStore

logger = get_logger(__name__)


def resolve_startup_taxonomy(
    store: TaxonomyStore,
    override_path: str | None = None,
) -> tuple[Category, ...] | None:
    """
    Pick the taxonomy to start with: the override file, then the stored
    document. Invalid documents are logged and skipped. ``None`` means use
    the default taxonomy.
    """
    sources: list[TaxonomyStore] = []
    if override_path:
        sources.append(TaxonomyStore(data_path=override_path))
    sources.append(store)

    for source in sources:
        document = source.load()
        if document is None:
            continue
        try:
            taxonomy = build_taxonomy(document)
        except TaxonomyError as exc:
            logger.warning("[TAXONOMY] Skipping invalid taxonomy in %s: %s", source.data_path, exc)
            continue
        logger.info("[TAXONOMY] Loaded %d categories from %s.", len(taxonomy), source.data_path)
        return taxonomy

    logger.info("[TAXONOMY] Using default taxonomy.")
    return None


def replace_taxonomy(
    service: CategorizerService,
    store: TaxonomyStore,
    entries: Iterable[Any],
) -> tuple[Category, ...]:
    """
    Validate, persist, then activate.

    The active taxonomy only changes once the document is written, so a
    TaxonomyError or StorageError leaves it as it was.
    """
    taxonomy = build_taxonomy(entries)
    store.save(dump_taxonomy(taxonomy))
    return service.activate_taxonomy(taxonomy)


def reset_taxonomy(service: CategorizerService, store: TaxonomyStore) -> tuple[Category, ...]:
    store.clear()
    return service.reset_taxonomy()
