import json
import os
from typing import Any

from fincat.logger import get_logger
from fincat.storage.transactions import StorageError

logger = get_logger(__name__)

TAXONOMY_FILENAME = "taxonomy.json"


class TaxonomyStore:
    """Keeps the user-edited taxonomy document. Validation is left to the caller."""

    def __init__(self, data_dir: str = ".", data_path: str | None = None):
        self.data_path = data_path or os.path.join(data_dir, TAXONOMY_FILENAME)

    def load(self) -> list[Any] | None:
        if not os.path.exists(self.data_path):
            return None
        try:
            with open(self.data_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable taxonomy document {self.data_path}: {e}")
            return None
        if not isinstance(data, list):
            logger.warning(f"Ignoring taxonomy document {self.data_path}: expected a list.")
            return None
        return data

    def save(self, definitions: list[dict[str, Any]]) -> None:
        try:
            with open(self.data_path, "w", encoding="utf-8") as f:
                json.dump(definitions, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving taxonomy to {self.data_path}: {e}")
            raise StorageError("Failed to save taxonomy.") from e

    def clear(self) -> None:
        try:
            if os.path.exists(self.data_path):
                os.remove(self.data_path)
        except OSError as e:
            logger.error(f"Error removing taxonomy {self.data_path}: {e}")
            raise StorageError("Failed to reset taxonomy.") from e
