from abc import ABC, abstractmethod

from fincat.models import CategorizationResult


class Classifier(ABC):
    @abstractmethod
    def classify(self, text: str) -> CategorizationResult:
        """Categorize a raw transaction description. Never fails."""
        pass
