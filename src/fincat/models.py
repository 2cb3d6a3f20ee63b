from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

UNCATEGORIZED = "Uncategorized"


class CategoryDefinition(BaseModel):
    name: str
    keywords: list[str]
    patterns: list[str]  # "/body/flags"
    priority: int


class CategorizationResult(BaseModel):
    category: str  # taxonomy name or "Uncategorized"
    confidence: float = Field(gt=0.0, le=1.0)
    explanation: str
    timestamp: datetime = Field(default_factory=datetime.now)


class UserFeedback(BaseModel):
    correct_category: Optional[str] = None
    notes: Optional[str] = None


class Transaction(BaseModel):
    id: str
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)
    result: Optional[CategorizationResult] = None
    user_feedback: Optional[UserFeedback] = None


class StorageStats(BaseModel):
    total_transactions: int = 0
    total_categorized: int = 0
    average_confidence: float = 0.0
    last_updated: datetime = Field(default_factory=datetime.now)
    category_counts: dict[str, int] = Field(default_factory=dict)
