from pydantic import BaseModel

from fincat.models import Transaction


class CategorizeRequest(BaseModel):
    text: str
    save: bool = True


class BatchRequest(BaseModel):
    texts: list[str] | None = None
    content: str | None = None  # raw upload: JSON array or one transaction per line
    save: bool = True


class BatchSummary(BaseModel):
    total: int
    high_confidence: int
    needs_review: int


class BatchResponse(BaseModel):
    transactions: list[Transaction]
    summary: BatchSummary
