import csv
import io
from collections.abc import Sequence

from pydantic import TypeAdapter, ValidationError

from fincat.models import UNCATEGORIZED, Transaction

CSV_HEADERS = ("ID", "Transaction Text", "Category", "Confidence", "Timestamp", "Explanation")

_transactions_adapter = TypeAdapter(list[Transaction])


class ImportFormatError(ValueError):
    pass


def export_json(transactions: Sequence[Transaction]) -> str:
    return _transactions_adapter.dump_json(list(transactions), indent=2).decode("utf-8")


def export_csv(transactions: Sequence[Transaction]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for tx in transactions:
        result = tx.result
        writer.writerow([
            tx.id,
            tx.text,
            result.category if result else UNCATEGORIZED,
            result.confidence if result else 0,
            tx.timestamp.isoformat(),
            result.explanation if result else "",
        ])
    return buffer.getvalue()


def import_json(raw: str | bytes) -> list[Transaction]:
    try:
        return _transactions_adapter.validate_json(raw)
    except ValidationError as exc:
        raise ImportFormatError("Failed to import transactions. Invalid format.") from exc
