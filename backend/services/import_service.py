import csv
import logging
import os
from typing import Optional, List, Dict, Any

from backend.ledger.repos import (
    CategoriesRepoInterface,
    DjangoCategoriesRepo,
    DjangoTransactionsRepo,
    TransactionsRepoInterface,
)
from .errors import DataFormatError, ValidationError
from .transaction_service import TRANSACTION_TYPES, normalize_value

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("title", "type", "value", "category")


def _parse_row(cells: List[str]) -> Optional[Dict[str, str]]:
    values = [c.strip() for c in cells[:len(CSV_COLUMNS)]]
    if len(values) < len(CSV_COLUMNS) or not all(values):
        return None
    return dict(zip(CSV_COLUMNS, values))


class ImportTransactionsService:
    def __init__(
        self,
        repository: Optional[TransactionsRepoInterface] = None,
        categories: Optional[CategoriesRepoInterface] = None,
    ):
        self.repository = repository or DjangoTransactionsRepo()
        self.categories = categories or DjangoCategoriesRepo()

    def read_rows(self, csv_file_path: str) -> List[Dict[str, Any]]:
        """
        Stream the CSV row by row, skipping the header line.
        Rows with an empty cell are dropped; the value is normalized to Decimal.
        """
        rows = []
        try:
            with open(csv_file_path, newline="", encoding="utf-8-sig") as fh:
                reader = csv.reader(fh, delimiter=",")
                next(reader, None)
                for cells in reader:
                    row = _parse_row(cells)
                    if row is None:
                        logger.debug("Skipping incomplete row %d: %s", reader.line_num, cells)
                        continue
                    if row["type"] not in TRANSACTION_TYPES:
                        raise DataFormatError(
                            f"Wrong file format: invalid type {row['type']!r} on line {reader.line_num}"
                        )
                    try:
                        row["value"] = normalize_value(row["value"])
                    except ValidationError as e:
                        raise DataFormatError(
                            f"Wrong file format: {e.message} on line {reader.line_num}"
                        ) from e
                    rows.append(row)
        except (UnicodeDecodeError, csv.Error) as e:
            raise DataFormatError(f"Wrong file format: {e}") from e
        return rows

    def execute(self, csv_file_path: str, remove_source: bool = True):
        try:
            rows = self.read_rows(csv_file_path)
            titles = [r["category"] for r in rows]

            with self.repository.atomic():
                existing = self.categories.find(titles)
                existing_titles = {c.title for c in existing}

                # distinct, in first-seen order
                new_titles = list(dict.fromkeys(t for t in titles if t not in existing_titles))
                new_categories = self.categories.create_many({"title": t} for t in new_titles)
                self.categories.save(new_categories)

                pool = {c.title: c for c in existing}
                pool.update({c.title: c for c in new_categories})

                records = []
                for r in rows:
                    category = pool.get(r["category"])
                    if category is None:
                        raise DataFormatError(f"Category {r['category']!r} could not be resolved")
                    records.append({
                        "title": r["title"],
                        "type": r["type"],
                        "value": r["value"],
                        "category": category,
                    })

                transactions = self.repository.create_many(records)
                self.repository.save(transactions)
        finally:
            if remove_source and os.path.exists(csv_file_path):
                os.remove(csv_file_path)

        logger.info(
            "Imported %d transactions (%d new categories) from %s",
            len(transactions), len(new_categories), csv_file_path,
        )
        return transactions
