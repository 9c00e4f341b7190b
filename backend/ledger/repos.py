from abc import ABC, abstractmethod
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Iterable, Union
from datetime import datetime
from decimal import Decimal
import uuid

from django.db import transaction as db_transaction
from django.db.models import Q, Sum

from .models import Category, Ledger, Transaction


@dataclass
class Balance:
    income: Decimal
    outcome: Decimal
    total: Decimal

    def as_dict(self) -> Dict[str, Decimal]:
        return {"income": self.income, "outcome": self.outcome, "total": self.total}


@dataclass
class DeleteResult:
    affected: int


def _compute_balance(rows: Iterable[Any]) -> Balance:
    income = Decimal("0.00")
    outcome = Decimal("0.00")
    for r in rows:
        if r.type == Transaction.INCOME:
            income += Decimal(str(r.value))
        elif r.type == Transaction.OUTCOME:
            outcome += Decimal(str(r.value))
    return Balance(income=income, outcome=outcome, total=income - outcome)


# Interfata Repositories

class TransactionsRepoInterface(ABC):
    def atomic(self):
        """Context manager spanning a multi-statement write."""
        return nullcontext()

    def lock_balance(self) -> None:
        """Block other balance-affecting writers until the atomic block ends."""

    @abstractmethod
    def get_balance(self) -> Balance:
        """Sum income and outcome over all transactions."""
        raise NotImplementedError

    @abstractmethod
    def create(self, **fields) -> Any:
        """Build a transaction record without persisting it."""
        raise NotImplementedError

    def create_many(self, rows: Iterable[Dict[str, Any]]) -> List[Any]:
        return [self.create(**r) for r in rows]

    @abstractmethod
    def save(self, records: Union[Any, List[Any]]) -> Union[Any, List[Any]]:
        """Persist one record or a list of records and return them."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, pk) -> Optional[DeleteResult]:
        """Remove the transaction with this pk and report affected rows."""
        raise NotImplementedError

    @abstractmethod
    def get(self, pk) -> Optional[Any]:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> List[Any]:
        raise NotImplementedError


class CategoriesRepoInterface(ABC):
    @abstractmethod
    def find_one(self, title: str) -> Optional[Any]:
        """Return the category with exactly this title or None."""
        raise NotImplementedError

    @abstractmethod
    def find(self, titles: Iterable[str]) -> List[Any]:
        """Return categories whose title is in titles."""
        raise NotImplementedError

    @abstractmethod
    def create(self, **fields) -> Any:
        raise NotImplementedError

    def create_many(self, rows: Iterable[Dict[str, Any]]) -> List[Any]:
        return [self.create(**r) for r in rows]

    @abstractmethod
    def save(self, records: Union[Any, List[Any]]) -> Union[Any, List[Any]]:
        raise NotImplementedError


# Django implementations

class DjangoTransactionsRepo(TransactionsRepoInterface):
    def atomic(self):
        return db_transaction.atomic()

    def lock_balance(self) -> None:
        # must run inside atomic(); no-op lock on SQLite, which serializes writers
        Ledger.objects.select_for_update().get_or_create(pk=1)

    def get_balance(self) -> Balance:
        sums = Transaction.objects.aggregate(
            income=Sum("value", filter=Q(type=Transaction.INCOME)),
            outcome=Sum("value", filter=Q(type=Transaction.OUTCOME)),
        )
        income = sums["income"] or Decimal("0.00")
        outcome = sums["outcome"] or Decimal("0.00")
        return Balance(income=income, outcome=outcome, total=income - outcome)

    def create(self, **fields) -> Transaction:
        return Transaction(**fields)

    def save(self, records):
        if isinstance(records, list):
            if records:
                Transaction.objects.bulk_create(records)
            return records
        records.save()
        return records

    def delete(self, pk) -> Optional[DeleteResult]:
        deleted, _ = Transaction.objects.filter(pk=pk).delete()
        return DeleteResult(affected=deleted)

    def get(self, pk) -> Optional[Transaction]:
        return Transaction.objects.select_related("category").filter(pk=pk).first()

    def list(self) -> List[Transaction]:
        return list(Transaction.objects.select_related("category").all())


class DjangoCategoriesRepo(CategoriesRepoInterface):
    def find_one(self, title: str) -> Optional[Category]:
        return Category.objects.filter(title=title).first()

    def find(self, titles: Iterable[str]) -> List[Category]:
        return list(Category.objects.filter(title__in=set(titles)))

    def create(self, **fields) -> Category:
        return Category(**fields)

    def save(self, records):
        if isinstance(records, list):
            if records:
                Category.objects.bulk_create(records)
            return records
        records.save()
        return records


# In-memory stubs (pentru test)


@dataclass
class _CategoryStub:
    title: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class _TransactionStub:
    title: str
    type: str
    value: Decimal
    category: Optional[_CategoryStub]
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


class InMemoryCategoriesRepo(CategoriesRepoInterface):
    def __init__(self):
        self._store: Dict[uuid.UUID, _CategoryStub] = {}

    def find_one(self, title: str) -> Optional[_CategoryStub]:
        for c in self._store.values():
            if c.title == title:
                return c
        return None

    def find(self, titles: Iterable[str]) -> List[_CategoryStub]:
        wanted = set(titles)
        return [c for c in self._store.values() if c.title in wanted]

    def create(self, **fields) -> _CategoryStub:
        return _CategoryStub(**fields)

    def save(self, records):
        for c in records if isinstance(records, list) else [records]:
            self._store[c.id] = c
        return records

    def list(self) -> List[_CategoryStub]:
        return list(self._store.values())


class InMemoryTransactionsRepo(TransactionsRepoInterface):
    def __init__(self):
        self._store: Dict[uuid.UUID, _TransactionStub] = {}

    def get_balance(self) -> Balance:
        return _compute_balance(self._store.values())

    def create(self, **fields) -> _TransactionStub:
        return _TransactionStub(**fields)

    def save(self, records):
        for tx in records if isinstance(records, list) else [records]:
            self._store[tx.id] = tx
        return records

    def delete(self, pk) -> Optional[DeleteResult]:
        key = pk if isinstance(pk, uuid.UUID) else uuid.UUID(str(pk))
        if self._store.pop(key, None) is None:
            return DeleteResult(affected=0)
        return DeleteResult(affected=1)

    def get(self, pk) -> Optional[_TransactionStub]:
        key = pk if isinstance(pk, uuid.UUID) else uuid.UUID(str(pk))
        return self._store.get(key)

    def list(self) -> List[_TransactionStub]:
        return sorted(self._store.values(), key=lambda t: t.created_at, reverse=True)
