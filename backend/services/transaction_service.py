import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Optional

from backend.ledger.models import Transaction
from backend.ledger.repos import (
    CategoriesRepoInterface,
    DjangoCategoriesRepo,
    DjangoTransactionsRepo,
    TransactionsRepoInterface,
)
from .errors import AppError, InsufficientFundsError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = (Transaction.INCOME, Transaction.OUTCOME)

_VALUE_FIELD = Transaction._meta.get_field("value")
CENT = Decimal(1).scaleb(-_VALUE_FIELD.decimal_places)
MAX_VALUE = Decimal(10) ** (_VALUE_FIELD.max_digits - _VALUE_FIELD.decimal_places)


def normalize_value(raw) -> Decimal:
    """Parse a non-negative amount that fits the value column exactly."""
    try:
        d = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as e:
        raise ValidationError(f"Invalid value: {raw}") from e
    if not d.is_finite() or d < 0:
        raise ValidationError(f"Invalid value: {raw}")
    if d >= MAX_VALUE:
        raise ValidationError(f"Value too large: {raw}")
    # below MAX_VALUE the quantize stays within the decimal context precision
    if d != d.quantize(CENT):
        raise ValidationError(f"Value has more than {_VALUE_FIELD.decimal_places} decimal places: {raw}")
    return d.quantize(CENT)


class CreateTransactionService:
    def __init__(
        self,
        repository: Optional[TransactionsRepoInterface] = None,
        categories: Optional[CategoriesRepoInterface] = None,
    ):
        self.repository = repository or DjangoTransactionsRepo()
        self.categories = categories or DjangoCategoriesRepo()

    def execute(self, title: str, type: str, value, category: str):
        if type not in TRANSACTION_TYPES:
            logger.warning("Rejected transaction with type %r", type)
            raise ValidationError("Invalid type for this transaction.")
        if not title or not str(title).strip():
            raise ValidationError("Transaction title is required.")
        if not category or not str(category).strip():
            raise ValidationError("Transaction category is required.")
        value = normalize_value(value)

        with self.repository.atomic():
            if type == Transaction.OUTCOME:
                self.repository.lock_balance()
                balance = self.repository.get_balance()
                if balance.total - value < 0:
                    logger.warning("Insufficient funds: total=%s value=%s", balance.total, value)
                    raise InsufficientFundsError(
                        "Insufficient funds to perform this transaction", 400
                    )

            transaction_category = self.categories.find_one(category)
            if transaction_category is None:
                transaction_category = self.categories.create(title=category)
                self.categories.save(transaction_category)
                logger.info("Created category %r", category)

            transaction = self.repository.create(
                title=title,
                value=value,
                type=type,
                category=transaction_category,
            )
            self.repository.save(transaction)

        logger.info("Created %s transaction %s", type, transaction.id)
        return transaction


class DeleteTransactionService:
    def __init__(self, repository: Optional[TransactionsRepoInterface] = None):
        self.repository = repository or DjangoTransactionsRepo()

    def execute(self, transaction_id) -> bool:
        try:
            pk = uuid.UUID(str(transaction_id))
        except (ValueError, TypeError, AttributeError):
            raise ValidationError("Transaction ID is invalid", 400)
        # only the hyphenated 8-4-4-4-12 form
        if str(pk) != str(transaction_id).lower():
            raise ValidationError("Transaction ID is invalid", 400)

        deleted = self.repository.delete(pk)

        if deleted is None:
            raise AppError("Transaction can't be deleted", 400)

        if deleted.affected == 0:
            raise NotFoundError("Transaction can't be found", 400)

        logger.info("Deleted transaction %s", pk)
        return True
