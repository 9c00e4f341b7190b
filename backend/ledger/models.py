import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class Ledger(models.Model):
    """Single row locked while a balance-affecting write is checked and stored."""
    ledgerID = models.AutoField(primary_key=True)
    created_at = models.DateTimeField(auto_now_add=True)


class Category(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # not unique: lookups dedupe by exact title
    title = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['title']

    def __str__(self):
        return self.title


#: id, title, type, value, category
class Transaction(models.Model):
    INCOME = 'income'
    OUTCOME = 'outcome'
    TYPE_CHOICES = [
        (INCOME, 'Income'),
        (OUTCOME, 'Outcome'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name='transactions')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.type}) {self.value}"
