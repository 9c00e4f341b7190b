from rest_framework import serializers
from backend.ledger.models import Category, Transaction


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'title', 'created_at', 'updated_at']


class TransactionSerializer(serializers.ModelSerializer):
    category = CategorySerializer(read_only=True)

    class Meta:
        model = Transaction
        fields = ['id', 'title', 'type', 'value', 'category', 'created_at', 'updated_at']


class TransactionCreateSerializer(serializers.Serializer):
    """Shape of a create request; type and funds rules live in the service."""
    title = serializers.CharField(max_length=255)
    type = serializers.CharField(max_length=10)
    value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    category = serializers.CharField(max_length=255)


class BalanceSerializer(serializers.Serializer):
    income = serializers.DecimalField(max_digits=14, decimal_places=2)
    outcome = serializers.DecimalField(max_digits=14, decimal_places=2)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
