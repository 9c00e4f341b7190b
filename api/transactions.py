from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status, permissions

from backend.ledger.repos import DjangoTransactionsRepo
from backend.services.errors import AppError
from backend.services.transaction_service import CreateTransactionService, DeleteTransactionService
from .serializers import BalanceSerializer, TransactionCreateSerializer, TransactionSerializer


def error_response(error: AppError) -> Response:
    return Response({
        'status': 'error',
        'message': error.message
    }, status=error.status_code)


@api_view(['GET', 'POST'])
@permission_classes([permissions.AllowAny])
def transactions_list_create(request):
    """
    GET /transactions/ - List transactions together with the current balance
    POST /transactions/ - Create a transaction
    """
    if request.method == 'GET':
        repo = DjangoTransactionsRepo()
        return Response({
            'transactions': TransactionSerializer(repo.list(), many=True).data,
            'balance': BalanceSerializer(repo.get_balance().as_dict()).data,
        })

    serializer = TransactionCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        transaction = CreateTransactionService().execute(**serializer.validated_data)
    except AppError as e:
        return error_response(e)

    return Response(TransactionSerializer(transaction).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([permissions.AllowAny])
def delete_transaction(request, transaction_id):
    """
    DELETE /transactions/{id}/
    """
    try:
        DeleteTransactionService().execute(transaction_id)
    except AppError as e:
        return error_response(e)

    return Response(status=status.HTTP_204_NO_CONTENT)
