import logging
import os
import uuid

from django.conf import settings
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.response import Response
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework import status, permissions

from backend.services.errors import AppError
from backend.services.import_service import ImportTransactionsService
from .serializers import TransactionSerializer
from .transactions import error_response

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def api_root(request):
    """API Root endpoint"""
    return Response({
        'message': 'Transactions API v1.0',
        'endpoints': {
            'transactions': '/transactions/',
            'transaction_detail': '/transactions/{id}/',
            'import': '/transactions/import/',
        }
    })


def store_upload(uploaded) -> str:
    """Write an uploaded file into LEDGER_UPLOAD_DIR and return its path."""
    os.makedirs(settings.LEDGER_UPLOAD_DIR, exist_ok=True)
    name = f"{uuid.uuid4().hex}-{os.path.basename(uploaded.name or 'import.csv')}"
    path = os.path.join(settings.LEDGER_UPLOAD_DIR, name)
    with open(path, 'wb') as fh:
        for chunk in uploaded.chunks():
            fh.write(chunk)
    return path


@api_view(['POST'])
@parser_classes([MultiPartParser, FormParser])
@permission_classes([permissions.AllowAny])
def import_csv(request):
    """
    POST /transactions/import/
    Multipart field "file" holds the CSV; the stored copy is removed after the import.
    """
    csv_file = request.FILES.get("file")

    if not csv_file:
        return Response({"status": "error", "message": "CSV file is required"}, status=status.HTTP_400_BAD_REQUEST)

    path = store_upload(csv_file)
    logger.info("Stored upload %s as %s", csv_file.name, path)

    try:
        transactions = ImportTransactionsService().execute(path)
    except AppError as e:
        logger.warning("Import of %s rejected: %s", csv_file.name, e.message)
        return error_response(e)

    return Response(TransactionSerializer(transactions, many=True).data, status=status.HTTP_200_OK)
