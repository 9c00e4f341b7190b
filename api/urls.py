from django.urls import path
from . import views
from .transactions import (
    transactions_list_create,
    delete_transaction,
)

urlpatterns = [
    # API Root
    path('', views.api_root, name='api-root'),

    # Transaction endpoints
    path('transactions/', transactions_list_create, name='transaction-list-create'),
    # before the detail route, which would otherwise capture "import"
    path('transactions/import/', views.import_csv, name='transaction-import'),
    path('transactions/<str:transaction_id>/', delete_transaction, name='transaction-delete'),
]
