from django.apps import AppConfig

class LedgerConfig(AppConfig):
    default_auto_field = 'django.db.models.AutoField'
    name = 'backend.ledger'
    label = 'ledger'
