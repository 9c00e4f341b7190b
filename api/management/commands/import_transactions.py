import os

from django.core.management.base import BaseCommand, CommandError

from backend.services.errors import AppError
from backend.services.import_service import ImportTransactionsService


class Command(BaseCommand):
    help = 'Import transactions from a CSV file (title,type,value,category). The file is removed afterwards.'

    def add_arguments(self, parser):
        parser.add_argument('csv_path', help='Path of the CSV file to import')
        parser.add_argument(
            '--keep-file',
            action='store_true',
            help='Do not remove the CSV file after importing it',
        )

    def handle(self, *args, **options):
        if not os.path.isfile(options['csv_path']):
            raise CommandError(f"File not found: {options['csv_path']}")

        try:
            transactions = ImportTransactionsService().execute(
                options['csv_path'],
                remove_source=not options['keep_file'],
            )
        except AppError as e:
            raise CommandError(e.message) from e

        self.stdout.write(self.style.SUCCESS(
            f'Successfully imported {len(transactions)} transactions from {options["csv_path"]}'
        ))
