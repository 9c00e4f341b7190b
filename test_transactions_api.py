"""
Integration tests for the transaction endpoints and the import command.
"""

import os
import shutil
import tempfile
import uuid
from io import StringIO

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from backend.ledger.models import Category, Transaction


class TransactionEndpointsTest(TestCase):
    """Create, list and delete through the HTTP API"""

    def setUp(self):
        self.client = APIClient()

    def _create(self, **data):
        return self.client.post('/transactions/', data, format='json')

    def test_create_transaction_success(self):
        response = self._create(title='Salary', type='income', value=5000, category='Work')

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['title'], 'Salary')
        self.assertEqual(data['type'], 'income')
        self.assertEqual(data['value'], 5000.0)
        self.assertEqual(data['category']['title'], 'Work')

    def test_create_invalid_type(self):
        response = self._create(title='Salary', type='bonus', value=10, category='Work')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {
            'status': 'error',
            'message': 'Invalid type for this transaction.'
        })

    def test_create_insufficient_funds(self):
        response = self._create(title='Rent', type='outcome', value=10, category='Housing')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['status'], 'error')
        self.assertEqual(Transaction.objects.count(), 0)

    def test_create_missing_fields(self):
        response = self._create(title='Salary', type='income')

        self.assertEqual(response.status_code, 400)
        self.assertIn('value', response.json())
        self.assertIn('category', response.json())

    def test_list_includes_balance(self):
        self._create(title='Salary', type='income', value=5000, category='Work')
        self._create(title='Rent', type='outcome', value=1200, category='Housing')

        response = self.client.get('/transactions/')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(len(data['transactions']), 2)
        self.assertEqual(data['balance'], {'income': 5000.0, 'outcome': 1200.0, 'total': 3800.0})

    def test_delete_transaction(self):
        created = self._create(title='Salary', type='income', value=5000, category='Work').json()

        response = self.client.delete(f"/transactions/{created['id']}/")

        self.assertEqual(response.status_code, 204)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_delete_invalid_id(self):
        response = self.client.delete('/transactions/123/')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Transaction ID is invalid')

    def test_delete_unknown_id(self):
        response = self.client.delete(f'/transactions/{uuid.uuid4()}/')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], "Transaction can't be found")


class ImportEndpointTest(TestCase):
    """CSV upload through POST /transactions/import/"""

    def setUp(self):
        self.client = APIClient()
        self.upload_dir = tempfile.mkdtemp()
        self.override = override_settings(LEDGER_UPLOAD_DIR=self.upload_dir)
        self.override.enable()

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.upload_dir, ignore_errors=True)

    def test_import_csv(self):
        upload = SimpleUploadedFile(
            'transactions.csv',
            b'title,type,value,category\nSalary,income,5000,Work\nRent,outcome,1200,Housing\n',
            content_type='text/csv',
        )

        response = self.client.post('/transactions/import/', {'file': upload}, format='multipart')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 2)
        self.assertEqual(Category.objects.count(), 2)
        self.assertEqual(os.listdir(self.upload_dir), [])

    def test_import_binary(self):
        upload = SimpleUploadedFile('picture.png', b'\x89PNG\r\n\x1a\n\xff\xfe', content_type='image/png')

        response = self.client.post('/transactions/import/', {'file': upload}, format='multipart')

        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()['message'].startswith('Wrong file format'))
        self.assertEqual(Transaction.objects.count(), 0)
        self.assertEqual(os.listdir(self.upload_dir), [])

    def test_import_without_file(self):
        response = self.client.post('/transactions/import/', {}, format='multipart')

        self.assertEqual(response.status_code, 400)


class ImportCommandTest(TestCase):
    def setUp(self):
        fd, self.path = tempfile.mkstemp(suffix='.csv')
        with os.fdopen(fd, 'w') as fh:
            fh.write('title,type,value,category\nSalary,income,5000,Work\n')

    def tearDown(self):
        if os.path.exists(self.path):
            os.remove(self.path)

    def test_import_command_keeps_file_on_request(self):
        out = StringIO()
        call_command('import_transactions', self.path, '--keep-file', stdout=out)

        self.assertIn('Successfully imported 1 transactions', out.getvalue())
        self.assertTrue(os.path.exists(self.path))
        self.assertEqual(Transaction.objects.count(), 1)

    def test_import_command_removes_file(self):
        call_command('import_transactions', self.path, stdout=StringIO())

        self.assertFalse(os.path.exists(self.path))

    def test_import_command_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('import_transactions', self.path + '.missing', stdout=StringIO())
