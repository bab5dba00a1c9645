from decimal import Decimal
from django.utils import timezone

from clinic.models import Transaction
from clinic.services.identifiers import (
    INVOICE_PREFIX, TRANSACTION_PREFIX, create_with_identifiers, next_identifier,
)
from clinic.services.repository import Repository

transactions = Repository(Transaction)

NUMBER_FIELDS = {
    'transaction_number': TRANSACTION_PREFIX,
    'invoice_number': INVOICE_PREFIX,
}


def compute_total(amount, discount) -> Decimal:
    return Decimal(amount or 0) - Decimal(discount or 0)


def _with_relations():
    return transactions.get_all().select_related('patient', 'appointment', 'procedure', 'lab_test')


def list_transactions():
    return _with_relations().order_by('-transaction_date', '-id')


def get_transaction(pk) -> Transaction:
    return transactions.get_or_404(pk, _with_relations())


def generate_transaction_number() -> str:
    return next_identifier(Transaction, 'transaction_number', TRANSACTION_PREFIX)


def generate_invoice_number() -> str:
    return next_identifier(Transaction, 'invoice_number', INVOICE_PREFIX)


def create_transaction(**values) -> Transaction:
    values.setdefault('transaction_date', timezone.now())
    values['total_amount'] = compute_total(values.get('amount'), values.get('discount'))
    return create_with_identifiers(Transaction, NUMBER_FIELDS, values)


def update_transaction(txn: Transaction, **values) -> Transaction:
    for field in NUMBER_FIELDS:
        values.pop(field, None)
    values['total_amount'] = compute_total(values.get('amount', txn.amount), values.get('discount', txn.discount))
    return transactions.update(txn, **values)


def delete_transaction(pk) -> bool:
    return transactions.delete(pk)


def transactions_by_patient(patient_id):
    return transactions.find(patient_id=patient_id, is_active=True).order_by('-transaction_date')
