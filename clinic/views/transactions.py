"""
Billing views.

Each transaction carries two independent numbers: ``transactionNumber``
(TXN series) and ``invoiceNumber`` (INV series).  ``totalAmount`` is always
``amount - discount`` and cannot be set by the client.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Transaction
from ..permissions import ADMIN_ROLES, FrontDeskWrite
from ..serializers.clinical import TransactionSerializer
from ..services import transactions as txn_service
from ..services.audit import log_action
from ..services.dashboard import invalidate_summary
from .common import deleted, int_param, iso, paginated, require_roles


def _serialize(t: Transaction) -> dict:
    return {
        'id': t.id,
        'transactionNumber': t.transaction_number,
        'invoiceNumber': t.invoice_number,
        'patientId': t.patient_id,
        'patientName': t.patient.full_name,
        'appointmentId': t.appointment_id,
        'procedureId': t.procedure_id,
        'labTestId': t.lab_test_id,
        'transactionType': t.transaction_type,
        'paymentMode': t.payment_mode,
        'amount': t.amount,
        'discount': t.discount,
        'totalAmount': t.total_amount,
        'transactionDate': iso(t.transaction_date),
        'status': t.status,
        'notes': t.notes,
        'paymentConfirmationSent': t.payment_confirmation_sent,
        'isActive': t.is_active,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, FrontDeskWrite])
def transactions(request):
    if request.method == 'GET':
        patient_id = int_param(request, 'patientId')
        if patient_id:
            qs = txn_service.transactions_by_patient(patient_id).select_related('patient')
        else:
            qs = txn_service.list_transactions()
        return paginated(request, qs, _serialize)

    data = TransactionSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    with transaction.atomic():
        txn = txn_service.create_transaction(**data.validated_data)
        log_action(user=request.user, action='transaction_create', obj=txn, detail={
            'transactionNumber': txn.transaction_number,
            'invoiceNumber': txn.invoice_number,
            'totalAmount': str(txn.total_amount),
        })
    invalidate_summary()
    return Response(_serialize(txn), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, FrontDeskWrite])
def transaction_detail(request, pk: int):
    txn = txn_service.get_transaction(pk)
    if request.method == 'GET':
        return Response(_serialize(txn))
    if request.method == 'DELETE':
        require_roles(request.user, ADMIN_ROLES, 'delete transactions')
        txn_service.delete_transaction(pk)
        log_action(user=request.user, action='transaction_delete', object_type='transaction', object_id=pk)
        return deleted()
    data = TransactionSerializer(txn, data=request.data, partial=True)
    data.is_valid(raise_exception=True)
    txn = txn_service.update_transaction(txn, **data.validated_data)
    log_action(user=request.user, action='transaction_update', obj=txn)
    invalidate_summary()
    return Response(_serialize(txn))
