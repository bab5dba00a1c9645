from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import LabTest
from ..permissions import StaffOrAdminWrite
from ..serializers.clinical import LabTestSerializer
from ..services import lab_tests as lab_service
from ..services.audit import log_action
from ..services.dashboard import invalidate_summary
from .common import deleted, int_param, iso, paginated


def _serialize(t: LabTest) -> dict:
    return {
        'id': t.id,
        'testNumber': t.test_number,
        'patientId': t.patient_id,
        'patientName': t.patient.full_name,
        'procedureId': t.procedure_id,
        'categoryId': t.category_id,
        'categoryName': t.category.name,
        'assignedToId': t.assigned_to_id,
        'testName': t.test_name,
        'testDate': iso(t.test_date),
        'sampleCollectionDate': iso(t.sample_collection_date),
        'reportDate': iso(t.report_date),
        'status': t.status,
        'reportFile': t.report_file.url if t.report_file else None,
        'reportText': t.report_text,
        'notes': t.notes,
        'cost': t.cost,
        'invoiceGenerated': t.invoice_generated,
        'isActive': t.is_active,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, StaffOrAdminWrite])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def lab_tests(request):
    if request.method == 'GET':
        patient_id = int_param(request, 'patientId')
        if patient_id:
            qs = lab_service.lab_tests_by_patient(patient_id).select_related('patient')
        else:
            qs = lab_service.list_lab_tests()
        return paginated(request, qs, _serialize)

    data = LabTestSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    with transaction.atomic():
        lab_test = lab_service.create_lab_test(**data.validated_data)
        log_action(user=request.user, action='lab_test_create', obj=lab_test,
                   detail={'testNumber': lab_test.test_number})
    invalidate_summary()
    return Response(_serialize(lab_test), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, StaffOrAdminWrite])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def lab_test_detail(request, pk: int):
    lab_test = lab_service.get_lab_test(pk)
    if request.method == 'GET':
        return Response(_serialize(lab_test))
    if request.method == 'DELETE':
        lab_service.delete_lab_test(pk)
        log_action(user=request.user, action='lab_test_delete', object_type='labtest', object_id=pk)
        return deleted()
    data = LabTestSerializer(data=request.data, partial=True)
    data.is_valid(raise_exception=True)
    lab_test = lab_service.update_lab_test(lab_test, **data.validated_data)
    log_action(user=request.user, action='lab_test_update', obj=lab_test)
    # completed reports count towards the dashboard
    invalidate_summary()
    return Response(_serialize(lab_test))
