from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import AdminWrite
from ..serializers.staff import LabStaffSerializer, LabTestCategorySerializer, NurseSerializer
from ..services import staff as staff_service
from ..services.audit import log_action


def _serialize_person(p) -> dict:
    data = {
        'id': p.id,
        'firstName': p.first_name,
        'lastName': p.last_name,
        'fullName': p.full_name,
        'email': p.email,
        'phone': p.phone,
        'department': p.department,
        'status': p.status,
        'isActive': p.is_active,
    }
    if hasattr(p, 'license_number'):
        data['licenseNumber'] = p.license_number
    return data


def _serialize_category(c) -> dict:
    return {'id': c.id, 'name': c.name, 'description': c.description, 'isActive': c.is_active}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AdminWrite])
def nurses(request):
    if request.method == 'GET':
        qs = staff_service.list_nurses(request.query_params.get('department'))
        return Response({'ok': True, 'data': [_serialize_person(n) for n in qs]})
    data = NurseSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    nurse = staff_service.nurses.add(**data.validated_data)
    log_action(user=request.user, action='nurse_create', obj=nurse)
    return Response(_serialize_person(nurse), status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AdminWrite])
def lab_staff(request):
    if request.method == 'GET':
        qs = staff_service.list_lab_staff(request.query_params.get('department'))
        return Response({'ok': True, 'data': [_serialize_person(s) for s in qs]})
    data = LabStaffSerializer(data=request.data)
    data.is_valid(raise_exception=True)
    member = staff_service.lab_staff.add(**data.validated_data)
    log_action(user=request.user, action='lab_staff_create', obj=member)
    return Response(_serialize_person(member), status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, AdminWrite])
def lab_categories(request):
    if request.method == 'GET':
        return Response({'ok': True, 'data': [_serialize_category(c) for c in staff_service.list_lab_categories()]})
    data = LabTestCategorySerializer(data=request.data)
    data.is_valid(raise_exception=True)
    category = staff_service.lab_categories.add(**data.validated_data)
    return Response(_serialize_category(category), status=status.HTTP_201_CREATED)
