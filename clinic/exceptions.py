import logging

from django.db import IntegrityError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class IdentifierConflict(APIException):
    """A record number is already taken by another row."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'record number already issued, retry the request'
    default_code = 'identifier_conflict'


class PatientHasRecords(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'patient still has dependent records'
    default_code = 'patient_has_records'


def api_exception_handler(exc, context):
    if isinstance(exc, ProtectedError):
        return Response({'ok': False, 'error': {'code': 'protected', 'message': 'record is referenced by other records'}},
                        status=status.HTTP_409_CONFLICT)
    if isinstance(exc, IntegrityError):
        logger.warning('integrity error in %s: %s', context.get('view'), exc)
        return Response({'ok': False, 'error': {'code': 'conflict', 'message': str(exc)}}, status=status.HTTP_409_CONFLICT)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled error in %s', context.get('view'), exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
