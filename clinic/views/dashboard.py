"""
Dashboard endpoints.

The summary (totals, revenue) is cached and rebuilt lazily after writes
drop it; the daily and monthly views are computed on every request.
Counts cover active records only and revenue counts ``Paid`` transactions.
"""
from __future__ import annotations

from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..services import dashboard as dashboard_service
from .common import int_param


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_summary(request):
    refresh = request.query_params.get('refresh') in ('1', 'true')
    return Response({'ok': True, 'data': dashboard_service.cached_summary(refresh=refresh)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_appointments(request):
    raw = request.query_params.get('date')
    day = parse_date(raw) if raw else timezone.localdate()
    if day is None:
        raise ValidationError({'date': 'expected YYYY-MM-DD'})
    return Response({'ok': True, 'date': day.isoformat(), 'data': dashboard_service.daily_appointments(day)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def monthly_statistics(request):
    today = timezone.localdate()
    month = int_param(request, 'month') or today.month
    year = int_param(request, 'year') or today.year
    if not 1 <= month <= 12:
        raise ValidationError({'month': 'must be between 1 and 12'})
    data = dashboard_service.monthly_statistics(month, year)
    data['revenue'] = dashboard_service.monthly_revenue(month, year)
    return Response({'ok': True, 'month': month, 'year': year, 'data': data})
