"""Small helpers shared by the record views."""
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from ..permissions import has_role
from ..services.dashboard import invalidate_summary


def int_param(request, name: str):
    raw = request.query_params.get(name)
    if raw in (None, ''):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError({name: 'must be an integer'})


def paginated(request, qs, serialize) -> Response:
    """Return ``{'ok', 'data', 'pagination'}``; without ``pageSize`` everything is returned."""
    page = int_param(request, 'page') or 1
    page_size = int_param(request, 'pageSize') or 0
    total = qs.count()
    if page_size:
        page_size = min(page_size, 200)
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]
    return Response({
        'ok': True,
        'data': [serialize(obj) for obj in qs],
        'pagination': {'total': total, 'page': page, 'pageSize': page_size or total},
    })


def require_roles(user, roles, action: str = 'perform this action') -> None:
    if not has_role(user, roles):
        raise PermissionDenied(f'your role may not {action}')


def deleted() -> Response:
    invalidate_summary()
    return Response(status=status.HTTP_204_NO_CONTENT)


def iso(value):
    return value.isoformat() if value else None
