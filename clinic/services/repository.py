"""
Uniform create/read/update/delete access shared by every record type.

The per-entity services build on :class:`Repository` for plain persistence
and add their own eager loading, ordering and numbering on top.
"""
from __future__ import annotations

from typing import Generic, Optional, Type, TypeVar

from django.db import models
from django.utils import timezone
from rest_framework.exceptions import NotFound

T = TypeVar('T', bound=models.Model)


class Repository(Generic[T]):
    def __init__(self, model: Type[T]):
        self.model = model

    @property
    def label(self) -> str:
        return self.model._meta.verbose_name

    def get_all(self) -> models.QuerySet:
        return self.model._default_manager.all()

    def get_by_id(self, pk) -> Optional[T]:
        return self.get_all().filter(pk=pk).first()

    def get_or_404(self, pk, queryset: Optional[models.QuerySet] = None) -> T:
        qs = queryset if queryset is not None else self.get_all()
        obj = qs.filter(pk=pk).first()
        if obj is None:
            raise NotFound(f'{self.label} not found')
        return obj

    def find(self, **filters) -> models.QuerySet:
        return self.get_all().filter(**filters)

    def first_or_default(self, **filters) -> Optional[T]:
        return self.find(**filters).first()

    def add(self, **values) -> T:
        return self.model._default_manager.create(**values)

    def update(self, obj: T, **values) -> T:
        for field, value in values.items():
            setattr(obj, field, value)
        if hasattr(obj, 'updated_at'):
            obj.updated_at = timezone.now()
        obj.save()
        return obj

    def delete(self, pk) -> bool:
        obj = self.get_by_id(pk)
        if obj is None:
            return False
        obj.delete()
        return True

    def deactivate(self, pk) -> bool:
        updated = self.find(pk=pk).update(is_active=False, updated_at=timezone.now())
        return bool(updated)
