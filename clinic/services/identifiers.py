"""
Sequential, year scoped record numbers.

Medical record, appointment, procedure, lab test, transaction and invoice
numbers all share one shape, ``<PREFIX><YEAR>-<SEQ>`` with ``SEQ`` zero
padded to six digits, e.g. ``MR2024-000001``.  The next number is derived
from the latest number already stored for the current year, so a new year
starts again at ``000001``.

Generation is a plain read followed by a write with no lock in between.
Two requests racing on the same prefix can compute the same number; the
unique constraint on every number column rejects the second insert and
:func:`create_with_identifiers` regenerates and retries.  A clash that
cannot be resolved (an explicitly supplied number, or retries exhausted)
surfaces as :class:`~clinic.exceptions.IdentifierConflict`, never as an
overwrite.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from clinic.exceptions import IdentifierConflict

logger = logging.getLogger(__name__)

PATIENT_PREFIX = 'MR'
APPOINTMENT_PREFIX = 'APT'
PROCEDURE_PREFIX = 'PROC'
LAB_TEST_PREFIX = 'LAB'
TRANSACTION_PREFIX = 'TXN'
INVOICE_PREFIX = 'INV'

SEPARATOR = '-'
SEQUENCE_WIDTH = 6

# lookup(starts_with) -> latest issued number with that prefix, or None
Lookup = Callable[[str], Optional[str]]


def render(prefix: str, year: int, sequence: int) -> str:
    """Format a number; sequences wider than six digits are left unpadded."""
    return f"{prefix}{year}{SEPARATOR}{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(value: Optional[str]) -> Optional[int]:
    """Return the numeric suffix after the last separator, or ``None``."""
    if not value:
        return None
    _, sep, tail = value.rpartition(SEPARATOR)
    if not sep or not tail.isascii() or not tail.isdigit():
        return None
    return int(tail)


@dataclass(frozen=True)
class Identifier:
    prefix: str
    year: int
    sequence: int

    @property
    def rendered(self) -> str:
        return render(self.prefix, self.year, self.sequence)

    def __str__(self) -> str:
        return self.rendered

    def next(self) -> 'Identifier':
        return Identifier(self.prefix, self.year, self.sequence + 1)

    @classmethod
    def parse(cls, value: Optional[str], prefix: str) -> Optional['Identifier']:
        """Split ``value`` into its parts; ``None`` when it is not a well formed number for ``prefix``."""
        if not value or not value.startswith(prefix):
            return None
        head, sep, _ = value.rpartition(SEPARATOR)
        year = head[len(prefix):]
        if not sep or len(year) != 4 or not year.isdigit():
            return None
        sequence = parse_sequence(value)
        if not sequence:
            return None
        return cls(prefix, int(year), sequence)


def generate(prefix: str, current_year: int, lookup: Lookup) -> str:
    """Compute the next number for ``(prefix, current_year)``.

    A missing or malformed latest number is treated as "nothing issued yet"
    and the sequence starts at 1.
    """
    latest = Identifier.parse(lookup(f"{prefix}{current_year}"), prefix)
    if latest is None or latest.year != current_year:
        latest = Identifier(prefix, current_year, 0)
    return latest.next().rendered


def queryset_lookup(queryset, field: str) -> Lookup:
    """Build a lookup over ``queryset`` ordered by ``field`` descending.

    The queryset should include deactivated rows so that their numbers are
    never handed out again.
    """
    def lookup(starts_with: str) -> Optional[str]:
        return (
            queryset.filter(**{f'{field}__startswith': starts_with})
            .order_by(f'-{field}')
            .values_list(field, flat=True)
            .first()
        )
    return lookup


def current_year() -> int:
    return timezone.localdate().year


def next_identifier(model, field: str, prefix: str, year: Optional[int] = None) -> str:
    return generate(prefix, year or current_year(), queryset_lookup(model._base_manager.all(), field))


def _clashing_fields(model, data: dict, fields, exc: IntegrityError) -> list[str]:
    clashing = [f for f in fields if data.get(f) and model._base_manager.filter(**{f: data[f]}).exists()]
    if clashing:
        return clashing
    # The competing row may not be visible to us yet; fall back to the driver message.
    message = str(exc).lower()
    return [f for f in fields if f in message]


def save_with_identifiers(obj, identifier_fields: Dict[str, str],
                          attempts: Optional[int] = None, year: Optional[int] = None):
    """Insert the unsaved ``obj``, issuing every blank number in ``identifier_fields``.

    ``identifier_fields`` maps a number column to its prefix, e.g.
    ``{'mr_number': 'MR'}``.  Numbers already set on ``obj`` are kept as is.
    """
    model = type(obj)
    attempts = attempts or getattr(settings, 'IDENTIFIER_MAX_ATTEMPTS', 3)
    generated = [f for f in identifier_fields if not getattr(obj, f)]
    for attempt in range(1, attempts + 1):
        for field in generated:
            setattr(obj, field, next_identifier(model, field, identifier_fields[field], year=year))
        data = {f: getattr(obj, f) for f in identifier_fields}
        try:
            with transaction.atomic():
                obj.save(force_insert=True)
        except IntegrityError as exc:
            clashing = _clashing_fields(model, data, identifier_fields, exc)
            if not clashing:
                raise
            numbers = {f: data[f] for f in clashing}
            if any(f not in generated for f in clashing):
                logger.info('%s: supplied number already in use %s', model.__name__, numbers)
                raise IdentifierConflict(f"number already in use: {', '.join(numbers.values())}") from exc
            if attempt == attempts:
                logger.error('%s: gave up issuing a number after %d attempts, last tried %s',
                             model.__name__, attempts, numbers)
                raise IdentifierConflict() from exc
            logger.warning('%s: number collision on %s (attempt %d/%d), retrying',
                           model.__name__, numbers, attempt, attempts)
            continue
        if generated:
            logger.debug('%s #%s issued %s', model.__name__, obj.pk, {f: data[f] for f in generated})
        return obj


def create_with_identifiers(model, identifier_fields: Dict[str, str], values: dict,
                            attempts: Optional[int] = None, year: Optional[int] = None):
    """Create a ``model`` row from ``values`` through :func:`save_with_identifiers`."""
    return save_with_identifiers(model(**values), identifier_fields, attempts=attempts, year=year)
