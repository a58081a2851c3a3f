"""Ledger Store — the persistence seam for every aggregate the core mutates.

Wraps the Protean repositories of one domain and adds the two primitives
the core relies on:

- ``conditional_update``: read one aggregate, let a mutation check its
  precondition and apply the change, and write it back, all inside a critical
  section keyed by the aggregate's identity. A mutation that raises aborts the
  update and nothing is written. Stock decrements and promotion usage go
  through here, so two callers can never both pass a check against the same
  stale value.
- ``exclusive``: the same critical section held across several steps, for
  operations such as checkout and order deletion that must not interleave
  with another on the same record. Locks are re-entrant, so
  ``conditional_update`` may run inside it.

Every other single-record write to an aggregate that is also updated
conditionally must go through ``conditional_update`` as well, or it could
overwrite a concurrent decrement with a stale copy.
"""

import threading
from contextlib import contextmanager

import structlog
from protean import UnitOfWork
from protean.domain import Domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.errors import NotFound, ValidationFailed
from storefront.ledger.locks import KeyedLocks

logger = structlog.get_logger(__name__)


def as_validation_failure(exc: ValidationError) -> ValidationFailed:
    if isinstance(exc, ValidationFailed):
        return exc
    return ValidationFailed(exc.messages)


class LedgerStore:
    def __init__(self, domain: Domain) -> None:
        self._domain = domain
        self._locks = KeyedLocks()
        # The in-memory provider is not safe for overlapping access, so each
        # individual read and write is serialized. Never held across a mutation.
        self._io_lock = threading.RLock()

    @property
    def domain(self) -> Domain:
        return self._domain

    def repository(self, aggregate_cls):
        return self._domain.repository_for(aggregate_cls)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(self, aggregate_cls, identifier):
        """Load an aggregate or raise NotFound."""
        try:
            with self._io_lock:
                return self.repository(aggregate_cls).get(str(identifier))
        except ObjectNotFoundError as exc:
            raise NotFound(aggregate_cls.__name__, identifier) from exc

    def find(self, aggregate_cls, **filters) -> list:
        """Return every persisted aggregate matching the given field values."""
        query = self.repository(aggregate_cls)._dao.query
        if filters:
            query = query.filter(**filters)
        with self._io_lock:
            return query.all().items

    def find_one(self, aggregate_cls, **filters):
        items = self.find(aggregate_cls, **filters)
        return items[0] if items else None

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def add(self, aggregate):
        """Persist one aggregate (insert or update) and commit."""
        try:
            with self._io_lock:
                self.repository(type(aggregate)).add(aggregate)
        except ValidationError as exc:
            raise as_validation_failure(exc) from exc
        return aggregate

    def remove(self, aggregate) -> None:
        with self._io_lock, UnitOfWork():
            self.repository(type(aggregate))._dao.delete(aggregate)

    @contextmanager
    def exclusive(self, aggregate_cls, key):
        """Critical section for one identity of one aggregate type.

        ``key`` need not be a persisted identity; reviews use it to serialize
        creation per (product, user) pair.
        """
        with self._locks.hold(aggregate_cls.__name__, key):
            yield

    def conditional_update(self, aggregate_cls, identifier, mutate):
        """Atomically read, check-and-mutate, and write one aggregate.

        ``mutate(aggregate)`` must raise to reject the update; its return
        value is ignored. Returns the written aggregate.
        """
        with self.exclusive(aggregate_cls, identifier):
            aggregate = self.get(aggregate_cls, identifier)
            try:
                mutate(aggregate)
            except ValidationError as exc:
                raise as_validation_failure(exc) from exc
            return self.add(aggregate)
