"""
Flush hooks that keep the aggregate store in step with the log store.

before_flush records which grouping keys the pending inserts, updates and
deletes touch (old key and new key for moved entries). after_flush recomputes
those keys on the session's own connection, so each write and its aggregate
changes share one transaction and roll back together.

Writes that bypass the ORM unit of work (bulk ``Query.delete()``, raw SQL) do
not pass through here; ``AggregateService.recompute`` repairs them.
"""

import logging

from sqlalchemy import event
from sqlalchemy.orm import Session

from domain import aggregation

logger = logging.getLogger("nutrilog.triggers")

_PENDING_KEYS = "nutrilog.pending_recompute"


@event.listens_for(Session, "before_flush")
def collect_affected_keys(session, flush_context, instances):
    session.info[_PENDING_KEYS] = aggregation.affected_keys(
        list(session.new), list(session.dirty), list(session.deleted)
    )


@event.listens_for(Session, "after_flush")
def recompute_affected_keys(session, flush_context):
    pending = session.info.pop(_PENDING_KEYS, None)
    if not pending:
        return
    count = aggregation.recompute_many(session.connection(), pending)
    logger.debug("Recomputed %d aggregate key(s) after flush", count)


@event.listens_for(Session, "after_soft_rollback")
def discard_affected_keys(session, previous_transaction):
    session.info.pop(_PENDING_KEYS, None)
