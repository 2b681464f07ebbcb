"""
Aggregate recompute engine.

Every summary row is re-derived from the full set of log rows that share its
grouping key; no running counters or deltas are ever applied. Recomputing a
key any number of times converges to the same row, so the same function
serves the write path, repairs and backfills.

A log variant (food entry, exercise entry) takes part by registering the
aggregate targets it feeds in ``SOURCES``. Each target knows its grouping key
columns, the columns whose change requires a recompute, and the SQL
aggregates that produce its values.

Recompute runs on a caller-supplied ``Connection`` so that it always shares
the transaction of the write that triggered it (see domain.models.triggers).
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, NamedTuple, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import and_, case, delete, func, insert, select, union, update
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection
from sqlalchemy.sql.elements import ColumnElement

from domain.enums import ExerciseCategory
from domain.models.aggregate import (
    DailySumConsumed,
    DailySumConsumedMeal,
    DailySumExercises,
)
from domain.models.log_entry import ExerciseEntry, FoodEntry

logger = logging.getLogger("nutrilog.aggregation")


class GroupingKey(NamedTuple):
    """(user, date[, sub-key]) identifying one aggregate row"""

    user_id: UUID
    entry_date: date
    sub_key: Optional[str] = None

    def sort_token(self) -> Tuple[str, str, str]:
        return (str(self.user_id), self.entry_date.isoformat(), self.sub_key or "")


@dataclass(frozen=True, eq=False)
class Measure:
    """One aggregate column and the SQL aggregate that produces it"""

    column: str
    expression: ColumnElement
    whole_number: bool = False
    places: int = 2


@dataclass(frozen=True, eq=False)
class AggregateTarget:
    name: str
    log_model: type
    aggregate_model: type
    key_attrs: Tuple[str, ...]
    count_column: str
    measures: Tuple[Measure, ...]
    tracked_attrs: Tuple[str, ...]

    @property
    def table(self):
        return self.aggregate_model.__table__

    @property
    def has_sub_key(self) -> bool:
        return len(self.key_attrs) == 3

    def key_from_values(self, values: Iterable) -> GroupingKey:
        return GroupingKey(*values)

    def key_of(self, obj) -> GroupingKey:
        """Current grouping key of a log object"""
        return self.key_from_values(getattr(obj, attr) for attr in self.key_attrs)

    def previous_key_of(self, obj) -> GroupingKey:
        """Grouping key a pending log object had before its unflushed changes"""
        state = sa_inspect(obj)
        values = []
        for attr in self.key_attrs:
            history = state.attrs[attr].history
            values.append(history.deleted[0] if history.deleted else getattr(obj, attr))
        return self.key_from_values(values)

    def has_tracked_changes(self, obj) -> bool:
        state = sa_inspect(obj)
        return any(state.attrs[attr].history.has_changes() for attr in self.tracked_attrs)

    def log_filter(self, key: GroupingKey) -> ColumnElement:
        return and_(
            *[
                getattr(self.log_model, attr) == value
                for attr, value in zip(self.key_attrs, key)
            ]
        )

    def aggregate_filter(self, key: GroupingKey) -> ColumnElement:
        return and_(
            *[self.table.c[attr] == value for attr, value in zip(self.key_attrs, key)]
        )

    def key_values(self, key: GroupingKey) -> Dict[str, object]:
        return dict(zip(self.key_attrs, key))


def _sum(column) -> ColumnElement:
    return func.coalesce(func.sum(func.coalesce(column, 0)), 0)


def _sum_where(condition, column) -> ColumnElement:
    return func.coalesce(func.sum(case((condition, func.coalesce(column, 0)), else_=0)), 0)


def _count_where(condition) -> ColumnElement:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _consumed_measures() -> Tuple[Measure, ...]:
    return (
        Measure("calories", _sum(FoodEntry.calories_kcal), whole_number=True),
        Measure("protein_g", _sum(FoodEntry.protein_g)),
        Measure("carbs_g", _sum(FoodEntry.carbs_g)),
        Measure("fat_g", _sum(FoodEntry.fat_g)),
        Measure("fibre_g", _sum(FoodEntry.fiber_g)),
        Measure("saturated_fat_g", _sum(FoodEntry.saturated_fat_g)),
        Measure("trans_fat_g", _sum(FoodEntry.trans_fat_g)),
        Measure("sugar_g", _sum(FoodEntry.sugar_g)),
        Measure("sodium_mg", _sum(FoodEntry.sodium_mg), whole_number=True),
    )


_FOOD_NUMERIC_ATTRS = (
    "calories_kcal",
    "protein_g",
    "carbs_g",
    "fat_g",
    "fiber_g",
    "saturated_fat_g",
    "trans_fat_g",
    "sugar_g",
    "sodium_mg",
)

_is_cardio = ExerciseEntry.category == ExerciseCategory.CARDIO_MIND_BODY.value
_is_strength = ExerciseEntry.category == ExerciseCategory.STRENGTH.value


DAILY_CONSUMED = AggregateTarget(
    name="daily_sum_consumed",
    log_model=FoodEntry,
    aggregate_model=DailySumConsumed,
    key_attrs=("user_id", "entry_date"),
    count_column="entry_count",
    measures=_consumed_measures(),
    tracked_attrs=("user_id", "entry_date") + _FOOD_NUMERIC_ATTRS,
)

MEAL_CONSUMED = AggregateTarget(
    name="daily_sum_consumed_meal",
    log_model=FoodEntry,
    aggregate_model=DailySumConsumedMeal,
    key_attrs=("user_id", "entry_date", "meal_type"),
    count_column="entry_count",
    measures=_consumed_measures(),
    tracked_attrs=("user_id", "entry_date", "meal_type") + _FOOD_NUMERIC_ATTRS,
)

DAILY_EXERCISES = AggregateTarget(
    name="daily_sum_exercises",
    log_model=ExerciseEntry,
    aggregate_model=DailySumExercises,
    key_attrs=("user_id", "entry_date"),
    count_column="activity_count",
    measures=(
        Measure("total_minutes", _sum(ExerciseEntry.minutes), whole_number=True),
        Measure("total_distance_km", _sum(ExerciseEntry.distance_km), places=4),
        Measure("cardio_count", _count_where(_is_cardio), whole_number=True),
        Measure(
            "cardio_minutes",
            _sum_where(_is_cardio, ExerciseEntry.minutes),
            whole_number=True,
        ),
        Measure(
            "cardio_distance_km",
            _sum_where(_is_cardio, ExerciseEntry.distance_km),
            places=4,
        ),
        Measure("strength_count", _count_where(_is_strength), whole_number=True),
    ),
    tracked_attrs=("user_id", "entry_date", "category", "minutes", "distance_km"),
)

# Log variant -> aggregate targets it feeds
SOURCES: Dict[type, Tuple[AggregateTarget, ...]] = {
    FoodEntry: (DAILY_CONSUMED, MEAL_CONSUMED),
    ExerciseEntry: (DAILY_EXERCISES,),
}

TARGETS: Tuple[AggregateTarget, ...] = (DAILY_CONSUMED, MEAL_CONSUMED, DAILY_EXERCISES)

PendingKey = Tuple[AggregateTarget, GroupingKey]


def _normalize(measure: Measure, raw) -> object:
    value = Decimal(str(raw if raw is not None else 0))
    if value < 0:
        logger.warning("Negative sum clamped to 0 for %s: %s", measure.column, value)
        value = Decimal("0")
    if measure.whole_number:
        return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return value.quantize(Decimal(1).scaleb(-measure.places), rounding=ROUND_HALF_UP)


def _lock_id(target: AggregateTarget, key: GroupingKey) -> int:
    token = "|".join((target.name,) + key.sort_token()).encode("utf-8")
    return int.from_bytes(hashlib.blake2b(token, digest_size=8).digest(), "big", signed=True)


def _acquire_key_lock(connection: Connection, target: AggregateTarget, key: GroupingKey):
    """Serialize recomputes of one key until the surrounding transaction ends.

    PostgreSQL gets a transaction-scoped advisory lock, taken before the sums
    are read so a second writer re-reads after the first one commits. SQLite
    already serializes writers on the database lock.
    """
    if connection.dialect.name == "postgresql":
        connection.execute(select(func.pg_advisory_xact_lock(_lock_id(target, key))))


def _upsert(connection: Connection, target: AggregateTarget, key: GroupingKey, values: dict):
    table = target.table
    row = {**target.key_values(key), **values}
    dialect = connection.dialect.name

    if dialect in ("postgresql", "sqlite"):
        dialect_insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = dialect_insert(table).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(target.key_attrs),
            set_={name: stmt.excluded[name] for name in values},
        )
        connection.execute(stmt)
        return

    result = connection.execute(
        update(table).where(target.aggregate_filter(key)).values(**values)
    )
    if result.rowcount == 0:
        connection.execute(insert(table).values(**row))


def recompute(
    connection: Connection, target: AggregateTarget, key: GroupingKey
) -> Optional[dict]:
    """
    Re-derive the aggregate row for ``key`` from the current log rows.

    Deletes the row when no log rows match, otherwise upserts it with fresh
    sums and ``last_recomputed_at``.

    Returns:
        The written values, or None when the key has no entries (row absent).
    """
    _acquire_key_lock(connection, target, key)

    stmt = select(
        func.count().label("row_count"),
        *[measure.expression.label(measure.column) for measure in target.measures],
    ).where(target.log_filter(key))
    result = connection.execute(stmt).mappings().one()

    row_count = int(result["row_count"] or 0)
    if row_count == 0:
        deleted = connection.execute(
            delete(target.table).where(target.aggregate_filter(key))
        )
        if deleted.rowcount:
            logger.debug("Removed %s row for %s", target.name, key)
        return None

    values = {
        measure.column: _normalize(measure, result[measure.column])
        for measure in target.measures
    }
    values[target.count_column] = row_count
    values["last_recomputed_at"] = datetime.now(timezone.utc)

    _upsert(connection, target, key, values)
    logger.debug("Recomputed %s for %s (%d entries)", target.name, key, row_count)
    return values


def recompute_many(connection: Connection, pending: Iterable[PendingKey]) -> int:
    """Recompute each distinct (target, key) once, in a stable lock order"""
    ordered = sorted(set(pending), key=lambda item: (item[0].name,) + item[1].sort_token())
    for target, key in ordered:
        recompute(connection, target, key)
    return len(ordered)


def affected_keys(new: Iterable, dirty: Iterable, deleted: Iterable) -> Set[PendingKey]:
    """
    Collect the (target, key) pairs a pending flush will invalidate.

    Inserts affect the new key, deletes the key the row had, and updates both
    the previous and the current key when the grouping key moved. Updates that
    leave every tracked column alone affect nothing.
    """
    pending: Set[PendingKey] = set()

    for obj in new:
        for target in SOURCES.get(type(obj), ()):
            pending.add((target, target.key_of(obj)))

    for obj in deleted:
        for target in SOURCES.get(type(obj), ()):
            pending.add((target, target.previous_key_of(obj)))

    for obj in dirty:
        for target in SOURCES.get(type(obj), ()):
            if not target.has_tracked_changes(obj):
                continue
            pending.add((target, target.key_of(obj)))
            pending.add((target, target.previous_key_of(obj)))

    return pending


def discover_keys(
    connection: Connection,
    target: AggregateTarget,
    user_id: Optional[UUID] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[GroupingKey]:
    """
    Keys that currently have log rows or an aggregate row, optionally limited
    to one user and a date range. Recomputing all of them repairs both missing
    and stray aggregate rows.
    """
    log_cols = [getattr(target.log_model, attr) for attr in target.key_attrs]
    agg_cols = [target.table.c[attr] for attr in target.key_attrs]

    def _filtered(stmt, user_col, date_col):
        if user_id is not None:
            stmt = stmt.where(user_col == user_id)
        if start is not None:
            stmt = stmt.where(date_col >= start)
        if end is not None:
            stmt = stmt.where(date_col <= end)
        return stmt

    from_log = _filtered(
        select(*log_cols),
        getattr(target.log_model, "user_id"),
        getattr(target.log_model, "entry_date"),
    )
    from_aggregate = _filtered(
        select(*agg_cols), target.table.c.user_id, target.table.c.entry_date
    )
    rows = connection.execute(union(from_log, from_aggregate)).all()
    keys = [target.key_from_values(tuple(row)) for row in rows]
    return sorted(keys, key=GroupingKey.sort_token)
