"""
Tests for the aggregate recompute engine and the flush hooks that drive it.

Each test works on a fresh SQLite schema (db_session) and writes log rows
directly through the ORM session, exactly as the services do:
- A summary row exists iff its key has at least one log row
- Recompute is idempotent and never drifts
- Day totals equal the sum of the meal totals
- Moving an entry refreshes both the old and the new key
- Updates that touch no tracked column do not recompute
- A rolled-back write leaves no summary behind
- Writes that bypass the session are repaired by an explicit recompute
"""

import threading
import time
import uuid
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.orm import sessionmaker

from test_fixtures import (
    TODAY,
    add_exercise_entry,
    add_food_entry,
    db_session,
)
from domain import aggregation
from domain.aggregation import GroupingKey
from domain.models import Base, DailySumConsumed, FoodEntry, build_engine
from repositories.aggregate_repository import AggregateRepository
from services.aggregate_service import AggregateService


VALUE_COLUMNS = (
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
    "fibre_g",
    "saturated_fat_g",
    "trans_fat_g",
    "sugar_g",
    "sodium_mg",
    "entry_count",
)


def _values(row):
    return {column: getattr(row, column) for column in VALUE_COLUMNS}


# =============================================================================
# EXISTENCE AND CONVERGENCE
# =============================================================================


def test_insert_creates_day_and_meal_rows(db_session):
    """
    Verifies:
    1. The first entry of a day creates the day row
    2. The matching meal row is created with the same totals
    3. Other meals of the day have no row
    """
    user_id = uuid.uuid4()
    add_food_entry(db_session, user_id, meal_type="breakfast", calories=320, protein_g="12.5")

    repo = AggregateRepository(db_session)
    day = repo.get_daily_consumed(user_id, TODAY)
    breakfast = repo.get_meal_consumed(user_id, TODAY, "breakfast")

    assert day is not None
    assert day.calories == 320
    assert day.protein_g == Decimal("12.50")
    assert day.entry_count == 1
    assert day.last_recomputed_at is not None
    assert breakfast.calories == 320
    assert repo.get_meal_consumed(user_id, TODAY, "lunch") is None


def test_deletion_convergence(db_session):
    """100 + 150 kcal -> 250; delete one -> 150; delete the other -> no row."""
    user_id = uuid.uuid4()
    first = add_food_entry(db_session, user_id, calories=100)
    second = add_food_entry(db_session, user_id, calories=150)

    repo = AggregateRepository(db_session)
    assert repo.get_daily_consumed(user_id, TODAY).calories == 250

    db_session.delete(first)
    db_session.commit()
    row = repo.get_daily_consumed(user_id, TODAY)
    assert row.calories == 150
    assert row.entry_count == 1

    db_session.delete(second)
    db_session.commit()
    assert repo.get_daily_consumed(user_id, TODAY) is None
    assert repo.get_meals_for_day(user_id, TODAY) == []


def test_recompute_is_idempotent(db_session):
    """Recomputing a key repeatedly yields identical value columns."""
    user_id = uuid.uuid4()
    add_food_entry(db_session, user_id, calories=100, protein_g="0.1", fat_g="3.33")
    add_food_entry(db_session, user_id, calories=150, protein_g="0.2", fat_g="1.01")

    repo = AggregateRepository(db_session)
    before = _values(repo.get_daily_consumed(user_id, TODAY))

    key = GroupingKey(user_id, TODAY)
    connection = db_session.connection()
    aggregation.recompute(connection, aggregation.DAILY_CONSUMED, key)
    aggregation.recompute(connection, aggregation.DAILY_CONSUMED, key)
    db_session.commit()

    after = _values(repo.get_daily_consumed(user_id, TODAY))
    assert after == before
    assert after["protein_g"] == Decimal("0.30")
    assert after["fat_g"] == Decimal("4.34")


def test_recompute_of_key_without_entries_writes_nothing(db_session):
    user_id = uuid.uuid4()
    result = aggregation.recompute(
        db_session.connection(), aggregation.DAILY_CONSUMED, GroupingKey(user_id, TODAY)
    )
    db_session.commit()

    assert result is None
    assert db_session.query(DailySumConsumed).count() == 0


# =============================================================================
# CROSS-GRANULARITY
# =============================================================================


def test_day_totals_equal_sum_of_meal_totals(db_session):
    user_id = uuid.uuid4()
    add_food_entry(db_session, user_id, meal_type="breakfast", calories=100, protein_g="5.5")
    add_food_entry(db_session, user_id, meal_type="lunch", calories=150, protein_g="10.25")
    add_food_entry(db_session, user_id, meal_type="dinner", calories=250, protein_g="0.1")
    add_food_entry(db_session, user_id, meal_type="dinner", calories=75)

    repo = AggregateRepository(db_session)
    day = repo.get_daily_consumed(user_id, TODAY)
    meals = repo.get_meals_for_day(user_id, TODAY)

    assert [m.meal_type for m in meals] == ["breakfast", "lunch", "dinner"]
    assert day.calories == sum(m.calories for m in meals) == 575
    assert day.protein_g == sum(m.protein_g for m in meals) == Decimal("15.85")
    assert day.entry_count == sum(m.entry_count for m in meals) == 4


def test_users_and_days_are_isolated(db_session):
    alice, bob = uuid.uuid4(), uuid.uuid4()
    add_food_entry(db_session, alice, calories=400)
    add_food_entry(db_session, bob, calories=90)
    add_food_entry(db_session, alice, entry_date=TODAY + timedelta(days=1), calories=10)

    repo = AggregateRepository(db_session)
    assert repo.get_daily_consumed(alice, TODAY).calories == 400
    assert repo.get_daily_consumed(bob, TODAY).calories == 90
    assert repo.get_daily_consumed(alice, TODAY + timedelta(days=1)).calories == 10


# =============================================================================
# KEY MOVES AND CONDITIONAL RECOMPUTE
# =============================================================================


def test_moving_entry_to_another_day_refreshes_both_days(db_session):
    user_id = uuid.uuid4()
    tomorrow = TODAY + timedelta(days=1)
    entry = add_food_entry(db_session, user_id, calories=200)
    add_food_entry(db_session, user_id, calories=50)

    entry.entry_date = tomorrow
    db_session.commit()

    repo = AggregateRepository(db_session)
    assert repo.get_daily_consumed(user_id, TODAY).calories == 50
    assert repo.get_daily_consumed(user_id, tomorrow).calories == 200
    assert repo.get_meal_consumed(user_id, tomorrow, "breakfast").calories == 200


def test_moving_last_entry_of_meal_removes_that_meal_row(db_session):
    user_id = uuid.uuid4()
    entry = add_food_entry(db_session, user_id, meal_type="breakfast", calories=300)

    entry.meal_type = "dinner"
    db_session.commit()

    repo = AggregateRepository(db_session)
    assert repo.get_meal_consumed(user_id, TODAY, "breakfast") is None
    assert repo.get_meal_consumed(user_id, TODAY, "dinner").calories == 300
    assert repo.get_daily_consumed(user_id, TODAY).calories == 300


def test_numeric_update_recomputes(db_session):
    user_id = uuid.uuid4()
    entry = add_food_entry(db_session, user_id, calories=200)

    entry.calories_kcal = Decimal("260")
    db_session.commit()

    assert AggregateRepository(db_session).get_daily_consumed(user_id, TODAY).calories == 260


def test_untracked_update_does_not_recompute(db_session):
    """Renaming an entry leaves last_recomputed_at untouched."""
    user_id = uuid.uuid4()
    entry = add_food_entry(db_session, user_id, calories=200)
    repo = AggregateRepository(db_session)
    stamp = repo.get_daily_consumed(user_id, TODAY).last_recomputed_at

    entry.item_name = "Renamed"
    db_session.commit()

    assert repo.get_daily_consumed(user_id, TODAY).last_recomputed_at == stamp


def test_affected_keys_for_meal_move(db_session):
    """
    Verifies:
    1. Moving an entry between meals refreshes the old and the new meal key
    2. The day key is not touched: the day total does not depend on the meal
    3. After commit the day row is unchanged
    """
    user_id = uuid.uuid4()
    entry = add_food_entry(db_session, user_id, meal_type="lunch", calories=10)
    repo = AggregateRepository(db_session)
    day_before = repo.get_daily_consumed(user_id, TODAY)
    values_before = _values(day_before)
    stamp_before = day_before.last_recomputed_at

    entry.meal_type = "dinner"
    pending = aggregation.affected_keys([], [entry], [])

    assert (aggregation.MEAL_CONSUMED, GroupingKey(user_id, TODAY, "lunch")) in pending
    assert (aggregation.MEAL_CONSUMED, GroupingKey(user_id, TODAY, "dinner")) in pending
    assert (aggregation.DAILY_CONSUMED, GroupingKey(user_id, TODAY)) not in pending

    db_session.commit()

    day_after = repo.get_daily_consumed(user_id, TODAY)
    assert _values(day_after) == values_before
    assert day_after.last_recomputed_at == stamp_before
    assert repo.get_meal_consumed(user_id, TODAY, "dinner").calories == 10
    assert repo.get_meal_consumed(user_id, TODAY, "lunch") is None


# =============================================================================
# TRANSACTIONS AND REPAIR
# =============================================================================


def test_rolled_back_write_leaves_no_summary(db_session):
    user_id = uuid.uuid4()
    add_food_entry(db_session, user_id, calories=500, commit=False)

    repo = AggregateRepository(db_session)
    assert repo.get_daily_consumed(user_id, TODAY).calories == 500

    db_session.rollback()

    assert db_session.query(FoodEntry).count() == 0
    assert repo.get_daily_consumed(user_id, TODAY) is None


def test_explicit_recompute_repairs_bulk_delete(db_session):
    """
    Verifies:
    1. A bulk Query.delete() bypasses the flush hooks (row goes stale)
    2. AggregateService.recompute removes the stale day and meal rows
    """
    user_id = uuid.uuid4()
    add_food_entry(db_session, user_id, meal_type="breakfast", calories=100)
    add_food_entry(db_session, user_id, meal_type="dinner", calories=150)

    db_session.query(FoodEntry).filter(FoodEntry.user_id == user_id).delete(
        synchronize_session=False
    )
    db_session.commit()

    repo = AggregateRepository(db_session)
    assert repo.get_daily_consumed(user_id, TODAY).calories == 250

    keys, present = AggregateService.recompute(db_session, user_id, TODAY)

    assert keys == 4  # day consumed, day exercise, two meals
    assert present == 0
    assert repo.get_daily_consumed(user_id, TODAY) is None
    assert repo.get_meals_for_day(user_id, TODAY) == []


def test_backfill_rebuilds_missing_rows(db_session):
    user_id = uuid.uuid4()
    add_food_entry(db_session, user_id, calories=120)
    db_session.execute(DailySumConsumed.__table__.delete())
    db_session.commit()

    repo = AggregateRepository(db_session)
    assert repo.get_daily_consumed(user_id, TODAY) is None

    AggregateService.backfill(db_session)

    assert repo.get_daily_consumed(user_id, TODAY).calories == 120


# =============================================================================
# EXERCISE SUMMARIES
# =============================================================================


def test_exercise_totals_by_category(db_session):
    user_id = uuid.uuid4()
    add_exercise_entry(db_session, user_id, category="cardio_mind_body", minutes=30, distance_km="5.25")
    add_exercise_entry(db_session, user_id, category="strength", minutes=45)
    add_exercise_entry(db_session, user_id, category="other", minutes=10)

    row = AggregateRepository(db_session).get_daily_exercises(user_id, TODAY)

    assert row.activity_count == 3
    assert row.total_minutes == 85
    assert row.total_distance_km == Decimal("5.2500")
    assert row.cardio_count == 1
    assert row.cardio_minutes == 30
    assert row.cardio_distance_km == Decimal("5.2500")
    assert row.strength_count == 1


def test_exercise_category_change_and_delete(db_session):
    user_id = uuid.uuid4()
    entry = add_exercise_entry(db_session, user_id, category="cardio_mind_body", minutes=20)

    entry.category = "strength"
    db_session.commit()

    repo = AggregateRepository(db_session)
    row = repo.get_daily_exercises(user_id, TODAY)
    assert row.cardio_count == 0
    assert row.cardio_minutes == 0
    assert row.strength_count == 1

    db_session.delete(entry)
    db_session.commit()
    assert repo.get_daily_exercises(user_id, TODAY) is None


# =============================================================================
# CONCURRENT WRITERS
# =============================================================================


def test_concurrent_writers_to_one_key_converge(tmp_path):
    """
    Two sessions on separate connections write the same (user, day) key.

    Verifies:
    1. Session A flushes an entry (its recompute runs inside A's transaction)
    2. Session B commits an entry for the same key from another thread while
       A is still open; B waits for A's write lock
    3. After both commit the day row holds both entries: 100 + 150 = 250
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'concurrent.db'}")
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    user_id = uuid.uuid4()
    errors = []
    started = threading.Event()

    def _writer_b():
        session_b = Session()
        try:
            started.set()
            add_food_entry(session_b, user_id, meal_type="dinner", calories=150)
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)
            session_b.rollback()
        finally:
            session_b.close()

    session_a = Session()
    try:
        add_food_entry(session_a, user_id, meal_type="breakfast", calories=100, commit=False)

        writer_b = threading.Thread(target=_writer_b)
        writer_b.start()
        started.wait(timeout=5)
        time.sleep(0.2)
        session_a.commit()
        writer_b.join(timeout=10)
    finally:
        session_a.close()

    assert not writer_b.is_alive()
    assert errors == []

    check = Session()
    try:
        repo = AggregateRepository(check)
        day = repo.get_daily_consumed(user_id, TODAY)
        assert day.calories == 250
        assert day.entry_count == 2
        assert repo.get_meal_consumed(user_id, TODAY, "breakfast").calories == 100
        assert repo.get_meal_consumed(user_id, TODAY, "dinner").calories == 150
    finally:
        check.close()
        Base.metadata.drop_all(engine)
        engine.dispose()
