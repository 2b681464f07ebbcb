"""
HTTP endpoint tests.

Every request goes through the real routes, services and an in-memory SQLite
database (client fixture), so these double as end-to-end checks that the
summaries follow the log.
"""

import uuid
from datetime import timedelta

from test_fixtures import TODAY, client, db_session
from domain.models import FoodEntry


# =============================================================================
# API FLOW
# =============================================================================

EXAMPLE_LOGGING_FLOW = """
Logging Flow
======================================

1. ADD A FOOD
   POST /foods
   {"name": "Rolled oats", "serving_size": 100, "serving_unit": "g",
    "calories_kcal": 389, "protein_g": 16.9,
    "servings": [{"serving_name": "1 cup", "weight_g": 80, "is_default": true}]}

2. PREVIEW A PORTION
   GET /foods/{food_id}/nutrients?quantity=1&serving_id={cup}

3. LOG IT
   POST /entries/food
   {"user_id": "...", "entry_date": "2025-03-14", "meal_type": "breakfast",
    "food_id": "...", "quantity": 1, "unit": "cup", "serving_id": "..."}

4. READ THE DAY
   GET /summaries/consumed?user_id=...&entry_date=2025-03-14
   GET /summaries/consumed/meals?user_id=...&entry_date=2025-03-14
"""


def _create_food(client, **overrides):
    payload = {
        "name": "Rolled oats",
        "serving_size": 100,
        "serving_unit": "g",
        "calories_kcal": 200,
        "protein_g": 10,
    }
    payload.update(overrides)
    r = client.post("/foods", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def _log_food(client, user_id, food_id, quantity=150, unit="g", meal_type="breakfast", **extra):
    payload = {
        "user_id": str(user_id),
        "entry_date": TODAY.isoformat(),
        "meal_type": meal_type,
        "food_id": food_id,
        "quantity": quantity,
        "unit": unit,
    }
    payload.update(extra)
    return client.post("/entries/food", json=payload)


def _summary_params(user_id, day=TODAY):
    return {"user_id": str(user_id), "entry_date": day.isoformat()}


# =============================================================================
# FOODS
# =============================================================================


def test_food_crud_and_preview(client):
    """
    Verifies:
    1. POST /foods creates a food with its servings
    2. GET /foods/{id} returns it
    3. GET /foods/{id}/nutrients previews a portion via a named serving
    4. DELETE /foods/{id} removes it (404 afterwards)
    """
    food = _create_food(
        client, servings=[{"serving_name": "1 cup", "weight_g": 80, "is_default": True}]
    )
    assert food["servings"][0]["serving_name"] == "1 cup"

    r = client.get(f"/foods/{food['food_id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "Rolled oats"

    cup_id = food["servings"][0]["serving_id"]
    r = client.get(
        f"/foods/{food['food_id']}/nutrients",
        params={"quantity": 2, "serving_id": cup_id},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["path"] == "serving"
    assert float(body["nutrients"]["calories_kcal"]) == 320
    assert float(body["nutrients"]["protein_g"]) == 16
    assert body["nutrients"]["fat_g"] is None

    r = client.delete(f"/foods/{food['food_id']}")
    assert r.status_code == 200
    assert client.get(f"/foods/{food['food_id']}").status_code == 404


def test_patch_food_keeps_logged_entries(client):
    """
    Verifies:
    1. PATCH /foods/{id} changes the food
    2. The entry logged before the edit and its summary keep their values
    3. A null for a required field is rejected (422)
    """
    user_id = uuid.uuid4()
    food = _create_food(client)
    entry = _log_food(client, user_id, food["food_id"]).json()

    r = client.patch(f"/foods/{food['food_id']}", json={"calories_kcal": 400, "name": "Oats v2"})
    assert r.status_code == 200
    assert r.json()["name"] == "Oats v2"
    assert float(r.json()["calories_kcal"]) == 400

    entries = client.get("/entries/food", params=_summary_params(user_id)).json()
    assert [e["entry_id"] for e in entries] == [entry["entry_id"]]
    assert float(entries[0]["calories_kcal"]) == 300
    assert client.get("/summaries/consumed", params=_summary_params(user_id)).json()["calories"] == 300

    r = client.patch(f"/foods/{food['food_id']}", json={"calories_kcal": None})
    assert r.status_code == 422
    assert client.patch(f"/foods/{uuid.uuid4()}", json={"name": "x"}).status_code == 404


def test_food_serving_needs_exactly_one_measure(client):
    r = client.post(
        "/foods",
        json={
            "name": "Odd",
            "serving_size": 1,
            "serving_unit": "piece",
            "calories_kcal": 10,
            "servings": [{"serving_name": "both", "weight_g": 5, "volume_ml": 5}],
        },
    )
    assert r.status_code == 422


def test_preview_rejects_non_positive_quantity(client):
    food = _create_food(client)
    r = client.get(f"/foods/{food['food_id']}/nutrients", params={"quantity": 0, "unit": "g"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_QUANTITY"


# =============================================================================
# FOOD ENTRIES AND SUMMARIES
# =============================================================================


def test_log_food_and_read_summaries(client):
    """
    Verifies:
    1. POST /entries/food stores 300 kcal for 150 g of a 200 kcal/100 g food
    2. GET /summaries/consumed and /summaries/consumed/meals reflect it
    3. GET /entries/food lists the entry
    """
    user_id = uuid.uuid4()
    food = _create_food(client)

    r = _log_food(client, user_id, food["food_id"])
    assert r.status_code == 201, r.text
    assert float(r.json()["calories_kcal"]) == 300

    r = client.get("/summaries/consumed", params=_summary_params(user_id))
    assert r.status_code == 200
    assert r.json()["calories"] == 300
    assert r.json()["entry_count"] == 1

    r = client.get("/summaries/consumed/meals", params=_summary_params(user_id))
    assert [m["meal_type"] for m in r.json()] == ["breakfast"]

    r = client.get("/entries/food", params=_summary_params(user_id))
    assert len(r.json()) == 1


def test_patch_and_delete_food_entry(client):
    user_id = uuid.uuid4()
    food = _create_food(client)
    entry = _log_food(client, user_id, food["food_id"]).json()

    r = client.patch(
        f"/entries/food/{entry['entry_id']}", json={"quantity": 50, "meal_type": "dinner"}
    )
    assert r.status_code == 200
    assert float(r.json()["calories_kcal"]) == 100

    meals = client.get("/summaries/consumed/meals", params=_summary_params(user_id)).json()
    assert [(m["meal_type"], m["calories"]) for m in meals] == [("dinner", 100)]

    r = client.delete(f"/entries/food/{entry['entry_id']}")
    assert r.status_code == 200

    r = client.get("/summaries/consumed", params=_summary_params(user_id))
    assert r.status_code == 404
    assert r.json()["error"]["message"] == "No data for this key"


def test_invalid_entries_are_rejected_without_writes(client, db_session):
    """
    Verifies:
    1. quantity <= 0 -> 422
    2. unknown meal type -> 422
    3. unknown food -> 404
    4. nothing reaches the log or the summaries
    """
    user_id = uuid.uuid4()
    food = _create_food(client)

    assert _log_food(client, user_id, food["food_id"], quantity=0).status_code == 422
    assert _log_food(client, user_id, food["food_id"], quantity=-5).status_code == 422
    assert _log_food(client, user_id, food["food_id"], meal_type="brunch").status_code == 422
    assert _log_food(client, user_id, str(uuid.uuid4())).status_code == 404

    assert db_session.query(FoodEntry).count() == 0
    r = client.get("/summaries/consumed", params=_summary_params(user_id))
    assert r.status_code == 404


def test_manual_entry_requires_name_and_calories(client):
    r = client.post(
        "/entries/food",
        json={
            "user_id": str(uuid.uuid4()),
            "entry_date": TODAY.isoformat(),
            "meal_type": "lunch",
            "quantity": 1,
            "unit": "bowl",
        },
    )
    assert r.status_code == 422


# =============================================================================
# EXERCISE
# =============================================================================


def test_exercise_endpoints(client):
    user_id = uuid.uuid4()
    r = client.post(
        "/entries/exercise",
        json={
            "user_id": str(user_id),
            "entry_date": TODAY.isoformat(),
            "name": "Evening ride",
            "category": "cardio_mind_body",
            "minutes": 60,
            "distance_km": 21.5,
        },
    )
    assert r.status_code == 201, r.text
    entry_id = r.json()["entry_id"]

    r = client.get("/summaries/exercise", params=_summary_params(user_id))
    assert r.status_code == 200
    assert r.json()["cardio_minutes"] == 60
    assert float(r.json()["cardio_distance_km"]) == 21.5

    r = client.patch(f"/entries/exercise/{entry_id}", json={"category": "strength"})
    assert r.status_code == 200
    assert client.get("/summaries/exercise", params=_summary_params(user_id)).json()[
        "strength_count"
    ] == 1

    assert len(client.get("/entries/exercise", params=_summary_params(user_id)).json()) == 1
    assert client.delete(f"/entries/exercise/{entry_id}").status_code == 200
    assert client.get("/summaries/exercise", params=_summary_params(user_id)).status_code == 404


def test_exercise_minutes_must_be_whole(client):
    r = client.post(
        "/entries/exercise",
        json={
            "user_id": str(uuid.uuid4()),
            "entry_date": TODAY.isoformat(),
            "name": "Stretch",
            "minutes": 0.4,
        },
    )
    assert r.status_code == 422


def test_exercise_minutes_out_of_range(client):
    r = client.post(
        "/entries/exercise",
        json={
            "user_id": str(uuid.uuid4()),
            "entry_date": TODAY.isoformat(),
            "name": "Ultra",
            "minutes": 1000,
        },
    )
    assert r.status_code == 422


# =============================================================================
# CLONE, RECOMPUTE, BUNDLES
# =============================================================================


def test_clone_endpoint(client):
    user_id = uuid.uuid4()
    food = _create_food(client)
    _log_food(client, user_id, food["food_id"])
    target = TODAY + timedelta(days=1)

    r = client.post(
        "/entries/clone",
        json={
            "entity_type": "food_log",
            "user_id": str(user_id),
            "source_date": TODAY.isoformat(),
            "target_date": target.isoformat(),
        },
    )
    assert r.status_code == 200
    assert r.json()["cloned"] == 1
    assert client.get("/summaries/consumed", params=_summary_params(user_id, target)).json()[
        "calories"
    ] == 300

    r = client.post(
        "/entries/clone",
        json={
            "entity_type": "food_log",
            "user_id": str(user_id),
            "source_date": TODAY.isoformat(),
            "target_date": TODAY.isoformat(),
        },
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "SAME_DATE"


def test_recompute_endpoints(client):
    user_id = uuid.uuid4()
    food = _create_food(client)
    _log_food(client, user_id, food["food_id"])

    r = client.post(
        "/summaries/recompute",
        json={"user_id": str(user_id), "entry_date": TODAY.isoformat()},
    )
    assert r.status_code == 200
    # day consumed + breakfast present; day exercise absent
    assert r.json() == {"keys_recomputed": 3, "rows_present": 2}

    r = client.post(
        "/summaries/recompute-range",
        json={
            "user_id": str(user_id),
            "start_date": TODAY.isoformat(),
            "end_date": (TODAY + timedelta(days=400)).isoformat(),
        },
    )
    assert r.status_code == 400


def test_bundle_endpoints(client):
    """
    Verifies:
    1. POST /bundles saves the bundle with totals
    2. GET /bundles lists it
    3. POST /bundles/{id}/log adds every item to the chosen meal
    4. DELETE /bundles/{id} removes it
    """
    user_id = uuid.uuid4()
    oats = _create_food(client)
    milk = _create_food(client, name="Milk", serving_unit="ml", calories_kcal=60, protein_g=None)

    r = client.post(
        "/bundles",
        json={
            "user_id": str(user_id),
            "name": "Usual breakfast",
            "items": [
                {"food_id": oats["food_id"], "quantity": 80, "unit": "g"},
                {"food_id": milk["food_id"], "quantity": 1, "unit": "cup"},
            ],
        },
    )
    assert r.status_code == 201, r.text
    bundle = r.json()
    assert float(bundle["totals"]["calories_kcal"]) == 304

    listed = client.get("/bundles", params={"user_id": str(user_id)}).json()
    assert [b["name"] for b in listed] == ["Usual breakfast"]

    r = client.post(
        f"/bundles/{bundle['bundle_id']}/log",
        json={"entry_date": TODAY.isoformat(), "meal_type": "afternoon_snack"},
    )
    assert r.status_code == 201
    assert len(r.json()["entries"]) == 2

    meals = client.get("/summaries/consumed/meals", params=_summary_params(user_id)).json()
    assert [(m["meal_type"], m["calories"]) for m in meals] == [("afternoon_snack", 304)]

    assert client.delete(f"/bundles/{bundle['bundle_id']}").status_code == 200
    assert client.get("/bundles", params={"user_id": str(user_id)}).json() == []


def test_bundle_name_too_long(client):
    food = _create_food(client)
    r = client.post(
        "/bundles",
        json={
            "user_id": str(uuid.uuid4()),
            "name": "x" * 41,
            "items": [{"food_id": food["food_id"], "quantity": 1, "unit": "g"}],
        },
    )
    assert r.status_code == 422


def test_health_check(client):
    r = client.get("/health-check")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "NutriLog"}
    assert client.get("/health-check/db").json() == {"database": "ok"}
