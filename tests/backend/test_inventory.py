from decimal import Decimal

import pytest

from backend.app.models import Ingredient, StockTransaction
from core.constants import StockTransactionType


@pytest.fixture
def staff_client(test_app_client, worker, auth_headers):
    client, session_factory = test_app_client
    client.headers.update(auth_headers(worker))
    return client, session_factory


@pytest.fixture
def flour(test_session):
    ingredient = Ingredient(
        name="Flour",
        unit="kg",
        current_stock=Decimal("10"),
        low_stock_threshold=Decimal("3"),
    )
    test_session.add(ingredient)
    test_session.commit()
    return ingredient


def _adjust(client, ingredient_id, quantity, type, note=None):
    return client.put(
        "/api/inventory/adjust",
        json={"ingredient_id": ingredient_id, "quantity": quantity, "type": type, "note": note},
    )


def test_inventory_requires_staff(authorized_client):
    client, _, _ = authorized_client

    assert client.get("/api/inventory").status_code == 403


def test_create_ingredient_starts_at_zero(staff_client):
    client, session_factory = staff_client

    resp = client.post(
        "/api/inventory/ingredients",
        json={"name": " Mozzarella ", "unit": "kg", "low_stock_threshold": 2},
    )

    assert resp.status_code == 201
    assert resp.json()["name"] == "Mozzarella"
    with session_factory() as session:
        ingredient = session.get(Ingredient, resp.json()["id"])
        assert ingredient.current_stock == 0
        assert ingredient.is_low_stock is True


def test_create_ingredient_rejects_duplicate_names(staff_client, flour):
    client, _ = staff_client

    resp = client.post("/api/inventory/ingredients", json={"name": "FLOUR", "unit": "kg"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Ingredient 'FLOUR' already exists."


def test_create_ingredient_validation(staff_client):
    client, _ = staff_client

    resp = client.post(
        "/api/inventory/ingredients",
        json={"name": "", "unit": "u" * 21, "low_stock_threshold": -1},
    )

    assert resp.status_code == 400
    assert set(resp.json()["errors"]) == {
        "Name is required.",
        "Unit must not exceed 20 characters.",
        "Low stock threshold must be 0 or greater.",
    }


def test_list_and_lookup_by_name(staff_client, flour):
    client, _ = staff_client

    listed = client.get("/api/inventory").json()
    assert listed[0]["name"] == "Flour"
    assert listed[0]["current_stock"] == 10.0
    assert listed[0]["is_low_stock"] is False

    found = client.get("/api/inventory/flour")
    assert found.status_code == 200
    assert found.json()["id"] == flour.id

    missing = client.get("/api/inventory/Sugar")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Ingredient 'Sugar' not found."


@pytest.mark.parametrize(
    "type,quantity,expected_stock,expected_change",
    [
        ("Restock", 5, 15.0, Decimal("5")),
        ("Adjustment", 1.5, 11.5, Decimal("1.5")),
        ("Usage", 4, 6.0, Decimal("-4")),
        ("Waste", 10, 0.0, Decimal("-10")),
    ],
)
def test_adjust_stock_direction_by_type(
    staff_client, flour, type, quantity, expected_stock, expected_change
):
    client, session_factory = staff_client

    resp = _adjust(client, flour.id, quantity, type, note="weekly count")

    assert resp.status_code == 200
    assert resp.json() == {
        "id": flour.id,
        "current_stock": expected_stock,
        "message": "Stock updated successfully.",
    }
    with session_factory() as session:
        movement = session.query(StockTransaction).one()
        assert movement.quantity_changed == expected_change
        assert movement.type == StockTransactionType(type)
        assert movement.note == "weekly count"


def test_adjust_stock_cannot_go_negative(staff_client, flour):
    client, session_factory = staff_client

    resp = _adjust(client, flour.id, 11, "Usage")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient stock for this operation."
    with session_factory() as session:
        assert session.query(StockTransaction).count() == 0


def test_adjust_stock_validation_and_unknown_ingredient(staff_client):
    client, _ = staff_client

    invalid = _adjust(client, "missing", -1, "Usage", note="n" * 201)
    assert invalid.status_code == 400
    assert set(invalid.json()["errors"]) == {
        "Quantity must be positive.",
        "Note cannot exceed 200 characters.",
    }

    assert _adjust(client, "missing", 1, "Restock").status_code == 404
