from decimal import Decimal

import pytest

from backend.app.models import LoyaltyAccount, LoyaltyTransaction
from backend.app.services import loyalty_service
from core.constants import LoyaltyTransactionType


@pytest.mark.parametrize(
    "total,points",
    [
        (Decimal("150"), 15),
        (Decimal("159.99"), 15),
        (Decimal("9.99"), 0),
        (Decimal("0"), 0),
    ],
)
def test_points_for_total(total, points):
    assert loyalty_service.points_for_total(total) == points


def test_award_points_creates_account_and_ledger_entry(test_session, make_user):
    user = make_user()

    awarded = loyalty_service.award_points_for_order(test_session, user.id, "order-1", Decimal("150"))
    test_session.commit()

    assert awarded == 15
    account = test_session.query(LoyaltyAccount).filter(LoyaltyAccount.user_id == user.id).one()
    assert account.points == 15
    entry = test_session.query(LoyaltyTransaction).one()
    assert entry.type == LoyaltyTransactionType.EARNED
    assert entry.description == "Points earned for order order-1"
    assert entry.related_order_id == "order-1"


def test_award_zero_points_writes_nothing(test_session, make_user):
    user = make_user()

    assert loyalty_service.award_points_for_order(test_session, user.id, "order-1", Decimal("5")) == 0
    assert test_session.query(LoyaltyAccount).count() == 0


def test_reversal_without_earned_points_is_noop(test_session, make_user):
    user = make_user()
    test_session.add(LoyaltyAccount(user_id=user.id, points=40))
    test_session.commit()

    assert loyalty_service.reverse_points_for_order(test_session, user.id, "order-x") == 0
    assert test_session.query(LoyaltyTransaction).count() == 0


def test_account_requires_authentication(test_app_client):
    client, _ = test_app_client

    assert client.get("/api/loyalty/account").status_code == 401


def test_account_not_found(authorized_client):
    client, _, _ = authorized_client

    resp = client.get("/api/loyalty/account")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Loyalty account not found."


def test_transactions_empty_without_account(authorized_client):
    client, _, _ = authorized_client

    resp = client.get("/api/loyalty/transactions")

    assert resp.status_code == 200
    assert resp.json() == []


def test_redeem_points_updates_balance_and_ledger(authorized_client, test_session):
    client, user, _ = authorized_client
    test_session.add(LoyaltyAccount(user_id=user.id, points=100))
    test_session.commit()

    resp = client.post("/api/loyalty/redeem", json={"points": 30, "description": "Free coffee"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Redeemed 30 points", "remaining_points": 70}

    account = client.get("/api/loyalty/account").json()
    assert account["points"] == 70
    ledger = client.get("/api/loyalty/transactions").json()
    assert len(ledger) == 1
    assert ledger[0]["points_change"] == -30
    assert ledger[0]["type"] == "Redeemed"
    assert ledger[0]["description"] == "Free coffee"


def test_redeem_failures_use_operation_shape(authorized_client, test_session):
    client, user, _ = authorized_client

    missing = client.post("/api/loyalty/redeem", json={"points": 5, "description": "x"})
    assert missing.status_code == 400
    assert missing.json() == {"success": False, "message": "Loyalty account not found"}

    test_session.add(LoyaltyAccount(user_id=user.id, points=4))
    test_session.commit()

    short = client.post("/api/loyalty/redeem", json={"points": 5, "description": "x"})
    assert short.status_code == 400
    assert short.json() == {"success": False, "message": "Insufficient points"}


def test_redeem_validation(authorized_client):
    client, _, _ = authorized_client

    resp = client.post("/api/loyalty/redeem", json={"points": 0, "description": "  "})

    assert resp.status_code == 400
    assert set(resp.json()["errors"]) == {
        "Points must be greater than 0.",
        "Description is required.",
    }


def test_balance_matches_ledger_after_earn_and_redeem(authorized_client, make_menu_item):
    client, _, _ = authorized_client
    item = make_menu_item(price="50.00")
    client.post("/api/orders", json={"items": [{"menu_item_id": item.id, "quantity": 3}]})
    client.post("/api/loyalty/redeem", json={"points": 6, "description": "Dessert"})

    balance = client.get("/api/loyalty/account").json()["points"]
    ledger = client.get("/api/loyalty/transactions").json()

    assert balance == 9
    assert sum(entry["points_change"] for entry in ledger) == balance
