from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from backend.app.exceptions import DomainError
from backend.app.models import Coupon, LoyaltyAccount, LoyaltyTransaction, UserCoupon
from backend.app.services import coupon_service
from core.constants import CouponType, LoyaltyTransactionType, MenuCategory
from core.models.base import utcnow

COUPON_PAYLOAD = {
    "name": "Ten off",
    "description": "Ten lei off any order",
    "type": "FixedAmountDiscount",
    "discount_value": 10,
    "points_cost": 100,
}


def _coupon(**overrides):
    fields = {
        "type": CouponType.PERCENTAGE_DISCOUNT,
        "discount_value": Decimal("20"),
        "specific_menu_item_id": None,
        "minimum_order_amount": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestComputeDiscount:
    def test_percentage(self):
        discount = coupon_service.compute_discount(_coupon(), {}, Decimal("50"))
        assert discount == Decimal("10.00")

    def test_percentage_is_rounded_to_cents(self):
        discount = coupon_service.compute_discount(
            _coupon(discount_value=Decimal("15")), {}, Decimal("33.33")
        )
        assert discount == Decimal("5.00")

    def test_fixed_amount_is_capped_at_subtotal(self):
        coupon = _coupon(type=CouponType.FIXED_AMOUNT_DISCOUNT, discount_value=Decimal("15"))
        assert coupon_service.compute_discount(coupon, {}, Decimal("40")) == Decimal("15.00")
        assert coupon_service.compute_discount(coupon, {}, Decimal("8")) == Decimal("8.00")

    def test_free_item_in_cart(self):
        coupon = _coupon(type=CouponType.FREE_ITEM, specific_menu_item_id="drink")
        prices = {"burger": Decimal("30"), "drink": Decimal("5")}
        assert coupon_service.compute_discount(coupon, prices, Decimal("35")) == Decimal("5.00")

    def test_free_item_not_in_cart(self):
        coupon = _coupon(type=CouponType.FREE_ITEM, specific_menu_item_id="drink")
        assert coupon_service.compute_discount(coupon, {"burger": Decimal("30")}, Decimal("30")) == 0

    def test_minimum_amount(self):
        coupon = _coupon(minimum_order_amount=Decimal("50"))
        with pytest.raises(DomainError, match="minimum amount"):
            coupon_service.compute_discount(coupon, {}, Decimal("49.99"))
        assert coupon_service.compute_discount(coupon, {}, Decimal("50")) == Decimal("10.00")


@pytest.fixture
def manager_headers(manager, auth_headers):
    return auth_headers(manager)


@pytest.fixture
def coupon_in_db(test_session):
    def _create(**fields):
        values = {
            "name": "Ten off",
            "description": "Ten lei off",
            "type": CouponType.FIXED_AMOUNT_DISCOUNT,
            "discount_value": Decimal("10"),
            "points_cost": 100,
            "is_active": True,
        }
        values.update(fields)
        coupon = Coupon(**values)
        test_session.add(coupon)
        test_session.commit()
        return coupon

    return _create


def test_create_coupon(test_app_client, manager_headers):
    client, session_factory = test_app_client

    resp = client.post("/api/coupons", json=COUPON_PAYLOAD, headers=manager_headers)

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Coupon created successfully"
    with session_factory() as session:
        coupon = session.get(Coupon, body["coupon_id"])
        assert coupon.type == CouponType.FIXED_AMOUNT_DISCOUNT
        assert coupon.is_active is True


def test_create_coupon_requires_manager(authorized_client):
    client, _, _ = authorized_client

    assert client.post("/api/coupons", json=COUPON_PAYLOAD).status_code == 403


def test_create_coupon_validation(test_app_client, manager_headers):
    client, _ = test_app_client

    resp = client.post(
        "/api/coupons",
        json={
            "name": "",
            "description": "",
            "type": "PercentageDiscount",
            "discount_value": 0,
            "points_cost": 0,
            "minimum_order_amount": -1,
        },
        headers=manager_headers,
    )

    assert resp.status_code == 400
    errors = resp.json()["errors"]
    assert "Name is required" in errors
    assert "Description is required" in errors
    assert "Points cost must be greater than 0" in errors
    assert "Minimum order amount must be greater than or equal to 0" in errors


def test_create_percentage_coupon_needs_positive_value(test_app_client, manager_headers):
    client, _ = test_app_client

    resp = client.post(
        "/api/coupons",
        json=dict(COUPON_PAYLOAD, type="PercentageDiscount", discount_value=0),
        headers=manager_headers,
    )

    assert resp.status_code == 400
    assert resp.json()["errors"] == [
        "Discount value must be greater than 0 for percentage and fixed discounts"
    ]


def test_create_free_item_coupon_for_unknown_item(test_app_client, manager_headers):
    client, _ = test_app_client

    resp = client.post(
        "/api/coupons",
        json=dict(
            COUPON_PAYLOAD, type="FreeItem", discount_value=0, specific_menu_item_id="missing"
        ),
        headers=manager_headers,
    )

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Menu item not found"}


def test_available_lists_only_active_unexpired(authorized_client, coupon_in_db, make_menu_item):
    client, _, _ = authorized_client
    drink = make_menu_item(name="Lemonade", price="5.00", category=MenuCategory.DRINK)
    coupon_in_db(
        name="Free drink",
        type=CouponType.FREE_ITEM,
        discount_value=Decimal("0"),
        specific_menu_item_id=drink.id,
    )
    coupon_in_db(name="Retired", is_active=False)
    coupon_in_db(name="Old", expires_at=utcnow() - timedelta(days=1))

    resp = client.get("/api/coupons/available")

    assert resp.status_code == 200
    coupons = resp.json()
    assert [c["name"] for c in coupons] == ["Free drink"]
    assert coupons[0]["specific_menu_item_name"] == "Lemonade"


def test_purchase_coupon(authorized_client, coupon_in_db, test_session):
    client, user, session_factory = authorized_client
    coupon = coupon_in_db(expires_at=utcnow() + timedelta(days=30))
    test_session.add(LoyaltyAccount(user_id=user.id, points=250))
    test_session.commit()

    resp = client.post(f"/api/coupons/{coupon.id}/purchase")

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Coupon 'Ten off' purchased successfully",
        "remaining_points": 150,
    }

    mine = client.get("/api/coupons/mine").json()
    assert len(mine) == 1
    assert mine[0]["coupon_id"] == coupon.id
    assert mine[0]["coupon_name"] == "Ten off"
    assert mine[0]["is_used"] is False
    assert mine[0]["expires_at"] is not None

    with session_factory() as session:
        entry = session.query(LoyaltyTransaction).one()
        assert entry.points_change == -100
        assert entry.type == LoyaltyTransactionType.REDEEMED
        assert entry.description == "Purchased coupon: Ten off"


def test_purchase_checks_run_in_order(authorized_client, coupon_in_db, test_session):
    client, user, _ = authorized_client
    inactive = coupon_in_db(is_active=False, expires_at=utcnow() - timedelta(days=1))
    expired = coupon_in_db(expires_at=utcnow() - timedelta(days=1))
    valid = coupon_in_db()

    def message(coupon_id):
        resp = client.post(f"/api/coupons/{coupon_id}/purchase")
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        return resp.json()["message"]

    assert message("missing") == "Coupon not found"
    assert message(inactive.id) == "Coupon is not available"
    assert message(expired.id) == "Coupon has expired"
    assert message(valid.id) == "Loyalty account not found"

    test_session.add(LoyaltyAccount(user_id=user.id, points=99))
    test_session.commit()
    assert message(valid.id) == "Insufficient points"


def test_delete_coupon_refunds_unused_holders(
    test_app_client, manager_headers, coupon_in_db, make_user, test_session
):
    client, session_factory = test_app_client
    coupon = coupon_in_db(name="Retiring")
    holder = make_user()
    spender = make_user()
    test_session.add_all(
        [
            LoyaltyAccount(user_id=holder.id, points=0),
            UserCoupon(user_id=holder.id, coupon_id=coupon.id),
            UserCoupon(user_id=spender.id, coupon_id=coupon.id, is_used=True),
        ]
    )
    test_session.commit()

    resp = client.delete(f"/api/coupons/{coupon.id}", headers=manager_headers)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Coupon deleted. Refunded 1 users"}
    with session_factory() as session:
        assert session.get(Coupon, coupon.id) is None
        assert session.query(UserCoupon).count() == 0
        account = session.query(LoyaltyAccount).filter(LoyaltyAccount.user_id == holder.id).one()
        assert account.points == 100
        refund = session.query(LoyaltyTransaction).one()
        assert refund.type == LoyaltyTransactionType.ADJUSTED
        assert refund.description == "Refund for deleted coupon: Retiring"


def test_delete_missing_coupon(test_app_client, manager_headers):
    client, _ = test_app_client

    resp = client.delete("/api/coupons/missing", headers=manager_headers)

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Coupon not found"}
