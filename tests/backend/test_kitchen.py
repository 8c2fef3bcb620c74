from decimal import Decimal

import pytest

from backend.app.models import KitchenTask, Order
from core.constants import KitchenTaskStatus, OrderStatus


@pytest.fixture
def staff_client(test_app_client, worker, auth_headers):
    client, session_factory = test_app_client
    client.headers.update(auth_headers(worker))
    return client, session_factory


@pytest.fixture
def order_with_task(test_session, make_user):
    def _create(status=OrderStatus.PENDING, task_status=KitchenTaskStatus.NOT_STARTED):
        order = Order(
            user_id=make_user().id,
            status=status,
            subtotal=Decimal("30"),
            total=Decimal("30"),
        )
        test_session.add(order)
        test_session.flush()
        task = KitchenTask(order_id=order.id, assigned_to="unassigned", status=task_status)
        test_session.add(task)
        test_session.commit()
        return order, task

    return _create


def test_kitchen_requires_staff(authorized_client):
    client, _, _ = authorized_client

    assert client.get("/api/kitchen/tasks").status_code == 403


def test_list_tasks_returns_204_when_empty(staff_client):
    client, _ = staff_client

    resp = client.get("/api/kitchen/tasks")

    assert resp.status_code == 204
    assert resp.content == b""


def test_create_task_for_order(staff_client, order_with_task):
    client, _ = staff_client
    order, _ = order_with_task()

    resp = client.post(
        "/api/kitchen/tasks",
        json={"order_id": order.id, "assigned_to": "Chef Ion", "notes": "Gluten free"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "NotStarted"
    assert body["assigned_to"] == "Chef Ion"
    assert body["order_status"] == "Pending"


def test_create_task_validation_and_unknown_order(staff_client):
    client, _ = staff_client

    invalid = client.post("/api/kitchen/tasks", json={"notes": "n" * 101})
    assert invalid.status_code == 400
    assert set(invalid.json()["errors"]) == {
        "OrderId is required.",
        "AssignedTo is required.",
        "Notes cannot exceed 100 characters.",
    }

    unknown = client.post("/api/kitchen/tasks", json={"order_id": "missing", "assigned_to": "Chef"})
    assert unknown.status_code == 404


def test_list_tasks_by_status_is_case_insensitive(staff_client, order_with_task):
    client, _ = staff_client
    order_with_task(task_status=KitchenTaskStatus.PREPARING)
    order_with_task()

    resp = client.get("/api/kitchen/tasks/preparing")

    assert resp.status_code == 200
    assert [task["status"] for task in resp.json()] == ["Preparing"]
    assert client.get("/api/kitchen/tasks/ready").json() == []


def test_list_tasks_by_invalid_status(staff_client):
    client, _ = staff_client

    resp = client.get("/api/kitchen/tasks/burnt")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid status: burnt"


@pytest.mark.parametrize(
    "task_status,order_status",
    [
        ("Preparing", OrderStatus.PREPARING),
        ("Ready", OrderStatus.COMPLETED),
        ("completed", OrderStatus.COMPLETED),
        ("NotStarted", OrderStatus.PENDING),
    ],
)
def test_task_status_drives_order_status(staff_client, order_with_task, task_status, order_status):
    client, session_factory = staff_client
    order, task = order_with_task()

    resp = client.put(f"/api/kitchen/tasks/{task.id}", json={"status": task_status, "assigned_to": "Chef"})

    assert resp.status_code == 200
    assert resp.json()["assigned_to"] == "Chef"
    assert resp.json()["order_status"] == order_status.value
    with session_factory() as session:
        assert session.get(Order, order.id).status == order_status


def test_cancelled_order_task_can_only_be_completed(staff_client, order_with_task):
    client, session_factory = staff_client
    order, task = order_with_task(status=OrderStatus.CANCELLED)

    refused = client.put(f"/api/kitchen/tasks/{task.id}", json={"status": "Preparing"})
    assert refused.status_code == 400
    assert refused.json()["detail"] == "Order was cancelled; task can only be marked Completed."

    closed = client.put(f"/api/kitchen/tasks/{task.id}", json={"status": "Completed"})
    assert closed.status_code == 200
    assert closed.json()["status"] == "Completed"
    with session_factory() as session:
        assert session.get(Order, order.id).status == OrderStatus.CANCELLED


def test_update_task_errors(staff_client, order_with_task):
    client, _ = staff_client
    _, task = order_with_task()

    assert client.put("/api/kitchen/tasks/missing", json={"status": "Ready"}).status_code == 404
    invalid = client.put(f"/api/kitchen/tasks/{task.id}", json={"status": "Burnt"})
    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "Invalid status value."


def test_delete_task(staff_client, order_with_task):
    client, _ = staff_client
    _, task = order_with_task()

    resp = client.delete(f"/api/kitchen/task/{task.id}")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Kitchen task deleted."}
    assert client.delete(f"/api/kitchen/task/{task.id}").status_code == 404


def test_placed_order_shows_up_in_kitchen(test_app_client, make_menu_item, make_user, worker, auth_headers):
    client, _ = test_app_client
    item = make_menu_item()
    student = make_user()
    order_id = client.post(
        "/api/orders",
        json={"items": [{"menu_item_id": item.id, "quantity": 1}]},
        headers=auth_headers(student),
    ).json()["id"]

    tasks = client.get("/api/kitchen/tasks", headers=auth_headers(worker)).json()

    assert [task["order_id"] for task in tasks] == [order_id]
    assert tasks[0]["status"] == "NotStarted"
