from datetime import datetime

import pytest

from order_delivery_service import models
from order_delivery_service.models import OrderStatus
from order_delivery_service.tracking import STATUS_MESSAGES, build_status_history, build_tracking_info

CREATED = datetime(2024, 3, 1, 12, 0)
UPDATED = datetime(2024, 3, 1, 12, 30)


def make_order(status):
    return models.Order(
        id=7,
        customer_name="Jane",
        customer_address="1 Main St",
        customer_phone="555",
        status=status.value,
        created_at=CREATED,
        updated_at=UPDATED,
    )


@pytest.mark.parametrize(
    "status, expected",
    [
        (OrderStatus.PENDING, ["pending"]),
        (OrderStatus.CONFIRMED, ["pending", "confirmed"]),
        (OrderStatus.OUT_FOR_DELIVERY, ["pending", "confirmed", "preparing", "out_for_delivery"]),
        (OrderStatus.DELIVERED, ["pending", "confirmed", "preparing", "out_for_delivery", "delivered"]),
        (OrderStatus.CANCELLED, ["pending"]),
    ],
)
def test_history_follows_status_sequence(status, expected):
    history = build_status_history(make_order(status))

    assert [entry.status.value for entry in history] == expected


def test_history_timestamps_and_messages():
    history = build_status_history(make_order(OrderStatus.PREPARING))

    assert history[0].timestamp == CREATED
    assert history[0].message == "Order placed"
    assert all(entry.timestamp == UPDATED for entry in history[1:])
    assert [entry.message for entry in history[1:]] == [
        "Order confirmed by restaurant",
        "Order is being prepared",
    ]


def test_every_status_has_a_message():
    assert set(STATUS_MESSAGES) == set(OrderStatus)


def test_tracking_info_projection():
    order = make_order(OrderStatus.DELIVERED)
    order.delivery_person = "Sam"

    info = build_tracking_info(order)

    assert info.order_id == 7
    assert info.status == OrderStatus.DELIVERED
    assert info.delivery_person == "Sam"
    assert info.updated_at == UPDATED
    assert len(info.status_history) == 5
