from datetime import timedelta
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from . import models, schemas

DEFAULT_DELIVERY_WINDOW = timedelta(minutes=45)

# Scalar fields an update may overwrite
UPDATABLE_FIELDS = (
    "customer_name",
    "customer_address",
    "customer_phone",
    "customer_email",
    "notes",
    "delivery_person",
    "delivery_phone",
    "estimated_delivery",
)


def calculate_total(items: Iterable) -> float:
    """Sum of unit price times quantity over the items"""
    return sum(item.price * item.quantity for item in items)


def _live_orders(db: Session):
    return db.query(models.Order).filter(models.Order.deleted_at.is_(None))


def list_orders(db: Session) -> List[models.Order]:
    """Get all orders with their items, in no particular order"""
    return _live_orders(db).options(selectinload(models.Order.items)).all()


def get_order(db: Session, order_id: int) -> Optional[models.Order]:
    return (
        _live_orders(db)
        .options(selectinload(models.Order.items))
        .filter(models.Order.id == order_id)
        .first()
    )


def create_order(db: Session, order: schemas.OrderCreate) -> models.Order:
    """Persist a new pending order together with its items"""
    now = models.utcnow()
    db_order = models.Order(
        customer_name=order.customer_name,
        customer_address=order.customer_address,
        customer_phone=order.customer_phone,
        customer_email=order.customer_email,
        notes=order.notes,
        status=models.OrderStatus.PENDING.value,
        total_amount=calculate_total(order.items),
        estimated_delivery=order.estimated_delivery or now + DEFAULT_DELIVERY_WINDOW,
        created_at=now,
        updated_at=now,
        items=[models.OrderItem(**item.model_dump()) for item in order.items],
    )
    db.add(db_order)
    db.commit()
    db.refresh(db_order)
    return db_order


def update_order(db: Session, order_id: int, changes: schemas.OrderUpdate) -> Optional[models.Order]:
    """Apply a partial update.

    Only fields that were supplied with a non-empty value are written.
    A non-empty item list replaces all existing items and recomputes the
    total.
    """
    db_order = get_order(db, order_id)
    if db_order is None:
        return None

    supplied = changes.model_dump(exclude_unset=True, include=set(UPDATABLE_FIELDS))
    for key, value in supplied.items():
        if value is None or value == "":
            continue
        setattr(db_order, key, value)

    if changes.items:
        # delete-orphan cascade removes the previous items on flush
        db_order.items = [models.OrderItem(**item.model_dump()) for item in changes.items]
        db_order.total_amount = calculate_total(changes.items)

    db_order.updated_at = models.utcnow()
    db.commit()
    db.refresh(db_order)
    return db_order


def delete_order(db: Session, order_id: int) -> bool:
    """Soft-delete an order. Returns False when there was no live order to delete."""
    db_order = _live_orders(db).filter(models.Order.id == order_id).first()
    if db_order is None:
        return False
    db_order.deleted_at = models.utcnow()
    db.commit()
    return True


def set_status(db: Session, order_id: int, status: models.OrderStatus) -> Optional[models.Order]:
    db_order = get_order(db, order_id)
    if db_order is None:
        return None

    db_order.status = models.OrderStatus(status).value
    db_order.updated_at = models.utcnow()
    db.commit()
    db.refresh(db_order)
    return db_order


def compute_statistics(db: Session) -> schemas.OrderStats:
    """Order counts and revenue over all live orders"""
    total_orders = _live_orders(db).count()
    pending_orders = _live_orders(db).filter(
        models.Order.status == models.OrderStatus.PENDING.value
    ).count()
    delivered_orders = _live_orders(db).filter(
        models.Order.status == models.OrderStatus.DELIVERED.value
    ).count()
    total_revenue = (
        db.query(func.coalesce(func.sum(models.Order.total_amount), 0.0))
        .filter(models.Order.deleted_at.is_(None))
        .scalar()
    )
    return schemas.OrderStats(
        total_orders=total_orders,
        pending_orders=pending_orders,
        delivered_orders=delivered_orders,
        total_revenue=float(total_revenue or 0),
    )
