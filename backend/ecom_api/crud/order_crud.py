# backend/ecom_api/crud/order_crud.py
"""
Este archivo contiene las operaciones CRUD para el modelo Order.

Proporciona la numeración monotónica de pedidos, el alta de pedidos con sus
líneas, las lecturas y el registro idempotente de pagos.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.order_model import Order, OrderCounter, OrderItem, Payment

COUNTER_ROW_ID = 1


async def ensure_order_counter(db: AsyncSession) -> bool:
    """Inserta la fila única del contador si falta. Devuelve True si la creó."""
    result = await db.execute(select(OrderCounter).filter(OrderCounter.id == COUNTER_ROW_ID))
    if result.scalars().first() is not None:
        return False
    db.add(OrderCounter(id=COUNTER_ROW_ID, last_order_id=0))
    await db.flush()
    return True


async def get_next_order_id(db: AsyncSession) -> Optional[int]:
    """
    Reserva el siguiente número de pedido.

    La fila del contador se bloquea con FOR UPDATE hasta el final de la
    transacción, así que dos pedidos concurrentes nunca comparten número.
    La fila se siembra al arrancar; aquí nunca se inserta y si falta se
    devuelve None.
    """
    result = await db.execute(
        select(OrderCounter).filter(OrderCounter.id == COUNTER_ROW_ID).with_for_update()
    )
    counter = result.scalars().first()
    if counter is None:
        return None
    counter.last_order_id += 1
    await db.flush()
    return counter.last_order_id


async def create_order(db: AsyncSession, order_fields: dict, items: List[dict]) -> Order:
    db_order = Order(**order_fields)
    db.add(db_order)
    await db.flush()
    for item in items:
        db.add(OrderItem(order_id=db_order.id, **item))
    await db.flush()
    return db_order


async def get_order(db: AsyncSession, order_id: str, for_update: bool = False) -> Optional[Order]:
    query = select(Order).filter(Order.id == order_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalars().first()


async def get_order_items(db: AsyncSession, order_id: str) -> List[OrderItem]:
    result = await db.execute(
        select(OrderItem).filter(OrderItem.order_id == order_id).order_by(OrderItem.created, OrderItem.id)
    )
    return list(result.scalars().all())


async def get_orders(db: AsyncSession, user_id: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Order]:
    query = select(Order)
    if user_id is not None:
        query = query.filter(Order.user_id == user_id)
    result = await db.execute(query.order_by(Order.order_id.desc()).offset(skip).limit(limit))
    return list(result.scalars().all())


async def get_payment(db: AsyncSession, order_id: str, payment_intent_id: str) -> Optional[Payment]:
    result = await db.execute(
        select(Payment).filter(Payment.order_id == order_id, Payment.payment_intent_id == payment_intent_id)
    )
    return result.scalars().first()


async def create_payment(db: AsyncSession, order_id: str, payment_intent_id: str, result_body: str) -> Payment:
    db_payment = Payment(order_id=order_id, typ="stripe", payment_intent_id=payment_intent_id, result=result_body)
    db.add(db_payment)
    await db.flush()
    return db_payment
