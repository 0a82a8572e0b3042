# backend/ecom_api/db/models/order_model.py
"""
Este archivo contiene los modelos de pedido para la aplicación.

Un pedido es una instantánea inmutable: las direcciones se copian como JSON
en la propia fila y cada línea guarda los datos del producto en el momento
de la compra, sin claves foráneas hacia el catálogo.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, UniqueConstraint

from ecom_api.db.database import Base, JSONType, new_uuid, utcnow

class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_uuid)
    order_id = Column(Integer, nullable=False, unique=True, index=True)
    status = Column(String(16), nullable=False, default='pending')
    payment = Column(String(16), nullable=False, default='unpaid')
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    contact_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    currency = Column(String(3), nullable=False)
    billing_address = Column(JSONType, nullable=False)
    shipping_address = Column(JSONType, nullable=False)
    total_ex_vat = Column(Integer, nullable=False)
    vat_total = Column(Integer, nullable=False)
    total_inc_vat = Column(Integer, nullable=False)
    stripe_pi = Column(String(255), nullable=True)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Order(id={self.id}, order_id={self.order_id}, status='{self.status}', payment='{self.payment}')>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_uuid)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), nullable=False)
    path = Column(String(255), nullable=False)
    sku = Column(String(64), nullable=False)
    name = Column(String(255), nullable=False)
    qty = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)
    discount = Column(Integer, nullable=True)
    tax_code = Column(String(16), nullable=False)
    vat = Column(Integer, nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, sku='{self.sku}')>"


class OrderCounter(Base):
    """Fila única que numera los pedidos; se bloquea con FOR UPDATE."""
    __tablename__ = "order_counter"

    id = Column(Integer, primary_key=True)
    last_order_id = Column(Integer, nullable=False, default=0)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=new_uuid)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    typ = Column(String(16), nullable=False, default='stripe')
    payment_intent_id = Column(String(255), nullable=False)
    result = Column(Text, nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('order_id', 'payment_intent_id', name='uq_payment_order_intent'),
    )
