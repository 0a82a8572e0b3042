# backend/ecom_api/db/models/user_model.py
"""
Se encarga de definir los modelos de usuario y direcciones.
"""

from sqlalchemy import Column, String, ForeignKey, DateTime

from ecom_api.db.database import Base, new_uuid, utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_uuid)
    # uid del servicio de identidad externo
    uid = Column(String(128), nullable=True, unique=True)
    price_list_id = Column(String(36), ForeignKey("price_lists.id"), nullable=True)
    role = Column(String(16), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    firstname = Column(String(255), nullable=False, default="")
    lastname = Column(String(255), nullable=False, default="")
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Address(Base):
    __tablename__ = "addresses"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    typ = Column(String(8), nullable=False)
    contact_name = Column(String(255), nullable=False)
    addr1 = Column(String(255), nullable=False)
    addr2 = Column(String(255), nullable=True)
    city = Column(String(255), nullable=False)
    county = Column(String(255), nullable=True)
    postcode = Column(String(32), nullable=False)
    country = Column(String(2), nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
