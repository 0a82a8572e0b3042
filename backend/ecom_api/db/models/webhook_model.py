# backend/ecom_api/db/models/webhook_model.py
from sqlalchemy import Column, String, Boolean, DateTime, Text

from ecom_api.db.database import Base, JSONType, new_uuid, utcnow

class Webhook(Base):
    __tablename__ = "webhooks"

    id = Column(String(36), primary_key=True, default=new_uuid)
    # 32 bytes aleatorios codificados en base58
    signing_key = Column(String(64), nullable=False)
    url = Column(Text, nullable=False, unique=True)
    events = Column(JSONType, nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
