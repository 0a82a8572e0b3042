# backend/ecom_api/schemas/webhook_schema.py
"""
Esquemas de webhooks y del sobre de entrega push de Pub/Sub.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, field_validator

from .common_schema import StrictModel

_http_url = TypeAdapter(HttpUrl)


def check_webhook_url(v: str) -> str:
    """Exige una URL https absoluta y la conserva tal cual se recibió."""
    if _http_url.validate_python(v).scheme != "https":
        raise ValueError("webhook url must use https")
    return v


class WebhookCreate(StrictModel):
    url: str
    events: List[str] = Field(..., min_length=1)

    @field_validator("url")
    @classmethod
    def check_url(cls, v):
        return check_webhook_url(v)


class WebhookUpdate(StrictModel):
    url: Optional[str] = None
    events: Optional[List[str]] = Field(None, min_length=1)
    enabled: Optional[bool] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v):
        return check_webhook_url(v) if v is not None else v


class WebhookResponse(BaseModel):
    object: str = "webhook"
    id: str
    signing_key: str
    url: str
    events: List[str]
    enabled: bool
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


# ========================================
# SOBRE PUSH DE PUB/SUB
# ========================================

class PubSubMessage(BaseModel):
    message_id: str = Field(..., validation_alias=AliasChoices("message_id", "messageId"))
    data: str = ""
    attributes: Dict[str, str] = Field(default_factory=dict)


class PubSubEnvelope(BaseModel):
    message: PubSubMessage
    subscription: Optional[str] = None
