# backend/ecom_api/schemas/common_schema.py
"""
Piezas compartidas por todos los esquemas de la API.

- UUIDStr: identificador v4 en minúsculas de 36 caracteres.
- StrictModel: modelos de petición que rechazan campos desconocidos.
  La decodificación estricta se decide por modelo heredando de esta clase.
- ListResponse: envoltorio {object: "list", data: [...]}.
"""

from typing import Annotated, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, StringConstraints

UUID_PATTERN = r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"

UUIDStr = Annotated[str, StringConstraints(pattern=UUID_PATTERN)]

T = TypeVar("T")


class StrictModel(BaseModel):
    """Base para peticiones con decodificación estricta."""
    model_config = ConfigDict(extra="forbid")


class ListResponse(BaseModel, Generic[T]):
    object: str = "list"
    data: List[T]
