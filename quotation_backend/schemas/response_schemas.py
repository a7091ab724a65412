# quotation_backend/schemas/response_schemas.py
from typing import Generic, TypeVar, Optional

from pydantic import BaseModel

T = TypeVar("T")


class ResponseMessage(BaseModel, Generic[T]):
    message: str
    data: Optional[T] = None
