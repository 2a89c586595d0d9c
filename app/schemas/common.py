"""
Shared schema building blocks for the Visa Processing System API
camelCase wire format, the response envelope and pagination metadata
"""

import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response schema base: camelCase on the wire, readable from ORM objects"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RequestModel(BaseModel):
    """
    Request schema base.
    Accepts camelCase or snake_case keys and rejects anything not declared.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class PaginationMeta(CamelModel):
    total: int
    page: int
    pages: int
    limit: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        return cls(total=total, page=page, pages=math.ceil(total / limit) if limit else 0, limit=limit)


class ResponseEnvelope(CamelModel):
    """Documented shape of every response body"""
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    errors: Optional[List[Any]] = None


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a success envelope.
    Pydantic models inside data are serialized by alias by FastAPI's encoder.
    """
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def error_body(message: str, errors: Optional[List[Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit
