from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Envelope wrapping every successful response
class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    statusCode: int = 200
    data: Optional[T] = None
    message: str = ""


# Envelope for failures, rendered by the exception handlers
class ErrorResponse(BaseModel):
    success: bool = False
    statusCode: int
    message: str


# Paginated list payload
class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int


def ok(data=None, message: str = "", status_code: int = 200) -> dict:
    return {"success": True, "statusCode": status_code, "data": data, "message": message}


def page_of(items, total: int, page: int, page_size: int) -> dict:
    total_pages = (total + page_size - 1) // page_size if page_size else 0
    return {"items": items, "total": total, "page": page, "page_size": page_size, "total_pages": total_pages}
