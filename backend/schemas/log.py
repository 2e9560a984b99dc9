from typing import Optional, Any
from datetime import datetime

from schemas.common import ORMBase


class LogResponse(ORMBase):
    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None
