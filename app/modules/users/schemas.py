from typing import Optional
from datetime import datetime

from app.core.schemas import ApiModel


class UserResponse(ApiModel):
    """Public profile. The stored password hash has no field here and is never serialized."""
    id: str
    username: Optional[str] = None
    email: str
    last_login: Optional[datetime] = None
