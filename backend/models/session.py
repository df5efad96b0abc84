from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Session(BaseModel):
    session_id: str
    created_at: datetime
    expires_at: datetime
    data: dict[str, Any] = Field(default_factory=dict)   # reserved, nothing writes here yet

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
