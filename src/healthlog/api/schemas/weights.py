from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class WeightPayload(BaseModel):
    id: int | None = None
    date_time: datetime
    value: float = Field(gt=0)
    owner: str | None = Field(default=None, min_length=1, max_length=50)
