from datetime import datetime

from pydantic import BaseModel


class StatsRead(BaseModel):
    users: int
    matches: int
    messages: int
    gifts: int

    class Config:
        from_attributes = True


class HealthRead(BaseModel):
    status: str
    timestamp: datetime
