from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    description: str
    created_at: datetime
