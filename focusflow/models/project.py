"""Project data model."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Project:
    """A named bucket that tasks may point at by id."""
    id: str
    name: str
    color: str  # Front-end color token, e.g. "sky", "violet"
    created_at: datetime
