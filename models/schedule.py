from pydantic import Field
from typing import Dict, List

from models.goal import StoredModel


class WeeklySchedule(StoredModel):
    week_start_date: str = Field(
        description="ISO date of the Monday starting the week"
    )
    scheduled_days: Dict[str, List[int]] = Field(
        default_factory=dict,
        description="Planned weekday indices keyed by goal ID"
    )
