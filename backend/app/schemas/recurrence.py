from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.config import get_settings
from app.services.recurrence import Recurrence, RecurrenceType, WeekPattern, recurrence_errors


class RecurrenceIn(BaseModel):
    type: RecurrenceType = RecurrenceType.weekly
    pattern: WeekPattern | None = None
    custom_weeks: list[int] = Field(default_factory=list, max_length=52)

    @field_validator("custom_weeks")
    @classmethod
    def sort_custom_weeks(cls, value: list[int]) -> list[int]:
        return sorted(set(value))

    @model_validator(mode="after")
    def validate_descriptor(self) -> "RecurrenceIn":
        errors = recurrence_errors(
            self.type,
            self.pattern,
            self.custom_weeks,
            max_week_number=get_settings().max_week_number,
        )
        if errors:
            raise ValueError("; ".join(errors))
        return self

    def to_recurrence(self) -> Recurrence:
        return Recurrence(type=self.type, pattern=self.pattern, custom_weeks=tuple(self.custom_weeks))


class RecurrenceOut(BaseModel):
    type: RecurrenceType
    pattern: WeekPattern | None = None
    custom_weeks: list[int] = Field(default_factory=list)
    description: str
