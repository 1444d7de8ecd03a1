import re

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.time_slot import SlotCategory

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class TimeSlotBase(BaseModel):
    label: str = Field(min_length=1, max_length=50)
    start_time: str
    end_time: str
    sort_order: int = Field(default=0, ge=0, le=100)
    is_break: bool = False
    category: SlotCategory = SlotCategory.morning

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "TimeSlotBase":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class TimeSlotCreate(TimeSlotBase):
    slot_index: int = Field(ge=0, le=100)


class TimeSlotUpdate(BaseModel):
    label: str | None = Field(default=None, min_length=1, max_length=50)
    start_time: str | None = None
    end_time: str | None = None
    sort_order: int | None = Field(default=None, ge=0, le=100)
    is_break: bool | None = None
    category: SlotCategory | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value


class TimeSlotOut(TimeSlotBase):
    slot_index: int

    model_config = {"from_attributes": True}
