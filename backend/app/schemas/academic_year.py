import re

from pydantic import BaseModel, Field, field_validator


class AcademicYearBase(BaseModel):
    title: str = Field(min_length=7, max_length=100)
    is_current: bool = False

    @field_validator("title")
    @classmethod
    def normalize_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not re.match(r"^\d{4}\s*-\s*\d{4}$", cleaned):
            raise ValueError("title must follow YYYY-YYYY format")
        start_raw, end_raw = cleaned.replace(" ", "").split("-")
        if int(end_raw) != int(start_raw) + 1:
            raise ValueError("title end year must be start year + 1")
        return f"{int(start_raw)}-{int(end_raw)}"


class AcademicYearCreate(AcademicYearBase):
    pass


class AcademicYearUpdate(BaseModel):
    is_current: bool | None = None


class AcademicYearOut(AcademicYearBase):
    id: str

    model_config = {"from_attributes": True}
