from pydantic import BaseModel, Field, field_validator


class SubjectBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    program_id: str | None = Field(default=None, max_length=36)
    semester: int | None = Field(default=None, ge=1, le=20)
    weekly_hours: int = Field(default=3, ge=0, le=40)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    program_id: str | None = Field(default=None, max_length=36)
    semester: int | None = Field(default=None, ge=1, le=20)
    weekly_hours: int | None = Field(default=None, ge=0, le=40)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class SubjectOut(SubjectBase):
    id: str

    model_config = {"from_attributes": True}
