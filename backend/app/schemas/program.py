from pydantic import BaseModel, Field, field_validator


class ProgramBase(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=200)
    department: str = Field(default="General", min_length=1, max_length=200)
    total_semesters: int = Field(default=8, ge=1, le=20)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()


class ProgramCreate(ProgramBase):
    pass


class ProgramUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    department: str | None = Field(default=None, min_length=1, max_length=200)
    total_semesters: int | None = Field(default=None, ge=1, le=20)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class ProgramOut(ProgramBase):
    id: str

    model_config = {"from_attributes": True}
