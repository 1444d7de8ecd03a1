from pydantic import BaseModel, EmailStr, Field


class TeacherBase(BaseModel):
    full_name: str = Field(min_length=1, max_length=200)
    short_name: str = Field(min_length=1, max_length=20)
    email: EmailStr
    department: str = Field(default="General", min_length=1, max_length=200)
    designation: str = Field(default="Lecturer", min_length=1, max_length=200)
    is_active: bool = True


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=200)
    short_name: str | None = Field(default=None, min_length=1, max_length=20)
    email: EmailStr | None = None
    department: str | None = Field(default=None, min_length=1, max_length=200)
    designation: str | None = Field(default=None, min_length=1, max_length=200)
    is_active: bool | None = None


class TeacherOut(TeacherBase):
    id: str

    model_config = {"from_attributes": True}
