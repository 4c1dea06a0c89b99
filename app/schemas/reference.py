from typing import Optional
from pydantic import BaseModel, Field


class UserOut(BaseModel):
    id: int
    username: str
    full_name: str
    role: str


class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    full_name: str = ""
    role: str = "user"


class UserUpdate(BaseModel):
    username: str = Field(min_length=1)
    full_name: str = ""
    role: str = "user"
    password: Optional[str] = None  # only changed when provided


class ShiftHoursIn(BaseModel):
    name: str
    start_time: str = ""
    end_time: str = ""


class ShiftHoursOut(ShiftHoursIn):
    id: int


class EventTitleIn(BaseModel):
    title: str


class EventTitleOut(EventTitleIn):
    id: int


class CreatedResponse(BaseModel):
    id: int
