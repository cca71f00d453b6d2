import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer

# User schemas
class UserBase(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)

class UserCreate(UserBase):
    password: str = Field(min_length=1)

class User(BaseModel):
    id: int
    username: str
    name: str
    is_admin: bool
    join_date: Optional[dt.date] = None

    class Config:
        from_attributes = True

class ProfileUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)

# Authentication schemas
class UserLogin(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)

class Token(BaseModel):
    success: bool = True
    access_token: str
    token_type: str
    user: User

class TokenData(BaseModel):
    username: Optional[str] = None

class AuthStatus(BaseModel):
    isLoggedIn: bool
    user: Optional[User] = None

class UserResponse(BaseModel):
    success: bool = True
    user: User

class Ack(BaseModel):
    success: bool = True

# Event schemas
class EventBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    date: dt.date  # Format: YYYY-MM-DD
    time: dt.time  # Format: HH:MM
    content: str = ""
    important: bool = False

class EventCreate(EventBase):
    is_private: bool = True

class EventUpdate(EventBase):
    is_private: Optional[bool] = None

class Event(BaseModel):
    id: int
    date: dt.date
    time: dt.time
    title: str
    content: str
    important: bool
    is_private: bool
    author: str
    author_name: str

    class Config:
        from_attributes = True

    @field_serializer("time")
    def serialize_time(self, value: dt.time) -> str:
        return value.strftime("%H:%M")

class EventList(BaseModel):
    success: bool = True
    events: List[Event]

class EventDetail(BaseModel):
    success: bool = True
    event: Event

class EventCreated(BaseModel):
    success: bool = True
    eventId: int

# Post schemas
class PostCategory(str, Enum):
    COMMUNITY = "community"
    NOTICE = "notice"

class PostBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)

class PostCreate(PostBase):
    type: PostCategory

class PostUpdate(PostBase):
    type: PostCategory = PostCategory.COMMUNITY

class Post(BaseModel):
    id: int
    title: str
    content: str
    author: str
    author_name: str
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    type: PostCategory

    class Config:
        from_attributes = True

class PostList(BaseModel):
    success: bool = True
    posts: List[Post]

class PostDetail(BaseModel):
    success: bool = True
    post: Post

class PostCreated(BaseModel):
    success: bool = True
    postId: int
    type: PostCategory

# Calendar schemas
class MonthRef(BaseModel):
    year: int
    month: int

class DayCell(BaseModel):
    is_empty: bool
    date: Optional[dt.date] = None
    day_number: Optional[int] = None
    is_weekend: bool = False
    is_today: bool = False
    is_selected: bool = False
    events: List[Event] = []

    class Config:
        from_attributes = True

class CalendarMonth(BaseModel):
    success: bool = True
    year: int
    month: int
    # None at the edges of the supported year range
    prev: Optional[MonthRef] = None
    next: Optional[MonthRef] = None
    weeks: List[List[DayCell]]
