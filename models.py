import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, Date, Time, Boolean, ForeignKey
from sqlalchemy.orm import relationship, declared_attr
from sqlalchemy.sql import func
from database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    name = Column(String(100), nullable=False)
    join_date = Column(Date, nullable=False, default=datetime.date.today)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class AuthoredMixin:
    """Author link and the joined author fields exposed in API responses."""

    @declared_attr
    def author_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    @declared_attr
    def owner(cls):
        return relationship("User", lazy="joined")

    @property
    def author(self) -> str:
        return self.owner.username

    @property
    def author_name(self) -> str:
        return self.owner.name


class Event(AuthoredMixin, Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False, default="")
    important = Column(Boolean, nullable=False, default=False)
    is_private = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class PostMixin(AuthoredMixin):
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class CommunityPost(PostMixin, Base):
    __tablename__ = "community_posts"
    type = "community"


class Notice(PostMixin, Base):
    __tablename__ = "notices"
    type = "notice"
