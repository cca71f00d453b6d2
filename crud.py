import datetime as dt
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from calendar_grid import days_in_month
from models import User, Event, CommunityPost, Notice
from permissions import Actor
from schemas import UserCreate, EventCreate, EventUpdate, PostCategory, PostBase

# One table per board; the category is resolved here and nowhere else.
POST_MODELS = {
    PostCategory.COMMUNITY: CommunityPost,
    PostCategory.NOTICE: Notice,
}


# --- Users ---

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()

def create_user(db: Session, user: UserCreate, password_hash: str, is_admin: bool = False) -> User:
    db_user = User(
        username=user.username,
        password=password_hash,
        name=user.name,
        is_admin=is_admin,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def update_user_profile(db: Session, user: User, name: str) -> User:
    user.name = name
    db.commit()
    db.refresh(user)
    return user

def set_admin(db: Session, user: User, is_admin: bool = True) -> User:
    user.is_admin = is_admin
    db.commit()
    db.refresh(user)
    return user


# --- Events ---

def _visible_events(db: Session, actor: Optional[Actor]):
    query = db.query(Event)
    if actor is None:
        return query.filter(Event.is_private.is_(False))
    return query.filter(or_(Event.is_private.is_(False), Event.author_id == actor.id))

def list_events_for_month(db: Session, year: int, month: int, actor: Optional[Actor]) -> List[Event]:
    """Events in ``year``/``month`` that ``actor`` may see, by date then time."""
    last = dt.date(year, month, days_in_month(year, month))
    first = last.replace(day=1)
    return (
        _visible_events(db, actor)
        .filter(Event.date >= first, Event.date <= last)
        .order_by(Event.date.asc(), Event.time.asc(), Event.id.asc())
        .all()
    )

def list_events_for_date(db: Session, day: dt.date, actor: Optional[Actor]) -> List[Event]:
    return (
        _visible_events(db, actor)
        .filter(Event.date == day)
        .order_by(Event.time.asc(), Event.id.asc())
        .all()
    )

def get_event(db: Session, event_id: int) -> Optional[Event]:
    return db.get(Event, event_id)

def create_event(db: Session, event: EventCreate, author_id: int) -> Event:
    db_event = Event(
        date=event.date,
        time=event.time,
        title=event.title,
        content=event.content,
        important=event.important,
        is_private=event.is_private,
        author_id=author_id,
    )
    db.add(db_event)
    db.commit()
    db.refresh(db_event)
    return db_event

def update_event(db: Session, db_event: Event, event: EventUpdate) -> Event:
    """Overwrite the editable fields; visibility only changes when given."""
    db_event.date = event.date
    db_event.time = event.time
    db_event.title = event.title
    db_event.content = event.content
    db_event.important = event.important
    if event.is_private is not None:
        db_event.is_private = event.is_private
    db.commit()
    db.refresh(db_event)
    return db_event

def delete_event(db: Session, db_event: Event) -> None:
    db.delete(db_event)
    db.commit()


# --- Posts ---

def list_posts(db: Session, category: PostCategory, limit: int = 20) -> list:
    model = POST_MODELS[category]
    return (
        db.query(model)
        .order_by(model.created_at.desc(), model.id.desc())
        .limit(limit)
        .all()
    )

def get_post(db: Session, category: PostCategory, post_id: int):
    return db.get(POST_MODELS[category], post_id)

def create_post(db: Session, category: PostCategory, post: PostBase, author_id: int):
    db_post = POST_MODELS[category](
        title=post.title,
        content=post.content,
        author_id=author_id,
    )
    db.add(db_post)
    db.commit()
    db.refresh(db_post)
    return db_post

def update_post(db: Session, db_post, post: PostBase):
    db_post.title = post.title
    db_post.content = post.content
    db.commit()
    db.refresh(db_post)
    return db_post

def delete_post(db: Session, db_post) -> None:
    db.delete(db_post)
    db.commit()
