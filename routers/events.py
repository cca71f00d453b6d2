import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from database import get_db
from models import User
from schemas import Event as EventSchema, EventCreate, EventUpdate, EventList, EventDetail, EventCreated, Ack
from dependencies import get_actor, get_current_user, enforce
from permissions import Actor, Category, Operation, Resource
from calendar_grid import InvalidMonthError
import crud

logger = logging.getLogger(__name__)

router = APIRouter()

def _load_event(db: Session, event_id: int):
    try:
        db_event = crud.get_event(db, event_id)
    except SQLAlchemyError as e:
        logger.error(f"Error loading event {event_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error loading event"
        )
    if not db_event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found"
        )
    return db_event

@router.get("", response_model=EventList)
async def list_events(
    year: Optional[int] = None,
    month: Optional[int] = None,
    date: Optional[dt.date] = None,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor)
):
    """
    List the events visible to the requester
    - date: a single day (YYYY-MM-DD); takes precedence over year/month
    - year, month: a whole month, defaulting to the current one
    """
    today = dt.date.today()
    try:
        if date is not None:
            events = crud.list_events_for_date(db, date, actor)
        else:
            events = crud.list_events_for_month(
                db,
                today.year if year is None else year,
                today.month if month is None else month,
                actor,
            )
    except InvalidMonthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error listing events: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error loading events"
        )

    return {"events": [EventSchema.model_validate(event) for event in events]}

@router.post("", response_model=EventCreated, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create an event owned by the logged-in user (private unless stated otherwise)"""
    enforce(Actor.from_user(current_user), Resource(Category.EVENT), Operation.CREATE)

    try:
        db_event = crud.create_event(db, event, current_user.id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating event for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating event"
        )

    logger.info(f"User {current_user.id} created event {db_event.id} on {db_event.date}")
    return {"eventId": db_event.id}

@router.get("/{event_id}", response_model=EventDetail)
async def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor)
):
    """Get a single event; private events are only shown to their owner"""
    db_event = _load_event(db, event_id)
    enforce(actor, Resource.for_event(db_event), Operation.VIEW)
    return {"event": EventSchema.model_validate(db_event)}

@router.put("/{event_id}", response_model=Ack)
async def update_event(
    event_id: int,
    event: EventUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update an event (owner or admin)"""
    db_event = _load_event(db, event_id)
    enforce(Actor.from_user(current_user), Resource.for_event(db_event), Operation.EDIT)

    try:
        crud.update_event(db, db_event, event)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating event {event_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error updating event"
        )

    logger.info(f"User {current_user.id} updated event {event_id}")
    return {"success": True}

@router.delete("/{event_id}", response_model=Ack)
async def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete an event (owner or admin)"""
    db_event = _load_event(db, event_id)
    enforce(Actor.from_user(current_user), Resource.for_event(db_event), Operation.DELETE)

    try:
        crud.delete_event(db, db_event)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting event {event_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error deleting event"
        )

    logger.info(f"User {current_user.id} deleted event {event_id}")
    return {"success": True}
