import datetime as dt
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from database import get_db
from schemas import CalendarMonth, DayCell
from dependencies import get_actor
from permissions import Actor
from calendar_grid import InvalidMonthError, build_month_grid, shift_month
import crud

logger = logging.getLogger(__name__)

router = APIRouter()

def _neighbour(year: int, month: int, delta: int) -> Optional[dict]:
    try:
        year, month = shift_month(year, month, delta)
    except InvalidMonthError:
        return None
    return {"year": year, "month": month}

@router.get("", response_model=CalendarMonth)
async def get_month(
    year: Optional[int] = None,
    month: Optional[int] = None,
    selected: Optional[dt.date] = None,
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(get_actor)
):
    """
    Month grid with the requester's visible events placed in their day cells
    - year, month: the month to show, defaulting to the current one
    - selected: a date to flag as selected
    """
    today = dt.date.today()
    if year is None:
        year = today.year
    if month is None:
        month = today.month

    try:
        events = crud.list_events_for_month(db, year, month, actor)
        weeks = build_month_grid(year, month, events, actor, today=today, selected=selected)
    except InvalidMonthError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Error loading calendar {year}-{month:02d}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error loading calendar"
        )

    return {
        "year": year,
        "month": month,
        "prev": _neighbour(year, month, -1),
        "next": _neighbour(year, month, 1),
        "weeks": [[DayCell.model_validate(cell) for cell in row] for row in weeks],
    }
