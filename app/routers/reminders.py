"""
Reminders router - CRUD for the signed-in user's reminders.

Same ownership rule as notes: foreign ids answer 404.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user
from app.models.reminder import Reminder
from app.models.user import UserCredential
from app.schemas.reminder import ReminderCreate, ReminderOut, ReminderUpdate

# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api/reminders", tags=["reminders"])


def get_reminder_or_404(db: Session, reminder_id: UUID, user_id: UUID) -> Reminder:
    """
    Raises:
        404: If reminder not found or doesn't belong to user
    """
    reminder = db.query(Reminder).filter(
        Reminder.id == reminder_id,
        Reminder.user_id == user_id,
    ).first()

    if not reminder:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Reminder not found",
        )

    return reminder


# ---------------------------------------------------------------------------
# CREATE REMINDER
# ---------------------------------------------------------------------------

@router.post("", response_model=ReminderOut, status_code=status.HTTP_201_CREATED)
def create_reminder(
    payload: ReminderCreate,
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    reminder = Reminder(
        user_id=current_user.id,
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
    )
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    return reminder


# ---------------------------------------------------------------------------
# LIST REMINDERS
# ---------------------------------------------------------------------------

@router.get("", response_model=list[ReminderOut])
def list_reminders(
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
    completed: Optional[bool] = Query(None, description="Filter by completion state"),
):
    """
    List the user's reminders, newest first.

    Query params:
        completed: If set, only return reminders in that state
    """
    query = db.query(Reminder).filter(Reminder.user_id == current_user.id)
    if completed is not None:
        query = query.filter(Reminder.completed == completed)
    return query.order_by(Reminder.created_at.desc()).all()


# ---------------------------------------------------------------------------
# GET SINGLE REMINDER
# ---------------------------------------------------------------------------

@router.get("/{reminder_id}", response_model=ReminderOut)
def get_reminder(
    reminder_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    return get_reminder_or_404(db, reminder_id, current_user.id)


# ---------------------------------------------------------------------------
# UPDATE REMINDER
# ---------------------------------------------------------------------------

@router.patch("/{reminder_id}", response_model=ReminderOut)
def update_reminder(
    reminder_id: UUID,
    payload: ReminderUpdate,
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    """
    Update a reminder.

    Only provided fields will be updated; description and due_date may be
    cleared by sending null.
    """
    reminder = get_reminder_or_404(db, reminder_id, current_user.id)

    update_data = payload.model_dump(exclude_unset=True)
    # title and completed are NOT NULL columns
    for field in ("title", "completed"):
        if update_data.get(field, ...) is None:
            update_data.pop(field)
    for field, value in update_data.items():
        setattr(reminder, field, value)

    db.commit()
    db.refresh(reminder)
    return reminder


# ---------------------------------------------------------------------------
# DELETE REMINDER
# ---------------------------------------------------------------------------

@router.delete("/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reminder(
    reminder_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    reminder = get_reminder_or_404(db, reminder_id, current_user.id)
    db.delete(reminder)
    db.commit()
    return None
