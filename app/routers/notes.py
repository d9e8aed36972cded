"""
Notes router - CRUD for the signed-in user's notes.

Every query is filtered by the caller's user id; a note owned by someone
else answers 404 exactly like a missing one.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user
from app.models.note import Note
from app.models.user import UserCredential
from app.schemas.note import NoteCreate, NoteOut, NoteUpdate

# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api/notes", tags=["notes"])


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------

def get_note_or_404(db: Session, note_id: UUID, user_id: UUID) -> Note:
    """
    Get a note by ID, ensuring it belongs to the user.

    Raises:
        404: If note not found or doesn't belong to user
    """
    note = db.query(Note).filter(
        Note.id == note_id,
        Note.user_id == user_id,
    ).first()

    if not note:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Note not found",
        )

    return note


# ---------------------------------------------------------------------------
# CREATE NOTE
# ---------------------------------------------------------------------------

@router.post("", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
def create_note(
    payload: NoteCreate,
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    note = Note(
        user_id=current_user.id,
        title=payload.title,
        content=payload.content,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


# ---------------------------------------------------------------------------
# LIST NOTES
# ---------------------------------------------------------------------------

@router.get("", response_model=list[NoteOut])
def list_notes(
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    """List the user's notes, most recently edited first."""
    return (
        db.query(Note)
        .filter(Note.user_id == current_user.id)
        .order_by(Note.updated_at.desc())
        .all()
    )


# ---------------------------------------------------------------------------
# GET SINGLE NOTE
# ---------------------------------------------------------------------------

@router.get("/{note_id}", response_model=NoteOut)
def get_note(
    note_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    return get_note_or_404(db, note_id, current_user.id)


# ---------------------------------------------------------------------------
# UPDATE NOTE
# ---------------------------------------------------------------------------

@router.patch("/{note_id}", response_model=NoteOut)
def update_note(
    note_id: UUID,
    payload: NoteUpdate,
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    """
    Update a note.

    Only provided fields will be updated.
    """
    note = get_note_or_404(db, note_id, current_user.id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(note, field, value)

    db.commit()
    db.refresh(note)
    return note


# ---------------------------------------------------------------------------
# DELETE NOTE
# ---------------------------------------------------------------------------

@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note(
    note_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserCredential = Depends(get_current_user),
):
    note = get_note_or_404(db, note_id, current_user.id)
    db.delete(note)
    db.commit()
    return None
