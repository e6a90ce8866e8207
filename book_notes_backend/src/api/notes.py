"""Owner-scoped note storage.

Every query filters on the owner id, so a note that exists under another
user looks exactly like a note that does not exist at all.
"""

from typing import List, Optional

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.api.database import get_db
from src.api.errors import InternalError
from src.api.logging import get_logger
from src.api.models import Note

logger = get_logger(__name__)


class NoteStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, owner_id: int, title: str, author: str, body: str) -> Note:
        note = Note(user_id=owner_id, title=title, author=author, body=body)
        self.db.add(note)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("database_error", operation="create_note")
            raise InternalError("Failed to save note")
        self.db.refresh(note)
        logger.info("note_created", note_id=note.id, user_id=owner_id)
        return note

    def list_by_owner(self, owner_id: int) -> List[Note]:
        """All notes of one owner, most recent first."""
        try:
            return self.db.query(Note).filter(Note.user_id == owner_id).order_by(Note.id.desc()).all()
        except SQLAlchemyError:
            logger.exception("database_error", operation="list_notes")
            raise InternalError("Failed to load notes")

    def get_one(self, note_id: int, owner_id: int) -> Optional[Note]:
        try:
            return self.db.query(Note).filter(Note.id == note_id, Note.user_id == owner_id).first()
        except SQLAlchemyError:
            logger.exception("database_error", operation="get_note")
            raise InternalError("Failed to load note")

    def delete_one(self, note_id: int, owner_id: int) -> bool:
        """Delete in a single statement; True only if a row was removed.

        A matching instance held by the session is detached rather than left
        pointing at a missing row.
        """
        try:
            deleted = (
                self.db.query(Note)
                .filter(Note.id == note_id, Note.user_id == owner_id)
                .delete(synchronize_session="fetch")
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("database_error", operation="delete_note")
            raise InternalError("Failed to delete note")
        if deleted:
            logger.info("note_deleted", note_id=note_id, user_id=owner_id)
        return deleted > 0


def get_note_store(db: Session = Depends(get_db)) -> NoteStore:
    return NoteStore(db)
