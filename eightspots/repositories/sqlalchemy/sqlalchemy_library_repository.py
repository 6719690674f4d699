import logging
from typing import List, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from eightspots.database import models
from eightspots.repositories.interfaces import ILibraryRepository
from eightspots.repositories.sqlalchemy.errors import store_errors
from eightspots.services.exceptions import AlreadyOwnedError

logger = logging.getLogger(__name__)

class SqlalchemyLibraryRepository(ILibraryRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def _filter_key(self, query, user_id: int, movie_id: int):
        return query.filter(
            models.LibraryEntry.user_id == user_id,
            models.LibraryEntry.movie_id == movie_id,
        )

    def find(self, user_id: int, movie_id: int) -> Optional[models.LibraryEntry]:
        with store_errors(self.db):
            return self._filter_key(self.db.query(models.LibraryEntry), user_id, movie_id).first()

    def add(self, user_id: int, movie_id: int) -> models.LibraryEntry:
        entry = models.LibraryEntry(user_id=user_id, movie_id=movie_id, status=False)
        with store_errors(self.db):
            try:
                self.db.add(entry)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise AlreadyOwnedError(user_id, movie_id)
        return entry

    def toggle_status(self, user_id: int, movie_id: int) -> Optional[bool]:
        with store_errors(self.db):
            while True:
                current = self._filter_key(
                    self.db.query(models.LibraryEntry.status), user_id, movie_id
                ).scalar()
                if current is None:
                    self.db.rollback()
                    return None

                new_status = not current
                # compare-and-swap: 읽은 값이 그대로일 때만 갱신
                updated = self._filter_key(
                    self.db.query(models.LibraryEntry), user_id, movie_id
                ).filter(models.LibraryEntry.status == current).update(
                    {models.LibraryEntry.status: new_status}, synchronize_session=False
                )
                self.db.commit()
                if updated == 1:
                    return new_status
                logger.info("Concurrent toggle detected: user=%s movie=%s, re-reading status", user_id, movie_id)

    def list_for_user(self, user_id: int) -> List[Tuple[models.Movie, bool]]:
        with store_errors(self.db):
            rows = (
                self.db.query(models.Movie, models.LibraryEntry.status)
                .join(models.LibraryEntry, models.LibraryEntry.movie_id == models.Movie.id)
                .filter(models.LibraryEntry.user_id == user_id)
                .order_by(models.Movie.id.asc())
                .all()
            )
        return [(movie, bool(status)) for movie, status in rows]
