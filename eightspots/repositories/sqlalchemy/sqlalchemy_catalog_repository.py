from typing import List, Optional
from sqlalchemy.orm import Session
from eightspots.database import models
from eightspots.repositories.interfaces import ICatalogRepository
from eightspots.repositories.sqlalchemy.errors import store_errors

class SqlalchemyCatalogRepository(ICatalogRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, movie_model: models.Movie) -> models.Movie:
        with store_errors(self.db):
            self.db.add(movie_model)
            self.db.commit()
            self.db.refresh(movie_model)
        return movie_model

    def find_by_id(self, movie_id: int) -> Optional[models.Movie]:
        with store_errors(self.db):
            return self.db.query(models.Movie).filter(models.Movie.id == movie_id).first()

    def list_all(self) -> List[models.Movie]:
        with store_errors(self.db):
            return self.db.query(models.Movie).order_by(models.Movie.id.asc()).all()

    def list_top_by_genre_bit(self, genre_bit: int, limit: int) -> List[models.Movie]:
        with store_errors(self.db):
            return (
                self.db.query(models.Movie)
                .filter(models.Movie.genre_bitmap.op("&")(genre_bit) > 0)
                .order_by(models.Movie.score.desc(), models.Movie.id.asc())
                .limit(limit)
                .all()
            )
