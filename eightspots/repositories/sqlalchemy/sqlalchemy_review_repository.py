from typing import List
from sqlalchemy.orm import Session, joinedload
from eightspots.database import models
from eightspots.repositories.interfaces import IReviewRepository
from eightspots.repositories.sqlalchemy.errors import store_errors

class SqlalchemyReviewRepository(IReviewRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, review_model: models.Review) -> models.Review:
        with store_errors(self.db):
            self.db.add(review_model)
            self.db.commit()
            self.db.refresh(review_model)
        return review_model

    def list_by_movie_id(self, movie_id: int) -> List[models.Review]:
        with store_errors(self.db):
            return (
                self.db.query(models.Review)
                .options(joinedload(models.Review.user))
                .filter(models.Review.movie_id == movie_id)
                .order_by(models.Review.timestamp.desc(), models.Review.id.desc())
                .all()
            )
