from typing import List
from sqlalchemy.orm import Session
from eightspots.database import models
from eightspots.repositories.interfaces import IStoreRepository
from eightspots.repositories.sqlalchemy.errors import store_errors

class SqlalchemyStoreRepository(IStoreRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, store_model: models.Store) -> models.Store:
        with store_errors(self.db):
            self.db.add(store_model)
            self.db.commit()
            self.db.refresh(store_model)
        return store_model

    def list_all(self) -> List[models.Store]:
        with store_errors(self.db):
            return self.db.query(models.Store).order_by(models.Store.id.asc()).all()
