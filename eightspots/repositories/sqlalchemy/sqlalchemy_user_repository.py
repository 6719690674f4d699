from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from eightspots.database import models
from eightspots.repositories.interfaces import IUserRepository
from eightspots.repositories.sqlalchemy.errors import store_errors
from eightspots.services.exceptions import DuplicateUsernameError, UserNotFoundError

class SqlalchemyUserRepository(IUserRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, username: str, password_hash: str) -> models.User:
        user_model = models.User(username=username, password_hash=password_hash)
        with store_errors(self.db):
            try:
                self.db.add(user_model)
                self.db.commit()
            except IntegrityError:
                # 사전 검사 이후 다른 요청이 같은 이름으로 먼저 삽입한 경우
                self.db.rollback()
                raise DuplicateUsernameError(username)
            self.db.refresh(user_model)
        return user_model

    def find_by_id(self, user_id: int) -> Optional[models.User]:
        with store_errors(self.db):
            return self.db.query(models.User).filter(models.User.id == user_id).first()

    def find_by_username(self, username: str) -> Optional[models.User]:
        with store_errors(self.db):
            return self.db.query(models.User).filter(models.User.username == username).first()

    def update_username(self, user_id: int, new_username: str) -> None:
        with store_errors(self.db):
            try:
                updated = self.db.query(models.User).filter(models.User.id == user_id).update(
                    {models.User.username: new_username}, synchronize_session=False
                )
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise DuplicateUsernameError(new_username)
        if updated == 0:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")

    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        with store_errors(self.db):
            updated = self.db.query(models.User).filter(models.User.id == user_id).update(
                {models.User.password_hash: password_hash}, synchronize_session=False
            )
            self.db.commit()
        if updated == 0:
            raise UserNotFoundError(f"User with id '{user_id}' not found.")

    def count(self) -> int:
        with store_errors(self.db):
            return self.db.query(models.User).count()
