from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eightspots.services.exceptions import StoreUnavailableError


@contextmanager
def store_errors(db: Session):
    """
    SQLAlchemy 예외를 StoreUnavailableError로 변환합니다.
    현재 작업 단위는 롤백하고, 재시도는 하지 않습니다.
    IntegrityError처럼 의미가 있는 예외는 블록 안에서 먼저 처리해야 합니다.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreUnavailableError(f"Store call failed: {e.__class__.__name__}") from e
