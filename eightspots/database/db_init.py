import logging
import os
from typing import Optional

from eightspots.config import Settings
from eightspots.database.database import Database
from eightspots.database.models import User
from eightspots.repositories.sqlalchemy import SqlalchemyUserRepository
from eightspots.services.password_hasher import PasswordHasher

logger = logging.getLogger(__name__)


def initialize_db(database: Database, hasher: PasswordHasher, admin_username: str = "admin", admin_password: Optional[str] = None) -> Optional[User]:
    """
    테이블을 생성하고, 사용자가 한 명도 없으면 관리자 계정을 만듭니다.
    처음 생성되는 계정이므로 관리자는 ID 1을 받습니다. 여러 번 실행해도 안전합니다.

    Returns:
        새로 만든 관리자 계정. 이미 사용자가 있거나 비밀번호가 없어 건너뛰면 None.
    """
    logger.info("Creating tables on %s", database.url)
    database.create_all()

    db = database.session()
    try:
        user_repo = SqlalchemyUserRepository(db)
        if user_repo.count() > 0:
            logger.info("Users already exist, skipping admin seed.")
            return None

        if not admin_password:
            logger.warning("No admin password given, skipping admin seed.")
            return None

        admin = user_repo.create(admin_username, hasher.hash(admin_password))
        logger.info("Admin account created: id=%s username=%s", admin.id, admin.username)
        return admin
    finally:
        db.close()


if __name__ == '__main__':
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    database = Database(settings.database_url)
    try:
        initialize_db(
            database,
            PasswordHasher(),
            admin_username=os.getenv("EIGHTSPOTS_ADMIN_USERNAME", "admin"),
            admin_password=os.getenv("EIGHTSPOTS_ADMIN_PASSWORD"),
        )
    finally:
        database.dispose()
