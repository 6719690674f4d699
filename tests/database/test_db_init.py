# tests/database/test_db_init.py
from eightspots.database.db_init import initialize_db
from eightspots.repositories.sqlalchemy import SqlalchemyUserRepository


def test_seeds_admin_once(database, fast_hasher):
    # === Act ===
    admin = initialize_db(database, fast_hasher, admin_password="secret")
    again = initialize_db(database, fast_hasher, admin_username="other", admin_password="secret")

    # === Assert ===
    assert admin.id == 1
    assert admin.username == "admin"
    assert again is None

    db = database.session()
    try:
        repo = SqlalchemyUserRepository(db)
        assert repo.count() == 1
        assert fast_hasher.verify("secret", repo.find_by_id(1).password_hash)
    finally:
        db.close()


def test_skips_seed_without_password(database, fast_hasher):
    assert initialize_db(database, fast_hasher) is None

    db = database.session()
    try:
        assert SqlalchemyUserRepository(db).count() == 0
    finally:
        db.close()
