# tests/repositories/test_sqlalchemy_repositories.py
import threading
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from eightspots.database import models
from eightspots.database.database import Database
from eightspots.repositories.sqlalchemy import (
    SqlalchemyUserRepository, SqlalchemyCatalogRepository, SqlalchemyLibraryRepository,
    SqlalchemyReviewRepository, SqlalchemyStoreRepository
)
from eightspots.services.exceptions import (
    DuplicateUsernameError, AlreadyOwnedError, StoreUnavailableError, UserNotFoundError
)


def add_movie(db_session, title, score, genre_bitmap, price=5):
    return SqlalchemyCatalogRepository(db_session).create(
        models.Movie(title=title, score=score, price=price, genre_bitmap=genre_bitmap, poster_url="")
    )

# ===================================================================
#  사용자 리포지토리
# ===================================================================
class TestUserRepository:
    def test_create_and_find(self, db_session):
        repo = SqlalchemyUserRepository(db_session)

        user = repo.create("alice", "hash")

        assert user.id == 1
        assert repo.find_by_username("alice").id == user.id
        assert repo.find_by_id(user.id).username == "alice"
        assert repo.find_by_username("bob") is None
        assert repo.count() == 1

    def test_unique_constraint_maps_to_duplicate_username(self, db_session):
        """유니크 제약 위반이 DuplicateUsernameError로 변환되고, 세션은 계속 사용 가능한지 테스트합니다."""
        repo = SqlalchemyUserRepository(db_session)
        repo.create("alice", "hash")

        with pytest.raises(DuplicateUsernameError):
            repo.create("alice", "other-hash")
        assert repo.count() == 1

    def test_update_username(self, db_session):
        repo = SqlalchemyUserRepository(db_session)
        alice = repo.create("alice", "hash")
        repo.create("bob", "hash")

        repo.update_username(alice.id, "alicia")
        assert repo.find_by_id(alice.id).username == "alicia"

        with pytest.raises(DuplicateUsernameError):
            repo.update_username(alice.id, "bob")
        with pytest.raises(UserNotFoundError):
            repo.update_username(999, "ghost")

    def test_update_password_hash(self, db_session):
        repo = SqlalchemyUserRepository(db_session)
        alice = repo.create("alice", "old-hash")

        repo.update_password_hash(alice.id, "new-hash")

        assert repo.find_by_id(alice.id).password_hash == "new-hash"
        with pytest.raises(UserNotFoundError):
            repo.update_password_hash(999, "new-hash")

    def test_operational_error_maps_to_store_unavailable(self):
        """드라이버 장애는 롤백 후 StoreUnavailableError로 변환되는지 테스트합니다."""
        mock_session = MagicMock()
        mock_session.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection lost"))
        repo = SqlalchemyUserRepository(mock_session)

        with pytest.raises(StoreUnavailableError):
            repo.find_by_username("alice")
        mock_session.rollback.assert_called_once()

# ===================================================================
#  카탈로그 리포지토리
# ===================================================================
class TestCatalogRepository:
    def test_list_top_by_genre_bit(self, db_session):
        """vocabulary=[Action, Comedy]; A(0b01, 8.0), B(0b11, 6.0) 시나리오를 SQL로 검증합니다."""
        # === Arrange ===
        b = add_movie(db_session, "B", 6.0, 0b11)
        a = add_movie(db_session, "A", 8.0, 0b01)
        repo = SqlalchemyCatalogRepository(db_session)

        # === Act & Assert ===
        assert [m.title for m in repo.list_top_by_genre_bit(0b01, 5)] == ["A", "B"]
        assert [m.title for m in repo.list_top_by_genre_bit(0b10, 5)] == ["B"]
        assert repo.list_top_by_genre_bit(0b100, 5) == []

    def test_list_top_by_genre_bit_tie_break_and_limit(self, db_session):
        first = add_movie(db_session, "first", 7.0, 0b1)
        second = add_movie(db_session, "second", 7.0, 0b1)
        add_movie(db_session, "third", 7.0, 0b1)
        repo = SqlalchemyCatalogRepository(db_session)

        top = repo.list_top_by_genre_bit(0b1, 2)

        assert [m.id for m in top] == [first.id, second.id]

    def test_list_all_ordered_by_id(self, db_session):
        add_movie(db_session, "one", 1.0, 0)
        add_movie(db_session, "two", 9.0, 0)

        assert [m.title for m in SqlalchemyCatalogRepository(db_session).list_all()] == ["one", "two"]

# ===================================================================
#  라이브러리 리포지토리
# ===================================================================
class TestLibraryRepository:
    @pytest.fixture
    def owner_and_movie(self, db_session):
        user = SqlalchemyUserRepository(db_session).create("alice", "hash")
        movie = add_movie(db_session, "Heat", 8.3, 0b1)
        return user.id, movie.id

    def test_add_twice_fails_and_keeps_first_entry(self, db_session, owner_and_movie):
        user_id, movie_id = owner_and_movie
        repo = SqlalchemyLibraryRepository(db_session)
        repo.add(user_id, movie_id)
        repo.toggle_status(user_id, movie_id)

        with pytest.raises(AlreadyOwnedError):
            repo.add(user_id, movie_id)
        assert repo.find(user_id, movie_id).status is True

    def test_toggle_twice_returns_to_original(self, db_session, owner_and_movie):
        user_id, movie_id = owner_and_movie
        repo = SqlalchemyLibraryRepository(db_session)
        repo.add(user_id, movie_id)

        assert repo.toggle_status(user_id, movie_id) is True
        assert repo.toggle_status(user_id, movie_id) is False
        assert repo.find(user_id, movie_id).status is False

    def test_toggle_missing_entry(self, db_session, owner_and_movie):
        user_id, movie_id = owner_and_movie
        assert SqlalchemyLibraryRepository(db_session).toggle_status(user_id, movie_id) is None

    def test_list_for_user(self, db_session, owner_and_movie):
        user_id, movie_id = owner_and_movie
        other = add_movie(db_session, "Ronin", 7.2, 0b1)
        repo = SqlalchemyLibraryRepository(db_session)
        repo.add(user_id, other.id)
        repo.add(user_id, movie_id)
        repo.toggle_status(user_id, other.id)

        entries = repo.list_for_user(user_id)

        assert [(m.title, status) for m, status in entries] == [("Heat", False), ("Ronin", True)]
        assert repo.list_for_user(999) == []

    def test_concurrent_toggles_never_lose_an_update(self, tmp_path):
        """
        같은 (user_id, movie_id)에 대한 동시 토글이 같은 이전 값을 읽어 같은 값을 쓰지 않는지 테스트합니다.
        각 토글이 정확히 한 번씩 반영되면 결과는 True/False가 번갈아 나타납니다.
        """
        # === Arrange ===
        database = Database(f"sqlite:///{tmp_path / 'toggle.db'}")
        database.create_all()
        setup = database.session()
        user_id = SqlalchemyUserRepository(setup).create("alice", "hash").id
        movie_id = add_movie(setup, "Heat", 8.3, 0b1).id
        SqlalchemyLibraryRepository(setup).add(user_id, movie_id)
        setup.close()

        workers = 8
        barrier = threading.Barrier(workers)
        results, errors = [], []
        lock = threading.Lock()

        def toggle():
            session = database.session()
            try:
                barrier.wait()
                new_status = SqlalchemyLibraryRepository(session).toggle_status(user_id, movie_id)
                with lock:
                    results.append(new_status)
            except Exception as e:
                with lock:
                    errors.append(e)
            finally:
                session.close()

        # === Act ===
        threads = [threading.Thread(target=toggle) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # === Assert ===
        check = database.session()
        final_status = SqlalchemyLibraryRepository(check).find(user_id, movie_id).status
        check.close()
        database.dispose()

        assert errors == []
        assert results.count(True) == workers // 2
        assert results.count(False) == workers // 2
        assert final_status is False

# ===================================================================
#  리뷰 / 매장 리포지토리
# ===================================================================
class TestReviewAndStoreRepositories:
    def test_reviews_newest_first_with_username(self, db_session):
        user = SqlalchemyUserRepository(db_session).create("alice", "hash")
        movie = add_movie(db_session, "Heat", 8.3, 0b1)
        repo = SqlalchemyReviewRepository(db_session)
        repo.create(models.Review(user_id=user.id, movie_id=movie.id, rating=4, comment="first"))
        repo.create(models.Review(user_id=user.id, movie_id=movie.id, rating=5, comment="second"))

        reviews = repo.list_by_movie_id(movie.id)

        assert [r.comment for r in reviews] == ["second", "first"]
        assert reviews[0].user.username == "alice"
        assert reviews[0].timestamp is not None

    def test_stores(self, db_session):
        repo = SqlalchemyStoreRepository(db_session)
        repo.create(models.Store(phone_num="555-0100", city="Lisbon", address="Rua Augusta 1"))

        assert [s.city for s in repo.list_all()] == ["Lisbon"]
