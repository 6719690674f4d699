# tests/services/test_library_service.py
import pytest
from unittest.mock import MagicMock

from eightspots.services.library_service import LibraryService
from eightspots.services.exceptions import AlreadyOwnedError, MovieNotFoundError, NotOwnedError
from eightspots.repositories.interfaces import ICatalogRepository, ILibraryRepository
from eightspots.database import models

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def mock_library_repo() -> MagicMock:
    """ILibraryRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=ILibraryRepository)

@pytest.fixture
def mock_catalog_repo() -> MagicMock:
    """ICatalogRepository에 대한 모의 객체를 생성합니다."""
    return MagicMock(spec=ICatalogRepository)

@pytest.fixture
def library_service(mock_library_repo: MagicMock, mock_catalog_repo: MagicMock) -> LibraryService:
    return LibraryService(mock_library_repo, mock_catalog_repo)

# ===================================================================
#  구매(Purchase) 테스트
# ===================================================================
class TestPurchase:
    def test_purchase_success(self, library_service, mock_library_repo, mock_catalog_repo):
        # === Arrange ===
        mock_catalog_repo.find_by_id.return_value = models.Movie(id=7, title="Heat", score=8.3, price=9.99)
        mock_library_repo.find.return_value = None

        # === Act ===
        library_service.purchase(user_id=2, movie_id=7)

        # === Assert ===
        mock_library_repo.add.assert_called_once_with(2, 7)

    def test_purchase_unknown_movie(self, library_service, mock_library_repo, mock_catalog_repo):
        mock_catalog_repo.find_by_id.return_value = None

        with pytest.raises(MovieNotFoundError):
            library_service.purchase(2, 404)
        mock_library_repo.add.assert_not_called()

    def test_purchase_twice_fails_with_already_owned(self, library_service, mock_library_repo, mock_catalog_repo):
        """이미 보유한 영화를 다시 구매하면 AlreadyOwnedError가 발생하고 기존 항목은 건드리지 않습니다."""
        # === Arrange ===
        mock_catalog_repo.find_by_id.return_value = models.Movie(id=7)
        mock_library_repo.find.return_value = models.LibraryEntry(user_id=2, movie_id=7, status=True)

        # === Act & Assert ===
        with pytest.raises(AlreadyOwnedError) as exc_info:
            library_service.purchase(2, 7)
        assert (exc_info.value.user_id, exc_info.value.movie_id) == (2, 7)
        mock_library_repo.add.assert_not_called()
        mock_library_repo.toggle_status.assert_not_called()

    def test_purchase_race_surfaces_already_owned(self, library_service, mock_library_repo, mock_catalog_repo):
        # 시나리오: 사전 검사 이후 동시 요청이 먼저 삽입하여 복합 키 위반 발생
        mock_catalog_repo.find_by_id.return_value = models.Movie(id=7)
        mock_library_repo.find.return_value = None
        mock_library_repo.add.side_effect = AlreadyOwnedError(2, 7)

        with pytest.raises(AlreadyOwnedError):
            library_service.purchase(2, 7)

# ===================================================================
#  시청 상태 토글 테스트
# ===================================================================
class TestToggleStatus:
    def test_toggle_returns_new_status(self, library_service, mock_library_repo):
        mock_library_repo.toggle_status.return_value = True

        assert library_service.toggle_status(2, 7) is True
        mock_library_repo.toggle_status.assert_called_once_with(2, 7)

    def test_toggle_not_owned(self, library_service, mock_library_repo):
        mock_library_repo.toggle_status.return_value = None

        with pytest.raises(NotOwnedError):
            library_service.toggle_status(2, 7)

# ===================================================================
#  라이브러리 목록 테스트
# ===================================================================
class TestListForUser:
    def test_partition_keeps_order(self, library_service, mock_library_repo):
        # === Arrange ===
        m1, m2, m3 = models.Movie(id=1), models.Movie(id=2), models.Movie(id=3)
        mock_library_repo.list_for_user.return_value = [(m1, False), (m2, True), (m3, False)]

        # === Act ===
        groups = library_service.partition(library_service.list_for_user(2))

        # === Assert ===
        assert groups == {"unwatched": [m1, m3], "watched": [m2]}
        mock_library_repo.list_for_user.assert_called_once_with(2)

    def test_partition_empty(self):
        assert LibraryService.partition([]) == {"unwatched": [], "watched": []}
