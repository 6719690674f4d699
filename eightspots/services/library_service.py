import logging
from typing import Dict, List, Tuple

from eightspots.database import models
from eightspots.repositories.interfaces import ICatalogRepository, ILibraryRepository
from eightspots.services.exceptions import AlreadyOwnedError, MovieNotFoundError, NotOwnedError

logger = logging.getLogger(__name__)


class LibraryService:
    """사용자별 구매 목록과 시청/미시청 상태를 관리합니다."""

    def __init__(self, library_repo: ILibraryRepository, catalog_repo: ICatalogRepository):
        self.library_repo = library_repo
        self.catalog_repo = catalog_repo

    def purchase(self, user_id: int, movie_id: int) -> None:
        """
        영화를 사용자 라이브러리에 '안 봄' 상태로 추가합니다.

        Raises:
            MovieNotFoundError: 해당 ID의 영화를 찾을 수 없을 때.
            AlreadyOwnedError: 이미 라이브러리에 있는 영화일 때. 기존 항목은 그대로 유지됩니다.
        """
        if not self.catalog_repo.find_by_id(movie_id):
            raise MovieNotFoundError(f"Movie with id '{movie_id}' not found.")

        if self.library_repo.find(user_id, movie_id):
            logger.info("Duplicate purchase rejected: user=%s movie=%s", user_id, movie_id)
            raise AlreadyOwnedError(user_id, movie_id)

        # 동시 구매는 리포지토리가 복합 키 위반을 AlreadyOwnedError로 변환합니다.
        self.library_repo.add(user_id, movie_id)

    def toggle_status(self, user_id: int, movie_id: int) -> bool:
        """
        시청 상태를 반전하고 새 상태를 반환합니다.

        Raises:
            NotOwnedError: 라이브러리에 없는 영화일 때.
        """
        new_status = self.library_repo.toggle_status(user_id, movie_id)
        if new_status is None:
            raise NotOwnedError(user_id, movie_id)
        return new_status

    def list_for_user(self, user_id: int) -> List[Tuple[models.Movie, bool]]:
        return self.library_repo.list_for_user(user_id)

    @staticmethod
    def partition(entries: List[Tuple[models.Movie, bool]]) -> Dict[str, List[models.Movie]]:
        """목록 순서를 유지한 채 '안 봄'과 '봤음'으로 나눕니다."""
        groups = {"unwatched": [], "watched": []}
        for movie, status in entries:
            groups["watched" if status else "unwatched"].append(movie)
        return groups
