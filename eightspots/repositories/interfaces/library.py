from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from eightspots.database import models

class ILibraryRepository(ABC):
    @abstractmethod
    def find(self, user_id: int, movie_id: int) -> Optional[models.LibraryEntry]:
        """(user_id, movie_id)로 라이브러리 항목을 조회합니다."""
        pass

    @abstractmethod
    def add(self, user_id: int, movie_id: int) -> models.LibraryEntry:
        """
        status=False(안 봄)로 라이브러리 항목을 추가합니다.

        Raises:
            AlreadyOwnedError: 복합 키 제약을 위반했을 때.
        """
        pass

    @abstractmethod
    def toggle_status(self, user_id: int, movie_id: int) -> Optional[bool]:
        """
        시청 상태를 원자적으로 반전하고 새 값을 반환합니다.
        동일한 키에 대한 동시 토글이 같은 이전 값을 읽고 같은 새 값을 쓰지 않도록 보장해야 합니다.

        Returns:
            새 상태 값. 항목이 없으면 None.
        """
        pass

    @abstractmethod
    def list_for_user(self, user_id: int) -> List[Tuple[models.Movie, bool]]:
        """사용자가 보유한 영화와 시청 상태의 목록을 조회합니다."""
        pass
