from abc import ABC, abstractmethod
from typing import List, Optional
from eightspots.database import models

class ICatalogRepository(ABC):
    @abstractmethod
    def create(self, movie_model: models.Movie) -> models.Movie:
        """새로운 영화를 카탈로그에 추가합니다."""
        pass

    @abstractmethod
    def find_by_id(self, movie_id: int) -> Optional[models.Movie]:
        """고유 ID로 특정 영화를 조회합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.Movie]:
        """모든 영화를 ID 오름차순으로 조회합니다."""
        pass

    @abstractmethod
    def list_top_by_genre_bit(self, genre_bit: int, limit: int) -> List[models.Movie]:
        """
        장르 비트가 설정된 영화를 점수 내림차순(동점이면 ID 오름차순)으로 최대 limit개 조회합니다.

        Args:
            genre_bit: 1 << (장르 인덱스) 값.
            limit: 반환할 최대 개수.
        """
        pass
