from abc import ABC, abstractmethod
from typing import List
from eightspots.database import models

class IReviewRepository(ABC):
    @abstractmethod
    def create(self, review_model: models.Review) -> models.Review:
        """새로운 리뷰를 추가합니다."""
        pass

    @abstractmethod
    def list_by_movie_id(self, movie_id: int) -> List[models.Review]:
        """특정 영화의 리뷰를 최신순으로 조회합니다."""
        pass
