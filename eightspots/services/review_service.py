from typing import Any, Dict, List

from eightspots.database import models
from eightspots.repositories.interfaces import ICatalogRepository, IReviewRepository
from eightspots.services.auth_service import Principal, require_authenticated
from eightspots.services.exceptions import MovieNotFoundError


class ReviewService:
    def __init__(self, review_repo: IReviewRepository, catalog_repo: ICatalogRepository):
        self.review_repo = review_repo
        self.catalog_repo = catalog_repo

    @staticmethod
    def _to_dict(review: models.Review) -> Dict[str, Any]:
        return {
            "id": review.id,
            "user_id": review.user_id,
            "username": review.user.username if review.user else None,
            "movie_id": review.movie_id,
            "rating": review.rating,
            "comment": review.comment,
            "timestamp": review.timestamp.isoformat() if review.timestamp else None,
        }

    def add_review(self, principal: Principal, movie_id: int, rating: Any, comment: str) -> Dict[str, Any]:
        """
        영화에 리뷰를 남깁니다.

        Raises:
            SessionRequiredError: 로그인하지 않았을 때.
            ValueError: 평점이 0~5 사이의 정수가 아닐 때.
            MovieNotFoundError: 해당 ID의 영화를 찾을 수 없을 때.
        """
        require_authenticated(principal)

        if isinstance(rating, bool) or (isinstance(rating, float) and not rating.is_integer()):
            raise ValueError("Rating must be an integer between 0 and 5.")
        try:
            rating = int(rating)
        except (TypeError, ValueError):
            raise ValueError("Rating must be an integer between 0 and 5.")
        if not 0 <= rating <= 5:
            raise ValueError("Rating must be an integer between 0 and 5.")

        if not self.catalog_repo.find_by_id(movie_id):
            raise MovieNotFoundError(f"Movie with id '{movie_id}' not found.")

        review = self.review_repo.create(
            models.Review(user_id=principal.user_id, movie_id=movie_id, rating=rating, comment=comment or "")
        )
        return self._to_dict(review)

    def list_reviews(self, movie_id: int) -> List[Dict[str, Any]]:
        """특정 영화의 리뷰를 최신순으로 조회합니다."""
        return [self._to_dict(r) for r in self.review_repo.list_by_movie_id(movie_id)]
