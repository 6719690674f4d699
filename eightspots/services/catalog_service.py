import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

from eightspots.database import models
from eightspots.repositories.interfaces import ICatalogRepository, IStoreRepository
from eightspots.services.auth_service import Principal, require_admin
from eightspots.services.genre_index import GenreIndex
from eightspots.services.exceptions import MovieNotFoundError
from eightspots.utils.poster_storage import PosterStorage, public_poster_path

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(
        self,
        catalog_repo: ICatalogRepository,
        store_repo: IStoreRepository,
        genre_index: GenreIndex,
        poster_storage: Optional[PosterStorage] = None,
    ):
        """
        CatalogService를 초기화합니다.

        Args:
            catalog_repo: 영화 데이터에 접근하기 위한 리포지토리.
            store_repo: 매장 데이터에 접근하기 위한 리포지토리.
            genre_index: 장르 비트맵 인코더/디코더.
            poster_storage: 포스터 업로드 저장소. 영화 추가 시에만 필요합니다.
        """
        self.catalog_repo = catalog_repo
        self.store_repo = store_repo
        self.genre_index = genre_index
        self.poster_storage = poster_storage

    def movie_to_dict(self, movie: models.Movie) -> Dict[str, Any]:
        return {
            "id": movie.id,
            "title": movie.title,
            "score": movie.score,
            "price": float(movie.price) if movie.price is not None else None,
            "genre_bitmap": movie.genre_bitmap,
            "genres": self.genre_index.decode(movie.genre_bitmap or 0),
            "poster": public_poster_path(movie.poster_url),
        }

    def add_movie(
        self,
        principal: Principal,
        title: str,
        score: float,
        price: Any,
        genres: Sequence[str],
        poster_filename: str,
        poster_data: bytes,
    ) -> Dict[str, Any]:
        """
        관리자가 새 영화를 카탈로그에 추가합니다.

        포스터를 먼저 저장하고 영화를 DB에 기록합니다. DB 저장에 실패하면 저장한 포스터를 정리합니다.

        Args:
            principal: 요청자의 인증 상태.
            title: 영화 제목.
            score: 0 ~ 10 사이의 점수.
            price: 0 이상의 가격.
            genres: 장르 라벨 목록.
            poster_filename: 업로드된 포스터 파일명.
            poster_data: 포스터 바이너리.

        Returns:
            생성된 영화 정보 딕셔너리.

        Raises:
            PermissionDeniedError: 요청자가 관리자가 아닐 때.
            ValueError: 제목, 점수, 가격, 장르 목록 형식이 유효하지 않을 때.
            UnknownGenreLabelError: 어휘에 없는 장르가 포함되었을 때.
        """
        require_admin(principal)

        title = (title or "").strip()
        if not title:
            raise ValueError("Title is required.")
        try:
            score = float(score)
        except (TypeError, ValueError):
            raise ValueError(f"Score must be a number, got '{score}'.")
        if not 0 <= score <= 10:
            raise ValueError(f"Score must be between 0 and 10, got {score}.")
        try:
            price = Decimal(str(price))
        except (InvalidOperation, ValueError):
            raise ValueError(f"Price must be a number, got '{price}'.")
        if not price.is_finite() or price < 0:
            raise ValueError(f"Price must be a non-negative amount, got {price}.")

        if genres is None:
            genres = []
        if not isinstance(genres, (list, tuple)):
            raise ValueError(f"Genres must be a list of labels, got {type(genres).__name__}.")
        genre_bitmap = self.genre_index.encode(genres)

        poster_url = ""
        if poster_data is not None:
            if self.poster_storage is None:
                raise ValueError("Poster uploads are not configured.")
            poster_url = self.poster_storage.save(poster_filename, poster_data)

        new_movie = models.Movie(
            title=title,
            score=score,
            price=price,
            genre_bitmap=genre_bitmap,
            poster_url=poster_url,
        )
        try:
            created_movie = self.catalog_repo.create(new_movie)
        except Exception:
            if poster_url:
                self.poster_storage.delete(poster_url)
            raise
        logger.info("Movie added: id=%s genres=%s", created_movie.id, genre_bitmap)
        return self.movie_to_dict(created_movie)

    def list_movies(self) -> List[Dict[str, Any]]:
        """모든 영화를 ID 순서로, 장르 라벨을 풀어서 반환합니다."""
        return [self.movie_to_dict(m) for m in self.catalog_repo.list_all()]

    def get_movie(self, movie_id: int) -> Dict[str, Any]:
        """
        ID로 특정 영화를 조회합니다.

        Raises:
            MovieNotFoundError: 해당 ID의 영화를 찾을 수 없을 때.
        """
        movie = self.catalog_repo.find_by_id(movie_id)
        if not movie:
            raise MovieNotFoundError(f"Movie with id '{movie_id}' not found.")
        return self.movie_to_dict(movie)

    def top_movies_by_genre(self, n: int = 5) -> Dict[str, List[Dict[str, Any]]]:
        """
        장르마다 점수 상위 n개의 영화를 조회합니다. 장르 하나당 한 번의 쿼리를 실행합니다.

        Raises:
            ValueError: n이 음수일 때.
        """
        if n < 0:
            raise ValueError(f"Limit must be non-negative, got {n}.")
        result = {}
        for label in self.genre_index.labels:
            movies = self.catalog_repo.list_top_by_genre_bit(self.genre_index.bit(label), n)
            result[label] = [self.movie_to_dict(m) for m in movies]
        return result

    def add_store(self, principal: Principal, phone_num: str, city: str, address: str) -> Dict[str, Any]:
        """
        관리자가 새 매장을 추가합니다.

        Raises:
            PermissionDeniedError: 요청자가 관리자가 아닐 때.
            ValueError: 필수 값이 비어 있을 때.
        """
        require_admin(principal)
        if not all(v and str(v).strip() for v in (phone_num, city, address)):
            raise ValueError("phone_num, city and address are required.")
        store = self.store_repo.create(models.Store(phone_num=phone_num, city=city, address=address))
        return {"id": store.id, "phone_num": store.phone_num, "city": store.city, "address": store.address}

    def list_stores(self) -> List[Dict[str, Any]]:
        return [
            {"id": s.id, "phone_num": s.phone_num, "city": s.city, "address": s.address}
            for s in self.store_repo.list_all()
        ]
