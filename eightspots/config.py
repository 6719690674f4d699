# eightspots/config.py
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Tuple

# 비트 위치는 목록 순서로 결정됩니다. 새 장르는 반드시 끝에만 추가해야 합니다.
DEFAULT_GENRES: Tuple[str, ...] = (
    "Western",
    "Mystery",
    "Thriller",
    "Sci-Fi",
    "Romance",
    "Musical",
    "Horror",
    "Historical",
    "Fantasy",
    "Drama",
    "Comedy",
    "Animation",
    "Adventure",
    "Action",
)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got '{raw}'.")


def _csv_env(name: str) -> Tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """프로세스 시작 시 한 번 읽어 각 컴포넌트에 주입하는 설정 값."""
    database_url: str = "sqlite:///eightspots.db"
    session_ttl_seconds: int = 3600
    admin_ids: FrozenSet[int] = field(default_factory=lambda: frozenset({1}))
    genres: Tuple[str, ...] = DEFAULT_GENRES
    poster_dir: str = "uploads/posters"
    host: str = ""
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        환경 변수에서 설정을 읽어옵니다.

        Raises:
            ValueError: 정수여야 하는 값이 정수가 아닐 때.
        """
        admin_ids = _csv_env("EIGHTSPOTS_ADMIN_IDS")
        try:
            parsed_admin_ids = frozenset(int(v) for v in admin_ids) if admin_ids else frozenset({1})
        except ValueError:
            raise ValueError("EIGHTSPOTS_ADMIN_IDS must be a comma separated list of integers.")

        return cls(
            database_url=os.getenv("EIGHTSPOTS_DATABASE_URL", cls.database_url),
            session_ttl_seconds=_int_env("EIGHTSPOTS_SESSION_TTL_SECONDS", cls.session_ttl_seconds),
            admin_ids=parsed_admin_ids,
            genres=_csv_env("EIGHTSPOTS_GENRES") or DEFAULT_GENRES,
            poster_dir=os.getenv("EIGHTSPOTS_POSTER_DIR", cls.poster_dir),
            host=os.getenv("EIGHTSPOTS_HOST", cls.host),
            port=_int_env("EIGHTSPOTS_PORT", cls.port),
            log_level=os.getenv("EIGHTSPOTS_LOG_LEVEL", cls.log_level).upper(),
        )
