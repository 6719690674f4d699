from abc import ABC, abstractmethod
from typing import Optional
from eightspots.database import models

class IUserRepository(ABC):
    @abstractmethod
    def create(self, username: str, password_hash: str) -> models.User:
        """
        새로운 사용자를 데이터베이스에 생성합니다.

        Raises:
            DuplicateUsernameError: 사용자 이름의 유니크 제약을 위반했을 때 (경쟁 상태 포함).
            StoreUnavailableError: 저장소 호출이 실패했을 때.
        """
        pass

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[models.User]:
        """고유 ID로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def find_by_username(self, username: str) -> Optional[models.User]:
        """사용자 이름으로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def update_username(self, user_id: int, new_username: str) -> None:
        """
        사용자 이름을 변경합니다.

        Raises:
            DuplicateUsernameError: 새 이름이 이미 사용 중일 때.
            UserNotFoundError: 해당 ID의 사용자가 없을 때.
        """
        pass

    @abstractmethod
    def update_password_hash(self, user_id: int, password_hash: str) -> None:
        """
        저장된 비밀번호 해시를 교체합니다.

        Raises:
            UserNotFoundError: 해당 ID의 사용자가 없을 때.
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """등록된 사용자 수를 조회합니다."""
        pass
