import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from eightspots.database import models
from eightspots.repositories.interfaces import IUserRepository
from eightspots.services.password_hasher import PasswordHasher
from eightspots.services.session_store import SessionStore
from eightspots.services.exceptions import (
    InvalidCredentialsError, DuplicateUsernameError, SessionRequiredError,
    AnonymousRequiredError, PermissionDeniedError, UserNotFoundError, StoreUnavailableError
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """요청 하나에 대해 계산된 인증 상태. user_id가 None이면 익명입니다."""
    user_id: Optional[int] = None
    username: Optional[str] = None
    is_admin: bool = False

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


# --------------------------------------------------------------------------
## 가드: 라우트 핸들러 실행 전에 호출됩니다.
# --------------------------------------------------------------------------

def require_anonymous(principal: Principal) -> None:
    if principal.is_authenticated:
        raise AnonymousRequiredError("Already logged in.")

def require_authenticated(principal: Principal) -> None:
    if not principal.is_authenticated:
        raise SessionRequiredError("Login required.")

def require_admin(principal: Principal) -> None:
    # 익명 사용자도 리다이렉트가 아닌 권한 오류로 처리합니다.
    if not principal.is_admin:
        raise PermissionDeniedError("Access denied. You do not have permission to access this resource.")


class AdminPolicy(ABC):
    @abstractmethod
    def is_admin(self, user: models.User) -> bool:
        """사용자가 관리자 권한을 가지는지 판단합니다."""
        pass


class AdminIdPolicy(AdminPolicy):
    """지정된 사용자 ID 집합을 관리자로 취급합니다. 기본값은 {1}."""

    def __init__(self, admin_ids: Iterable[int] = (1,)):
        self.admin_ids = frozenset(admin_ids)

    def is_admin(self, user: models.User) -> bool:
        return user.id in self.admin_ids


class AuthService:
    """회원 가입, 로그인/로그아웃, 세션 해석, 권한 가드를 제공하는 인증 서비스입니다."""

    def __init__(
        self,
        user_repo: IUserRepository,
        hasher: PasswordHasher,
        session_store: SessionStore,
        admin_policy: Optional[AdminPolicy] = None,
    ):
        """
        AuthService를 초기화합니다.

        Args:
            user_repo: 사용자 자격 증명에 접근하기 위한 리포지토리.
            hasher: 비밀번호 해시/검증기.
            session_store: 토큰과 사용자 ID를 매핑하는 세션 저장소.
            admin_policy: 관리자 여부 판단 정책. 생략하면 ID 1만 관리자로 취급합니다.
        """
        self.user_repo = user_repo
        self.hasher = hasher
        self.session_store = session_store
        self.admin_policy = admin_policy or AdminIdPolicy()
        self._dummy_hash = None

    def register(self, username: str, password: str) -> models.User:
        """
        새로운 사용자를 등록합니다. 가입만 할 뿐 로그인시키지는 않습니다.

        Raises:
            ValueError: 사용자 이름 또는 비밀번호가 비어 있을 때.
            DuplicateUsernameError: 동일한 이름의 사용자가 이미 존재할 때.
        """
        username = (username or "").strip()
        if not username or not password:
            raise ValueError("Username and password are required.")

        # 사전 검사는 참고용일 뿐, 최종 판단은 DB 유니크 제약이 합니다.
        if self.user_repo.find_by_username(username):
            raise DuplicateUsernameError(username)

        password_hash = self.hasher.hash(password)
        user = self.user_repo.create(username, password_hash)
        logger.info("User registered: id=%s", user.id)
        return user

    def authenticate(self, username: str, password: str) -> models.User:
        """
        자격 증명을 검증합니다.

        Raises:
            InvalidCredentialsError: 사용자가 없거나 비밀번호가 틀렸을 때 (구분하지 않음).
        """
        username = (username or "").strip()
        user = self.user_repo.find_by_username(username) if username else None
        if not user:
            # 존재하지 않는 사용자도 검증 비용을 치르게 하여 응답 시간 차이를 줄입니다.
            self.hasher.verify(password or "", self._get_dummy_hash())
            logger.warning("Login failed for unknown username")
            raise InvalidCredentialsError()

        if not self.hasher.verify(password or "", user.password_hash):
            logger.warning("Login failed: user_id=%s", user.id)
            raise InvalidCredentialsError()

        if self.hasher.needs_rehash(user.password_hash):
            self._upgrade_hash(user, password)
        return user

    def establish_session(self, user_id: int) -> str:
        token, _ = self.session_store.issue(user_id)
        return token

    def login(self, username: str, password: str) -> Dict[str, Any]:
        """
        자격 증명을 검증하고, 성공 시 세션 토큰을 발급합니다.

        Returns:
            토큰, 만료 시각, 사용자 정보를 담은 딕셔너리.

        Raises:
            InvalidCredentialsError: 자격 증명 검증에 실패했을 때.
        """
        user = self.authenticate(username, password)
        token, expires_at = self.session_store.issue(user.id)
        return {
            "token": token,
            "expires_at": expires_at.isoformat(),
            "user": {"id": user.id, "username": user.username},
        }

    def resolve(self, token: Optional[str]) -> Principal:
        """
        세션 토큰으로 요청의 인증 상태를 계산합니다.
        토큰이 없거나, 만료되었거나, 사용자가 사라졌으면 익명입니다.
        """
        if not token:
            return Principal.anonymous()

        user_id = self.session_store.get(token)
        if user_id is None:
            return Principal.anonymous()

        user = self.user_repo.find_by_id(user_id)
        if not user:
            self.session_store.delete(token)
            return Principal.anonymous()

        return Principal(user_id=user.id, username=user.username, is_admin=self.admin_policy.is_admin(user))

    def terminate_session(self, token: Optional[str]) -> None:
        if token:
            self.session_store.delete(token)

    def change_username(self, principal: Principal, new_username: str) -> models.User:
        """
        로그인한 사용자의 이름을 변경합니다.

        Raises:
            SessionRequiredError: 로그인하지 않았을 때.
            ValueError: 새 이름이 비어 있을 때.
            DuplicateUsernameError: 새 이름이 이미 사용 중일 때.
            UserNotFoundError: 세션의 사용자가 더 이상 존재하지 않을 때.
        """
        self.require_authenticated(principal)
        new_username = (new_username or "").strip()
        if not new_username:
            raise ValueError("New username is required.")

        existing = self.user_repo.find_by_username(new_username)
        if existing and existing.id != principal.user_id:
            raise DuplicateUsernameError(new_username)

        self.user_repo.update_username(principal.user_id, new_username)
        user = self.user_repo.find_by_id(principal.user_id)
        if not user:
            raise UserNotFoundError(f"User with id '{principal.user_id}' not found.")
        return user

    require_anonymous = staticmethod(require_anonymous)
    require_authenticated = staticmethod(require_authenticated)
    require_admin = staticmethod(require_admin)

    def _upgrade_hash(self, user: models.User, password: str) -> None:
        """현재 해시 파라미터로 저장된 해시를 교체합니다. 실패해도 로그인은 유지됩니다."""
        new_hash = self.hasher.hash(password)
        try:
            self.user_repo.update_password_hash(user.id, new_hash)
        except StoreUnavailableError as e:
            logger.warning("Password rehash not saved: user_id=%s (%s)", user.id, e)
        else:
            logger.info("Password hash upgraded: user_id=%s", user.id)

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash("eightspots-dummy-password")
        return self._dummy_hash
