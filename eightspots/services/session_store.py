import threading
import uuid
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple


class SessionStore:
    """
    세션 토큰과 사용자 ID를 매핑하는 서버 측 저장소입니다.

    프로세스 메모리에만 존재하며, 프로세스 시작 시 하나를 만들어 AuthService에 주입합니다.
    조회와 삭제는 O(1)이며, 만료된 세션은 발급 시 TTL 주기로 한꺼번에 정리합니다.
    여러 요청 스레드에서 동시에 사용해도 안전합니다.
    """

    def __init__(self, ttl_seconds: int = 3600):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._sessions: Dict[str, Dict] = {}
        self._lock = threading.Lock()
        self._next_sweep = datetime.now() + self.ttl

    def issue(self, user_id: int) -> Tuple[str, datetime]:
        """
        새 토큰을 발급하여 user_id에 연결합니다.

        Returns:
            (토큰, 만료 시각) 튜플.
        """
        token = str(uuid.uuid4())
        expires_at = datetime.now() + self.ttl
        self.put(token, user_id, expires_at)
        return token, expires_at

    def put(self, token: str, user_id: int, expires_at: Optional[datetime] = None):
        if expires_at is None:
            expires_at = datetime.now() + self.ttl
        with self._lock:
            self._sweep_expired()
            self._sessions[token] = {"user_id": user_id, "expires_at": expires_at}

    def get(self, token: str) -> Optional[int]:
        """토큰에 연결된 user_id를 반환합니다. 없거나 만료되었으면 None."""
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if not session:
                return None
            if datetime.now() > session["expires_at"]:
                del self._sessions[token]
                return None
            return session["user_id"]

    def delete(self, token: str):
        with self._lock:
            self._sessions.pop(token, None)

    def clear(self):
        with self._lock:
            self._sessions.clear()

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def _sweep_expired(self):
        # 호출자가 _lock을 보유해야 합니다. TTL마다 한 번만 전체를 훑습니다.
        now = datetime.now()
        if now < self._next_sweep:
            return
        expired = [t for t, s in self._sessions.items() if now > s["expires_at"]]
        for token in expired:
            del self._sessions[token]
        self._next_sweep = now + self.ttl
