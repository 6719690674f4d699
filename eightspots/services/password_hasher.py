from argon2 import PasswordHasher as _Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError


class PasswordHasher:
    """
    salt가 포함된 단방향 해시(argon2id)와 상수 시간 검증을 제공합니다.
    결과는 PHC 문자열이므로 그대로 문자열 컬럼에 저장할 수 있습니다.
    """

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        self._ph = _Argon2Hasher(time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism)

    def hash(self, plain: str) -> str:
        if not plain:
            raise ValueError("Password must not be empty.")
        return self._ph.hash(plain)

    def verify(self, plain: str, hash_value: str) -> bool:
        if not hash_value or not plain:
            return False
        try:
            return self._ph.verify(hash_value, plain)
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, hash_value: str) -> bool:
        try:
            return self._ph.check_needs_rehash(hash_value)
        except InvalidHashError:
            return True
