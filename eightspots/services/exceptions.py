# eightspots/services/exceptions.py

# --- Auth Exceptions ---
class InvalidCredentialsError(Exception):
    """사용자 이름이 없거나 비밀번호가 틀렸을 때 (두 경우를 구분하지 않음)"""
    def __init__(self):
        super().__init__("Invalid username or password.")

class SessionRequiredError(Exception):
    """로그인이 필요한 요청에 세션이 없을 때"""
    pass

class AnonymousRequiredError(Exception):
    """로그인/가입처럼 비로그인 상태에서만 허용되는 요청에 세션이 있을 때"""
    pass

class PermissionDeniedError(Exception):
    """관리자 권한이 필요한 요청을 일반 사용자가 보냈을 때"""
    pass

# --- Creation/Validation Exceptions ---
class DuplicateUsernameError(Exception):
    """사용자 이름이 이미 사용 중일 때"""
    def __init__(self, username):
        self.username = username
        super().__init__(f"Username '{username}' is already taken.")

class AlreadyOwnedError(Exception):
    """이미 라이브러리에 있는 영화를 다시 구매하려 할 때"""
    def __init__(self, user_id, movie_id):
        self.user_id = user_id
        self.movie_id = movie_id
        super().__init__(f"Movie '{movie_id}' is already in the library of user '{user_id}'.")

class UnknownGenreLabelError(Exception):
    """장르 어휘에 없는 라벨을 인코딩하려 할 때"""
    def __init__(self, label):
        self.label = label
        super().__init__(f"Unknown genre label '{label}'.")

class GenreVocabularyError(Exception):
    """기존 비트 위치를 바꾸는 장르 어휘 변경이 감지되었을 때"""
    pass

# --- General Exceptions ---
class NotOwnedError(Exception):
    """라이브러리에 없는 영화의 시청 상태를 바꾸려 할 때"""
    def __init__(self, user_id, movie_id):
        self.user_id = user_id
        self.movie_id = movie_id
        super().__init__(f"Movie '{movie_id}' is not in the library of user '{user_id}'.")

class MovieNotFoundError(Exception):
    """영화를 찾을 수 없을 때"""
    pass

class UserNotFoundError(Exception):
    """사용자를 찾을 수 없을 때"""
    pass

# --- Store Exceptions ---
class StoreUnavailableError(Exception):
    """저장소(DB) 호출이 일시적으로 실패했을 때. 내부에서 재시도하지 않습니다."""
    pass
