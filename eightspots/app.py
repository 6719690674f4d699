# eightspots/app.py
from wsgiref.simple_server import make_server
from urllib.parse import parse_qs
import base64
import json
import logging
import re

from eightspots.config import DEFAULT_GENRES, Settings
from eightspots.database.database import Database
from eightspots.repositories.sqlalchemy import (
    SqlalchemyUserRepository, SqlalchemyCatalogRepository, SqlalchemyLibraryRepository,
    SqlalchemyReviewRepository, SqlalchemyStoreRepository
)
from eightspots.services.auth_service import AuthService, AdminIdPolicy
from eightspots.services.catalog_service import CatalogService
from eightspots.services.genre_index import GenreIndex
from eightspots.services.library_service import LibraryService
from eightspots.services.password_hasher import PasswordHasher
from eightspots.services.review_service import ReviewService
from eightspots.services.session_store import SessionStore
from eightspots.services.exceptions import (
    InvalidCredentialsError, SessionRequiredError, AnonymousRequiredError, PermissionDeniedError,
    DuplicateUsernameError, AlreadyOwnedError, NotOwnedError, MovieNotFoundError,
    UserNotFoundError, UnknownGenreLabelError, StoreUnavailableError
)
from eightspots.utils.poster_storage import PosterStorage

logger = logging.getLogger(__name__)

LOGIN_PATH = "/v1/auth/tokens"
HOME_PATH = "/v1/movies"

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise ValueError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object.")
    return data

def get_query_param(environ, name, default=None):
    values = parse_qs(environ.get("QUERY_STRING", "")).get(name)
    return values[0] if values else default

def principal_of(environ):
    return environ['principal']

# 가드 실패 중 리다이렉트로 처리하는 예외. PermissionDeniedError는 403으로 분리됩니다.
REDIRECT_MAP = {
    SessionRequiredError: LOGIN_PATH,
    AnonymousRequiredError: HOME_PATH,
}

ERROR_MAP = [
    (InvalidCredentialsError, "401 Unauthorized"),
    (PermissionDeniedError, "403 Forbidden"),
    (DuplicateUsernameError, "409 Conflict"),
    (AlreadyOwnedError, "409 Conflict"),
    (NotOwnedError, "404 Not Found"),
    (MovieNotFoundError, "404 Not Found"),
    (UserNotFoundError, "404 Not Found"),
    (UnknownGenreLabelError, "400 Bad Request"),
    (ValueError, "400 Bad Request"),
    (StoreUnavailableError, "503 Service Unavailable"),
]

def handle_exception(e):
    """예외를 (상태, 본문, 추가 헤더)로 변환합니다. 어떤 예외도 프로세스를 종료시키지 않습니다."""
    for error_type, location in REDIRECT_MAP.items():
        if isinstance(e, error_type):
            return "303 See Other", json.dumps({"error": str(e), "location": location}), [("Location", location)]

    for error_type, status in ERROR_MAP:
        if isinstance(e, error_type):
            if isinstance(e, StoreUnavailableError):
                logger.warning("Store unavailable: %s", e)
            return status, json.dumps({"error": str(e)}), []

    logger.exception("Unhandled error while processing request")
    return "500 Internal Server Error", json.dumps({"error": "Internal Server Error"}), []

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def make_application(database, session_store, settings=None, hasher=None, genre_index=None, poster_storage=None):
    """
    프로세스 시작 시 만든 공유 객체들을 받아 WSGI 애플리케이션을 생성합니다.
    요청마다 DB 세션과 리포지토리/서비스를 새로 만들고, 요청이 끝나면 DB 세션을 닫습니다.
    """
    settings = settings or Settings()
    hasher = hasher or PasswordHasher()
    genre_index = genre_index or GenreIndex(settings.genres)
    # 기본 어휘 뒤에 추가만 허용
    genre_index.assert_extends(DEFAULT_GENRES)
    poster_storage = poster_storage or PosterStorage(settings.poster_dir)
    admin_policy = AdminIdPolicy(settings.admin_ids)

    def application(environ, start_response):
        headers = [("Content-Type", "application/json")]
        db_session = database.session()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            user_repo = SqlalchemyUserRepository(db_session)
            catalog_repo = SqlalchemyCatalogRepository(db_session)
            library_repo = SqlalchemyLibraryRepository(db_session)
            review_repo = SqlalchemyReviewRepository(db_session)
            store_repo = SqlalchemyStoreRepository(db_session)

            auth_service = AuthService(user_repo, hasher, session_store, admin_policy)
            catalog_service = CatalogService(catalog_repo, store_repo, genre_index, poster_storage)
            library_service = LibraryService(library_repo, catalog_repo)
            review_service = ReviewService(review_repo, catalog_repo)

            # 2. 생성된 서비스 객체들을 environ을 통해 핸들러에 전달
            environ['services'] = {
                'auth': auth_service,
                'catalog': catalog_service,
                'library': library_service,
                'review': review_service,
            }
            environ['genre_index'] = genre_index

            # 3. 요청마다 세션 토큰으로 인증 상태를 다시 계산
            environ['principal'] = auth_service.resolve(environ.get('HTTP_X_AUTH_TOKEN'))

            # 4. 라우팅 및 핸들러 실행
            path = environ.get("PATH_INFO", "")
            method = environ.get("REQUEST_METHOD", "")

            handler, path_args = None, []
            for route_method, pattern, route_handler in ROUTES:
                if method == route_method and (match := re.match(pattern, path)):
                    handler, path_args = route_handler, match.groups()
                    break

            if handler:
                status, response_body = handler(environ, *path_args)
            else:
                status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            status, response_body, extra_headers = handle_exception(e)
            headers.extend(extra_headers)
        finally:
            db_session.close()

        start_response(status, headers)
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def register_handler(environ, *args):
    auth = environ['services']['auth']
    auth.require_anonymous(principal_of(environ))
    data = get_request_data(environ)
    user = auth.register(data.get('username'), data.get('password'))
    return '201 Created', json.dumps({
        "id": user.id,
        "username": user.username,
        "message": "User registered successfully! Please log in.",
    })

def login_handler(environ, *args):
    auth = environ['services']['auth']
    auth.require_anonymous(principal_of(environ))
    data = get_request_data(environ)
    token = auth.login(data.get('username'), data.get('password'))
    return '201 Created', json.dumps(token)

def logout_handler(environ, *args):
    environ['services']['auth'].terminate_session(environ.get('HTTP_X_AUTH_TOKEN'))
    return '200 OK', json.dumps({"message": "You are logged out"})

def profile_handler(environ, *args):
    principal = principal_of(environ)
    environ['services']['auth'].require_authenticated(principal)
    return '200 OK', json.dumps({
        "id": principal.user_id,
        "username": principal.username,
        "is_admin": principal.is_admin,
    })

def change_username_handler(environ, *args):
    data = get_request_data(environ)
    user = environ['services']['auth'].change_username(principal_of(environ), data.get('username'))
    return '200 OK', json.dumps({"id": user.id, "username": user.username})

def list_genres_handler(environ, *args):
    return '200 OK', json.dumps({"genres": environ['genre_index'].as_dict()})

def list_movies_handler(environ, *args):
    movies = environ['services']['catalog'].list_movies()
    return '200 OK', json.dumps({"movies": movies})

def top_movies_handler(environ, *args):
    limit = get_query_param(environ, 'limit', '5')
    try:
        limit = int(limit)
    except ValueError:
        raise ValueError(f"Invalid limit '{limit}'.")
    top = environ['services']['catalog'].top_movies_by_genre(limit)
    return '200 OK', json.dumps({"genres": top})

def create_movie_handler(environ, *args):
    data = get_request_data(environ)
    poster_base64 = data.get('poster_base64')
    poster_data = base64.b64decode(poster_base64, validate=True) if poster_base64 else None
    movie = environ['services']['catalog'].add_movie(
        principal_of(environ),
        title=data.get('title'),
        score=data.get('score'),
        price=data.get('price'),
        genres=data.get('genres', []),
        poster_filename=data.get('poster_filename', ''),
        poster_data=poster_data,
    )
    return '201 Created', json.dumps(movie)

def get_movie_handler(environ, movie_id):
    movie = environ['services']['catalog'].get_movie(int(movie_id))
    movie["reviews"] = environ['services']['review'].list_reviews(int(movie_id))
    return '200 OK', json.dumps(movie)

def buy_movie_handler(environ, movie_id):
    principal = principal_of(environ)
    environ['services']['auth'].require_authenticated(principal)
    environ['services']['library'].purchase(principal.user_id, int(movie_id))
    return '201 Created', json.dumps({"message": f"Movie '{movie_id}' added to your library."})

def list_reviews_handler(environ, movie_id):
    reviews = environ['services']['review'].list_reviews(int(movie_id))
    return '200 OK', json.dumps({"reviews": reviews})

def create_review_handler(environ, movie_id):
    data = get_request_data(environ)
    review = environ['services']['review'].add_review(
        principal_of(environ), int(movie_id), data.get('rating'), data.get('comment', '')
    )
    return '201 Created', json.dumps(review)

def library_handler(environ, *args):
    principal = principal_of(environ)
    environ['services']['auth'].require_authenticated(principal)
    catalog = environ['services']['catalog']
    library = environ['services']['library']
    groups = library.partition(library.list_for_user(principal.user_id))
    return '200 OK', json.dumps({
        name: [catalog.movie_to_dict(m) for m in movies] for name, movies in groups.items()
    })

def toggle_status_handler(environ, movie_id):
    principal = principal_of(environ)
    environ['services']['auth'].require_authenticated(principal)
    status = environ['services']['library'].toggle_status(principal.user_id, int(movie_id))
    return '200 OK', json.dumps({"movie_id": int(movie_id), "watched": status})

def list_stores_handler(environ, *args):
    return '200 OK', json.dumps({"stores": environ['services']['catalog'].list_stores()})

def create_store_handler(environ, *args):
    data = get_request_data(environ)
    store = environ['services']['catalog'].add_store(
        principal_of(environ), data.get('phone_num'), data.get('city'), data.get('address')
    )
    return '201 Created', json.dumps(store)

ROUTES = [
    ('POST', r'^/v1/auth/register$', register_handler),
    ('POST', r'^/v1/auth/tokens$', login_handler),
    ('DELETE', r'^/v1/auth/tokens$', logout_handler),
    ('GET', r'^/v1/profile$', profile_handler),
    ('PUT', r'^/v1/profile/username$', change_username_handler),
    ('GET', r'^/v1/genres$', list_genres_handler),
    ('GET', r'^/v1/movies$', list_movies_handler),
    ('POST', r'^/v1/movies$', create_movie_handler),
    ('GET', r'^/v1/movies/top$', top_movies_handler),
    ('GET', r'^/v1/movies/([0-9]+)$', get_movie_handler),
    ('POST', r'^/v1/movies/([0-9]+)/buy$', buy_movie_handler),
    ('GET', r'^/v1/movies/([0-9]+)/reviews$', list_reviews_handler),
    ('POST', r'^/v1/movies/([0-9]+)/reviews$', create_review_handler),
    ('GET', r'^/v1/library$', library_handler),
    ('POST', r'^/v1/library/([0-9]+)/toggle$', toggle_status_handler),
    ('GET', r'^/v1/stores$', list_stores_handler),
    ('POST', r'^/v1/stores$', create_store_handler),
]

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    database = Database(settings.database_url)
    database.create_all()
    session_store = SessionStore(settings.session_ttl_seconds)
    application = make_application(database, session_store, settings)

    try:
        with make_server(settings.host, settings.port, application) as httpd:
            logger.info("Serving Eight Spots on port %s...", settings.port)
            httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down.")
    finally:
        session_store.clear()
        database.dispose()

if __name__ == "__main__":
    main()
