from .sqlalchemy_user_repository import SqlalchemyUserRepository
from .sqlalchemy_catalog_repository import SqlalchemyCatalogRepository
from .sqlalchemy_library_repository import SqlalchemyLibraryRepository
from .sqlalchemy_review_repository import SqlalchemyReviewRepository
from .sqlalchemy_store_repository import SqlalchemyStoreRepository
