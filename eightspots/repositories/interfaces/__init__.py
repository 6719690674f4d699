from .user import IUserRepository
from .catalog import ICatalogRepository
from .library import ILibraryRepository
from .review import IReviewRepository
from .store import IStoreRepository
