from .user import User
from .movie import Movie
from .library import LibraryEntry
from .review import Review
from .store import Store

__all__ = ["User", "Movie", "LibraryEntry", "Review", "Store"]
