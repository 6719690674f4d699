from sqlalchemy import Column, Integer, String, Float, Numeric
from ..database import Base

class Movie(Base):
    """
    카탈로그에 등록된 영화 한 편을 나타냅니다.
    genre_bitmap의 i번째 비트는 장르 어휘(vocabulary)의 i번째 라벨을 뜻합니다.
    """
    __tablename__ = "movies"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    score = Column(Float, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    genre_bitmap = Column(Integer, nullable=False, default=0)
    poster_url = Column(String, nullable=False, default="")
