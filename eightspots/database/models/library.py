from sqlalchemy import Column, Integer, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base

class LibraryEntry(Base):
    """
    사용자(User)가 구매한 영화(Movie)와 시청 여부를 기록하는 연관 테이블입니다.
    (user_id, movie_id) 복합 기본키로 사용자당 영화 한 편에 하나의 행만 존재합니다.
    status: False = 아직 안 봄, True = 봤음.
    """
    __tablename__ = "user_library"
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    movie_id = Column(Integer, ForeignKey("movies.id"), primary_key=True)
    status = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="library_entries")
    movie = relationship("Movie")
