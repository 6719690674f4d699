from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..database import Base

class User(Base):
    """
    회원 가입 후 로그인하여 영화를 구매하고 리뷰를 남길 수 있는 사용자를 나타냅니다.
    관리자 여부는 컬럼으로 저장하지 않고 AdminPolicy가 요청마다 판단합니다.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)

    library_entries = relationship("LibraryEntry", back_populates="user")
