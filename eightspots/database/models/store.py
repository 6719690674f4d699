from sqlalchemy import Column, Integer, String
from ..database import Base

class Store(Base):
    """오프라인 매장 위치."""
    __tablename__ = "stores"
    id = Column(Integer, primary_key=True, index=True)
    phone_num = Column(String, nullable=False)
    city = Column(String, nullable=False)
    address = Column(String, nullable=False)
