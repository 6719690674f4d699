from abc import ABC, abstractmethod
from typing import List
from eightspots.database import models

class IStoreRepository(ABC):
    @abstractmethod
    def create(self, store_model: models.Store) -> models.Store:
        """새로운 매장을 추가합니다."""
        pass

    @abstractmethod
    def list_all(self) -> List[models.Store]:
        """모든 매장 목록을 조회합니다."""
        pass
