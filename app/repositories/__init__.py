from app.repositories.base import ITariffRepository
from app.repositories.memory import MockTariffRepository

__all__ = ["ITariffRepository", "MockTariffRepository"]
