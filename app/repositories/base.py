from typing import Protocol, Optional

from app.models.dto import ParkingTariff

class ITariffRepository(Protocol):
    """주차장 요금표 저장소 인터페이스 (Repository Pattern Protocol)"""

    def get_tariff(self, parking_id: str) -> Optional[ParkingTariff]:
        """
        주차장 요금표 조회

        Args:
            parking_id (str): 주차장 식별 ID

        Returns:
            Optional[ParkingTariff]: 요금표, 주차장이 없으면 None
        """
        ...
