from typing import Any, Dict, List, Optional
from app.models.dto import ParkingTariff
from app.repositories.base import ITariffRepository

class MockTariffRepository(ITariffRepository):
    """
    In-Memory Mock 저장소 구현체

    Note:
        서버 재시작 시 데이터가 초기화됩니다.
        테스트에서 Supabase 대신 주입하여 사용합니다.
    """

    def __init__(self):
        # Data Structure: {parking_id: ParkingTariff}
        self._data: Dict[str, ParkingTariff] = {}

    def add(self, parking_id: str, rates: List[Dict[str, Any]], name: str = "") -> None:
        self._data[parking_id] = ParkingTariff(id=parking_id, name=name, rates=rates)

    def get_tariff(self, parking_id: str) -> Optional[ParkingTariff]:
        return self._data.get(parking_id)
