from functools import lru_cache

from app.repositories.base import ITariffRepository
from app.services.parking_fee_service import ParkingFeeService


@lru_cache(maxsize=1)
def get_tariff_repository() -> ITariffRepository:
    """
    Tariff Repository 의존성 주입 (Singleton via lru_cache)

    Returns:
        ITariffRepository: Supabase Repository 반환 (캐싱된 인스턴스)

    Rationale:
        Supabase 클라이언트는 parking_id 기반 조회 엔드포인트에서만 필요하므로
        함수 내부에서 import 하여 요금표 직접 전달 API가 DB 설정 없이도 동작하게 합니다.
        테스트에서는 app.dependency_overrides로 MockTariffRepository를 주입합니다.
    """
    from app.repositories.supabase_repository import SupabaseTariffRepository
    return SupabaseTariffRepository()


@lru_cache(maxsize=1)
def get_parking_fee_service() -> ParkingFeeService:
    """ParkingFeeService 인스턴스 반환 (DI용, 설정된 타임존/공휴일 캘린더 사용)."""
    return ParkingFeeService()
