from fastapi import APIRouter, Depends, Request
import logging

from app.api.dependencies import get_parking_fee_service, get_tariff_repository
from app.core.config import RATE_LIMIT_PER_MINUTE
from app.core.limiter import limiter
from app.core.response import ApiResponse, success_response
from app.exception.common.parking_exception import ParkingSpotNotFoundError
from app.models.dto import FeeRequest, FeeResult, ParkingFeeRequest
from app.repositories.base import ITariffRepository
from app.services.parking_fee_service import ParkingFeeService

router = APIRouter(
    prefix="/api/parking",
    tags=["Parking Fee"],
)
logger = logging.getLogger("app")


@router.post("/fee", response_model=ApiResponse[FeeResult])
@limiter.limit(f"{RATE_LIMIT_PER_MINUTE}/minute")
def calculate_fee(
    request: Request,
    req: FeeRequest,
    service: ParkingFeeService = Depends(get_parking_fee_service),
) -> ApiResponse[FeeResult]:
    """
    요금표를 직접 전달하여 주차 요금 계산

    - **rates**: 요금 규칙 목록 (parking_spots.rates 와 동일한 JSON 형식)
    - **parking_start**: 주차 시작 시각 (ISO-8601, 타임존 필수)
    - **duration_minutes**: 주차 시간(분)
    - **include_breakdown**: 세그먼트/최대 요금 내역 포함 여부

    Returns:
        200 OK: 계산 성공
        400 Bad Request: 입력값 오류 (TARIFF-001)
        422 Unprocessable Entity: 요금 규칙 범위 모호 (TARIFF-002)
    """
    # 커스텀 예외는 전역 핸들러가 처리
    breakdown = service.calculate(req.rates, req.parking_start, req.duration_minutes)

    return success_response(FeeResult(
        fee=breakdown.total_fee,
        duration_minutes=req.duration_minutes,
        breakdown=breakdown if req.include_breakdown else None,
    ))


@router.post("/{parking_id}/fee", response_model=ApiResponse[FeeResult])
@limiter.limit(f"{RATE_LIMIT_PER_MINUTE}/minute")
def calculate_parking_fee(
    request: Request,
    parking_id: str,
    req: ParkingFeeRequest,
    repo: ITariffRepository = Depends(get_tariff_repository),
    service: ParkingFeeService = Depends(get_parking_fee_service),
) -> ApiResponse[FeeResult]:
    """
    저장된 주차장 요금표로 주차 요금 계산

    - **parking_id**: 주차장 ID (Path Parameter)

    Returns:
        200 OK: 계산 성공
        404 Not Found: 주차장 없음 (PARKING-001)
    """
    tariff = repo.get_tariff(parking_id)
    if tariff is None:
        raise ParkingSpotNotFoundError()

    breakdown = service.calculate(tariff.rates, req.parking_start, req.duration_minutes)
    logger.info({
        "message": "parking fee calculated",
        "parkingId": parking_id,
        "durationMinutes": req.duration_minutes,
        "fee": breakdown.total_fee,
    })

    return success_response(FeeResult(
        fee=breakdown.total_fee,
        parking_id=tariff.id,
        parking_name=tariff.name,
        duration_minutes=req.duration_minutes,
        breakdown=breakdown if req.include_breakdown else None,
    ))
