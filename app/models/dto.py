from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Dict, Any, Optional

from app.models.tariff import FeeBreakdown


# Parking Tariff DTO (DB Query Result)
class ParkingTariff(BaseModel):
    """Parking spot tariff (parking_spots 테이블의 id, name, rates 컬럼 매핑)"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Parking spot ID")
    name: str = Field("", description="Parking spot name")
    rates: List[Dict[str, Any]] = Field(default_factory=list, description="Raw tariff rules (JSONB)")

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v: Any) -> str:
        """DB의 정수 PK도 문자열로 통일"""
        return str(v)

    @field_validator('rates', mode='before')
    @classmethod
    def handle_null_rates(cls, v: Any) -> List[Dict[str, Any]]:
        """DB에서 null로 오는 rates를 빈 리스트로 변환"""
        if v is None:
            return []
        return v


# Request DTO
class FeeRequest(BaseModel):
    """요금표를 직접 전달하는 요금 계산 요청 (calculate_simple_parking_fee 호환)"""
    rates: List[Dict[str, Any]] = Field(..., description="Tariff rules (type/minutes/price/time_range/day_type/apply_after)")
    parking_start: str = Field(..., description="Parking start (ISO-8601 with timezone)")
    duration_minutes: int = Field(..., description="Parking duration in minutes")
    include_breakdown: bool = Field(False, description="Whether to return the itemized breakdown")


class ParkingFeeRequest(BaseModel):
    """저장된 주차장 요금표로 계산하는 요청"""
    parking_start: str = Field(..., description="Parking start (ISO-8601 with timezone)")
    duration_minutes: int = Field(..., description="Parking duration in minutes")
    include_breakdown: bool = Field(False, description="Whether to return the itemized breakdown")


# Response DTO
class FeeResult(BaseModel):
    """요금 계산 결과"""
    fee: int = Field(..., description="Total fee (JPY)")
    parking_id: Optional[str] = Field(None, description="Parking spot ID (repository lookup only)")
    parking_name: Optional[str] = Field(None, description="Parking spot name (repository lookup only)")
    duration_minutes: int = Field(..., description="Parking duration in minutes")
    breakdown: Optional[FeeBreakdown] = Field(None, description="Itemized segments and caps")
