from datetime import datetime
from typing import Any, List, Mapping, Sequence, Union

from pydantic import ValidationError

from app.exception.service.tariff_exception import InvalidTariffInputError
from app.models.tariff import ParkingSession, TariffRule

# --- 단위 검증 함수들 (가장 작은 단위) ---

def validate_rules_not_empty(rules: Sequence[Any]):
    """요금표가 비어있는지 검증"""
    if not rules:
        raise InvalidTariffInputError("요금표(rates)가 비어 있습니다.")

def validate_duration(duration_minutes: int):
    """주차 시간(분)이 양의 정수인지 검증"""
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise InvalidTariffInputError(f"duration_minutes는 정수여야 합니다: {duration_minutes!r}")
    if duration_minutes <= 0:
        raise InvalidTariffInputError(f"duration_minutes는 0보다 커야 합니다: {duration_minutes}")

def parse_parking_start(value: Union[str, datetime]) -> datetime:
    """ISO-8601 문자열(타임존 필수) 또는 aware datetime을 파싱"""
    if isinstance(value, datetime):
        parsed = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise InvalidTariffInputError("parking_start는 비어있지 않은 문자열이어야 합니다.")
        raw = value.strip()
        if raw.endswith("Z"):
            raw = f"{raw[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise InvalidTariffInputError(f"parking_start가 ISO 8601 형식이 아닙니다: {value}") from exc
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise InvalidTariffInputError("parking_start에 타임존 정보가 필요합니다.")
    return parsed

def parse_rule(raw: Union[TariffRule, Mapping[str, Any]], index: int) -> TariffRule:
    """원본 규칙 1건을 TariffRule로 변환 (단위 시간, 가격, time_range, day_type 검증 포함)"""
    if isinstance(raw, TariffRule):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidTariffInputError(f"rates[{index}]는 객체여야 합니다.")
    try:
        return TariffRule.model_validate(dict(raw))
    except ValidationError as exc:
        reasons = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'rule'}: {err['msg']}"
            for err in exc.errors()
        )
        raise InvalidTariffInputError(f"rates[{index}] 규칙이 올바르지 않습니다 ({reasons})") from exc

# --- 조합 검증 함수들 ---

def parse_rules(raw_rules: Sequence[Union[TariffRule, Mapping[str, Any]]]) -> List[TariffRule]:
    """
    요금표 전체를 검증/변환합니다.
    (빈 리스트 검증 + 모든 개별 규칙 검증)
    """
    validate_rules_not_empty(raw_rules)
    return [parse_rule(raw, index) for index, raw in enumerate(raw_rules)]

def validate_fee_request(
    raw_rules: Sequence[Union[TariffRule, Mapping[str, Any]]],
    parking_start: Union[str, datetime],
    duration_minutes: int,
) -> tuple[List[TariffRule], ParkingSession]:
    """
    요금 계산 요청 전체를 계산 시작 전에 검증합니다.
    • 요금표 비어있음 / 개별 규칙 형식
    • 주차 시작 시각(타임존 포함) 형식
    • 주차 시간 양수 여부
    """
    rules = parse_rules(raw_rules)
    validate_duration(duration_minutes)
    session = ParkingSession(
        start=parse_parking_start(parking_start),
        duration_minutes=duration_minutes,
    )
    return rules, session
