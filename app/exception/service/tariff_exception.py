from app.exception.base_exception import BaseCustomException, ErrorCode


class InvalidTariffInputError(BaseCustomException):
    """요금 계산 전 입력 검증 실패 (주차 시간, 단위 시간, time_range 형식, 빈 요금표 등)"""
    def __init__(self, message: str = "요금 계산 입력값이 올바르지 않습니다."):
        super().__init__(
            message=message,
            error_code=ErrorCode.TARIFF_INVALID_INPUT,
            status_code=400
        )


class AmbiguousScopeError(BaseCustomException):
    """같은 종류의 규칙이 동일한 구체성으로 같은 시각에 겹치는 요금표 설정 오류"""
    def __init__(self, message: str = "동일한 시각에 적용되는 요금 규칙이 모호합니다."):
        super().__init__(
            message=message,
            error_code=ErrorCode.TARIFF_AMBIGUOUS_SCOPE,
            status_code=422
        )
