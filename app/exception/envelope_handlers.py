from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi import HTTPException
from slowapi.errors import RateLimitExceeded
import logging
from app.core.response import error_response, ValidationErrorDetail
from app.core.error_codes import ErrorCode
from app.exception.base_exception import BaseCustomException
from app.exception.common.rate_limit_exception import RateLimitException
from app.core.config import IS_DEBUG
import traceback

logger = logging.getLogger("app")


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


async def custom_exception_handler(request: Request, exc: BaseCustomException):
    """
    도메인 예외(BaseCustomException)를 ApiResponse 포맷으로 변환

    Rationale:
        요금표 입력 오류(TARIFF-001), 범위 모호(TARIFF-002), 주차장 없음(PARKING-001) 등
        요금 계산 전에 드러나는 오류를 표준 에러 응답으로 변환합니다.
        4xx는 호출자 입력 문제이므로 경고 수준, 5xx로 정의된 예외는 에러 수준으로 로깅합니다.
    """
    # error_code가 Enum이면 .value, 아니면 그대로 사용
    error_code_value = exc.error_code.value if hasattr(exc.error_code, 'value') else exc.error_code

    log = logger.error if exc.status_code >= 500 else logger.warning
    log({
        "status": exc.status_code,
        "errorCode": error_code_value,
        "message": exc.message,
        "client_ip": _client_ip(request),
        "path": request.url.path
    })
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            message=exc.message,
            code=error_code_value
        ).model_dump()
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    HTTPException을 ApiResponse 포맷으로 변환

    Rationale:
        라우팅 단계 오류(405 등)에서도 호출자가 표준 Envelope Pattern을 받도록 변환합니다.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            message=exc.detail,
            code=ErrorCode.http_error(exc.status_code)
        ).model_dump()
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    요청 본문 스키마 오류를 ApiResponse 포맷으로 변환 (422, VALIDATION-001)

    Rationale:
        필드 누락/타입 오류처럼 요금 엔진까지 도달하지 못한 요청은
        필드별 상세(result)와 함께 반환하여 호출자가 어느 값이 잘못됐는지 알 수 있게 합니다.
        요금표 내용 자체의 오류는 TARIFF-001로 따로 구분됩니다.
    """
    error_details = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        error_details[field] = ValidationErrorDetail(
            message=error["msg"],
            type=error["type"],
            input=error.get("input")
        )

    logger.info({
        "status": status.HTTP_422_UNPROCESSABLE_ENTITY,
        "errorCode": ErrorCode.VALIDATION_ERROR,
        "fields": list(error_details),
        "path": request.url.path
    })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response(
            message="입력값을 확인해주세요.",
            code=ErrorCode.VALIDATION_ERROR,
            result=error_details
        ).model_dump()
    )


async def global_exception_handler_envelope(request: Request, exc: Exception):
    """
    모든 미처리 예외(500)를 ApiResponse 포맷으로 변환

    Rationale:
        요금 엔진 내부 오류(예: 세션 전체를 덮는 경로 없음)의 스택 트레이스는 로그에만 기록하고,
        클라이언트에게는 일반적인 메시지만 반환합니다.
    """
    # 상세 로그 기록 (Trace ID는 로깅 필터에서 자동으로 주입됨)
    logger.exception(
        f"Unhandled Exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "client_ip": _client_ip(request),
        }
    )

    # 디버그 모드가 아닐 경우 상세 에러 정보(Stack Trace 등)를 노출하지 않음
    if IS_DEBUG:
        error_result = {
            "error_detail": str(exc),
            "stack_trace": traceback.format_exc()
        }
    else:
        error_result = None

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(
            message="서버 내부 오류가 발생했습니다. 담당자에게 문의해주세요.",
            code=ErrorCode.INTERNAL_ERROR,
            result=error_result
        ).model_dump()
    )


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    """
    Rate Limit 초과 예외 핸들러

    slowapi의 RateLimitExceeded 예외를 비즈니스 예외(RateLimitException)로 변환하여
    일관된 에러 응답 포맷(429, RATE-001)을 유지합니다.
    """
    return await custom_exception_handler(request, RateLimitException())
