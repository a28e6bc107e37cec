from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from app.api.parking_fee import router as parking_fee_router
from app.core.config import ALLOWED_ORIGINS, LOG_DIR
from app.core.limiter import limiter
from app.core.logging_config import setup_logging
from app.core.middleware import CacheControlMiddleware, TraceIDMiddleware
from app.exception.base_exception import BaseCustomException
from app.exception.envelope_handlers import (
    custom_exception_handler,
    global_exception_handler_envelope,
    http_exception_handler,
    rate_limit_exception_handler,
    validation_exception_handler,
)

app = FastAPI(title="Parking Fee Engine")

# Rate Limiter (slowapi는 app.state.limiter를 참조)
app.state.limiter = limiter

# 미들웨어는 나중에 추가된 것이 먼저 실행됨 (TraceID가 가장 바깥)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CacheControlMiddleware)
app.add_middleware(TraceIDMiddleware)


@app.get("/ping")
def ping():
    return {"ok": True}


# API 라우터 포함
app.include_router(parking_fee_router)

# 커스텀 예외 핸들러는 라우터 포함 이후에 추가
app.add_exception_handler(BaseCustomException, custom_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
app.add_exception_handler(Exception, global_exception_handler_envelope)

# 로깅 설정(콘솔 + 일자별 파일 로테이션, JSON 포맷)
setup_logging(LOG_DIR)
