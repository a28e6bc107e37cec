"""
Rate Limiter 모듈
순환 임포트를 피하기 위해 limiter를 중앙 집중화

요금 계산 API는 요청마다 DP 계산을 수행하므로 IP 기준으로 호출 횟수를 제한합니다.
한도는 RATE_LIMIT_PER_MINUTE, 비활성화는 RATE_LIMIT_ENABLED=false 로 설정합니다.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import RATE_LIMIT_ENABLED

# 사용자의 IP 주소를 기준으로 제한
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
