from functools import lru_cache
from supabase import create_client, Client, ClientOptions
from app.core.config import SUPABASE_URL, SUPABASE_KEY

@lru_cache
def get_supabase_client() -> Client:
    """
    Supabase 클라이언트 반환 (Singleton via lru_cache)

    Returns:
        Client: Supabase Client 인스턴스

    Rationale:
        - functools.lru_cache를 사용하여 Thread-safe한 싱글톤 패턴 구현
        - 요금 엔진은 DB 없이도 동작해야 하므로 import 시점이 아닌 최초 호출 시점에 생성
        - 요금표 조회는 읽기 전용이므로 세션 유지/토큰 갱신 불필요
    """
    if not SUPABASE_URL or not SUPABASE_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

    options = ClientOptions(
        schema="public",
        auto_refresh_token=False,
        persist_session=False
    )

    return create_client(SUPABASE_URL, SUPABASE_KEY, options=options)
