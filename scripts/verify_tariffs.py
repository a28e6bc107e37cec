import sys
import os

# 현재 스크립트의 상위 디렉터리(프로젝트 루트)를 path에 추가
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import PARKING_TABLE
from app.core.supabase_client import get_supabase_client
from app.exception.base_exception import BaseCustomException
from app.validate.tariff_validator import parse_rules

PAGE_SIZE = 1000

def verify():
    """
    Supabase 연결 상태와 저장된 요금표 형식을 검증하는 유틸리티 스크립트.
    보안을 위해 API Key는 출력하지 않으며, parking_spots.rates 를 모두 파싱해
    요금 엔진이 거부할 요금표(형식 오류)를 미리 찾아냅니다.
    """
    print("Verifying Supabase Connection...")
    try:
        client = get_supabase_client()
        print("✅ Client Initialization: Success")
    except Exception as e:
        print(f"❌ Connection Failed: {e}")
        sys.exit(1)

    checked, invalid = 0, 0
    offset = 0
    while True:
        rows = client.table(PARKING_TABLE).select("id, name, rates").range(offset, offset + PAGE_SIZE - 1).execute().data
        for row in rows:
            checked += 1
            try:
                parse_rules(row.get("rates") or [])
            except BaseCustomException as e:
                invalid += 1
                print(f"⚠️ [{row['id']}] {row.get('name', '')}: {e.message}")
        if len(rows) < PAGE_SIZE:
            break
        offset += PAGE_SIZE

    print(f"✅ Checked {checked} parking spots, {invalid} invalid tariff(s)")
    sys.exit(1 if invalid else 0)

if __name__ == "__main__":
    verify()
