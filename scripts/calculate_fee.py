# scripts/calculate_fee.py
"""
요금표 JSON 파일로 주차 요금을 계산하는 점검용 스크립트

입력 파일은 parking_spots.rates 와 같은 형식의 규칙 배열이거나
{"rates": [...]} 형태의 객체입니다.

실행:
    python scripts/calculate_fee.py --rates rates.json --start 2025-10-17T22:00:00+09:00 --minutes 760
    python scripts/calculate_fee.py --rates rates.json --start 2025-10-17T18:00:00+09:00 --minutes 960 --breakdown
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 PYTHONPATH에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.exception.base_exception import BaseCustomException
from app.services.parking_fee_service import compute_fee

logger = logging.getLogger(__name__)


def load_rates(path: Path) -> list:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("rates", [])
    return data


def main() -> int:
    parser = argparse.ArgumentParser(description="주차 요금 계산")
    parser.add_argument("--rates", type=Path, required=True, help="요금표 JSON 파일 경로")
    parser.add_argument("--start", type=str, required=True, help="주차 시작 시각 (ISO-8601, 타임존 필수)")
    parser.add_argument("--minutes", type=int, required=True, help="주차 시간(분)")
    parser.add_argument("--breakdown", action="store_true", help="세그먼트/최대 요금 내역을 JSON으로 출력")
    parser.add_argument("--verbose", action="store_true", help="엔진 DEBUG 로그 출력")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        rates = load_rates(args.rates)
        result = compute_fee(rates, args.start, args.minutes)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read rates file {args.rates}: {e}")
        return 1
    except BaseCustomException as e:
        print(f"❌ [{e.error_code.value}] {e.message}")
        return 1

    print(f"✅ Fee: {result.total_fee}円 ({args.minutes}분)")
    if args.breakdown:
        print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
