import pytest
from fastapi.testclient import TestClient
from app.main import app
from app.api.dependencies import get_parking_fee_service, get_tariff_repository
from app.repositories.memory import MockTariffRepository
from app.services.calendar_service import CalendarResolver
from app.services.parking_fee_service import ParkingFeeService

NIGHT_AND_DAY_RATES = [
    {"type": "base", "minutes": 40, "price": 200, "time_range": "8:00～20:00"},
    {"type": "base", "minutes": 60, "price": 100, "time_range": "20:00～8:00"},
    {"type": "max", "minutes": 1440, "price": 300, "time_range": "20:00～8:00"},
    {"type": "max", "minutes": 1440, "price": 900},
]


@pytest.fixture
def mock_repo():
    """각 테스트마다 독립적인 Mock Repository 인스턴스 생성"""
    repo = MockTariffRepository()
    repo.add("lot-1", NIGHT_AND_DAY_RATES, name="銀座パーキング")
    return repo


@pytest.fixture
def client(mock_repo):
    """Dependency override가 적용된 TestClient 제공 및 자동 정리"""
    app.dependency_overrides[get_tariff_repository] = lambda: mock_repo
    app.dependency_overrides[get_parking_fee_service] = lambda: ParkingFeeService(CalendarResolver(tz="Asia/Tokyo"))
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def fee_request(**overrides):
    body = {
        "rates": NIGHT_AND_DAY_RATES,
        "parking_start": "2025-10-17T22:00:00+09:00",
        "duration_minutes": 760,
    }
    body.update(overrides)
    return body


def test_calculate_fee_success(client):
    """요금표 직접 전달 시 200 OK와 성공 Envelope 반환"""
    response = client.post("/api/parking/fee", json=fee_request())

    assert response.status_code == 200
    data = response.json()
    assert data["isSuccess"] is True
    assert data["code"] == "COMMON200"
    assert data["result"]["fee"] == 900
    assert data["result"]["duration_minutes"] == 760
    assert data["result"]["breakdown"] is None


def test_calculate_fee_with_breakdown(client):
    """include_breakdown=True면 세그먼트/최대 요금 내역 포함"""
    response = client.post("/api/parking/fee", json=fee_request(duration_minutes=300, include_breakdown=True))

    assert response.status_code == 200
    breakdown = response.json()["result"]["breakdown"]
    assert breakdown["total_fee"] == 300
    assert breakdown["raw_fee"] == 500
    assert len(breakdown["caps_applied"]) == 1
    assert breakdown["caps_applied"][0]["rule"]["price"] == 300
    assert breakdown["segments"][0]["capped"] is True


def test_invalid_duration_returns_tariff_error(client):
    """duration_minutes <= 0 이면 400 + TARIFF-001"""
    response = client.post("/api/parking/fee", json=fee_request(duration_minutes=0))

    assert response.status_code == 400
    data = response.json()
    assert data["isSuccess"] is False
    assert data["code"] == "TARIFF-001"
    assert data["result"] is None


def test_malformed_time_range_returns_tariff_error(client):
    rates = [{"type": "base", "minutes": 30, "price": 100, "time_range": "9時～18時"}]
    response = client.post("/api/parking/fee", json=fee_request(rates=rates))

    assert response.status_code == 400
    assert response.json()["code"] == "TARIFF-001"


def test_ambiguous_rates_return_422(client):
    """같은 구체성의 규칙이 겹치면 422 + TARIFF-002"""
    rates = [
        {"type": "base", "minutes": 30, "price": 100},
        {"type": "base", "minutes": 60, "price": 300},
    ]
    response = client.post("/api/parking/fee", json=fee_request(rates=rates))

    assert response.status_code == 422
    assert response.json()["code"] == "TARIFF-002"


def test_missing_field_returns_validation_envelope(client):
    """요청 본문 스키마 오류는 VALIDATION-001 Envelope"""
    response = client.post("/api/parking/fee", json={"rates": NIGHT_AND_DAY_RATES})

    assert response.status_code == 422
    data = response.json()
    assert data["isSuccess"] is False
    assert data["code"] == "VALIDATION-001"
    assert "body.duration_minutes" in data["result"]


def test_calculate_stored_parking_fee(client):
    """저장된 주차장 요금표로 계산"""
    response = client.post(
        "/api/parking/lot-1/fee",
        json={"parking_start": "2025-10-17T22:00:00+09:00", "duration_minutes": 120},
    )

    assert response.status_code == 200
    result = response.json()["result"]
    assert result["fee"] == 200
    assert result["parking_id"] == "lot-1"
    assert result["parking_name"] == "銀座パーキング"


def test_unknown_parking_returns_404(client):
    response = client.post(
        "/api/parking/missing/fee",
        json={"parking_start": "2025-10-17T22:00:00+09:00", "duration_minutes": 120},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "PARKING-001"


def test_ping(client):
    assert client.get("/ping").json() == {"ok": True}
