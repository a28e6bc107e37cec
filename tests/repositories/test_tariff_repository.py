import pytest
from unittest.mock import MagicMock, patch

from app.models.dto import ParkingTariff
from app.repositories.memory import MockTariffRepository
from app.repositories.supabase_repository import SupabaseTariffRepository


class TestMockTariffRepository:
    """In-Memory 저장소"""

    def test_add_and_get(self):
        repo = MockTariffRepository()
        repo.add("lot-1", [{"type": "base", "minutes": 30, "price": 200}], name="Lot 1")

        tariff = repo.get_tariff("lot-1")
        assert tariff == ParkingTariff(id="lot-1", name="Lot 1", rates=[{"type": "base", "minutes": 30, "price": 200}])

    def test_missing(self):
        assert MockTariffRepository().get_tariff("nope") is None


class TestSupabaseTariffRepository:
    """
    Supabase 저장소 (클라이언트 Mock)

    Rationale:
        실제 DB 없이 쿼리 체인(select -> eq -> limit -> execute)과 응답 매핑만 검증합니다.
    """

    @pytest.fixture
    def supabase(self):
        client = MagicMock()
        with patch("app.repositories.supabase_repository.get_supabase_client", return_value=client):
            yield client

    def _query(self, supabase):
        return supabase.table.return_value.select.return_value.eq.return_value.limit.return_value

    def test_row_mapped_to_tariff(self, supabase):
        self._query(supabase).execute.return_value = MagicMock(
            data=[{"id": 42, "name": "タイムズ銀座", "rates": [{"type": "max", "minutes": 1440, "price": 1000}]}]
        )

        tariff = SupabaseTariffRepository().get_tariff("42")

        supabase.table.assert_called_once_with("parking_spots")
        supabase.table.return_value.select.return_value.eq.assert_called_once_with("id", "42")
        assert tariff.id == "42"
        assert tariff.rates == [{"type": "max", "minutes": 1440, "price": 1000}]

    def test_null_rates_become_empty(self, supabase):
        self._query(supabase).execute.return_value = MagicMock(data=[{"id": "7", "name": "x", "rates": None}])
        assert SupabaseTariffRepository().get_tariff("7").rates == []

    def test_not_found(self, supabase):
        self._query(supabase).execute.return_value = MagicMock(data=[])
        assert SupabaseTariffRepository().get_tariff("missing") is None
