from typing import Optional
from app.core.config import PARKING_TABLE
from app.core.supabase_client import get_supabase_client
from app.models.dto import ParkingTariff
from app.repositories.base import ITariffRepository
import logging

logger = logging.getLogger(__name__)

class SupabaseTariffRepository(ITariffRepository):
    """
    Supabase based Tariff Repository implementation.
    Uses the 'parking_spots' table (id, name, rates JSONB) in Supabase.
    """

    def __init__(self):
        self.supabase = get_supabase_client()
        self.table_name = PARKING_TABLE

    def get_tariff(self, parking_id: str) -> Optional[ParkingTariff]:
        """
        Fetches a parking spot's tariff rules. Returns None when the spot does not exist.
        """
        response = self.supabase.table(self.table_name).select(
            "id, name, rates"
        ).eq("id", parking_id).limit(1).execute()

        if not response.data:
            logger.info(f"Parking spot not found: {parking_id}")
            return None
        return ParkingTariff.model_validate(response.data[0])
