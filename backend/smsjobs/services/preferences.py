from typing import Optional

from smsjobs.schemas import ContractorPreferences
from smsjobs.services.degradation import Degradable, DegradationReason, log_degradation
from smsjobs.services.store_client import StoreClient

PREFERENCES_TABLE = "contractor_sms_preferences"


class PreferenceStore:
    """Lookup of contractor SMS preferences by phone number."""

    def __init__(self, store: StoreClient):
        self.store = store

    async def get(self, phone: str) -> Degradable[Optional[ContractorPreferences]]:
        result = await self.store.select(PREFERENCES_TABLE, [("phone", f"eq.{phone}")])
        if result.degraded:
            log_degradation("preference_store", result)
            return Degradable.fallback(None, result.reason, result.detail)

        if not result.value:
            return Degradable.ok(None)

        try:
            return Degradable.ok(ContractorPreferences.model_validate(result.value[0]))
        except ValueError as e:
            degraded = Degradable.fallback(None, DegradationReason.BAD_PAYLOAD, str(e))
            log_degradation("preference_store", degraded)
            return degraded
