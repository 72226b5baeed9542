from pydantic import BaseModel


class ContractorPreferences(BaseModel):
    min_price: int = 0
    max_distance: int = 25
    preferred_trades: list[str] = []
    skip_low_value: bool = False
    morning_digest: bool = False
