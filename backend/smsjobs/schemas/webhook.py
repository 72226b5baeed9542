from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class InboundSMS(BaseModel):
    """Subset of the SMS gateway webhook payload the service reads."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_phone: str = Field("", alias="From")
    to_phone: str = Field("", alias="To")
    body: str = Field("", alias="Body")
    num_media: Optional[str] = Field(None, alias="NumMedia")
    media_url: Optional[str] = Field(None, alias="MediaUrl0")

    @property
    def is_complete(self) -> bool:
        return bool(self.from_phone) and bool(self.body)
