from pydantic import BaseModel
from typing import Literal, Optional

JobUrgency = Literal["low", "medium", "high", "emergency"]


class JobSearchResult(BaseModel):
    """Display-ready job as it is rendered into an SMS reply."""

    id: str
    title: str
    address: str
    price: int
    urgency: JobUrgency = "medium"
    posted_ago: str
    distance: Optional[float] = None


class JobRecord(JobSearchResult):
    """Job with the filterable location fields the reply does not show."""

    zip_code: Optional[str] = None
    city: Optional[str] = None

    def to_result(self) -> JobSearchResult:
        return JobSearchResult(**self.model_dump(exclude={"zip_code", "city"}))
