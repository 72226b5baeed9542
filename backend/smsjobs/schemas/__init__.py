from smsjobs.schemas.job import JobSearchResult, JobRecord, JobUrgency
from smsjobs.schemas.preferences import ContractorPreferences
from smsjobs.schemas.webhook import InboundSMS

__all__ = [
    "JobSearchResult",
    "JobRecord",
    "JobUrgency",
    "ContractorPreferences",
    "InboundSMS",
]
