import pytest

from smsjobs.config import Settings
from smsjobs.schemas import JobSearchResult
from smsjobs.services.dispatcher import SMSDispatcher
from smsjobs.services.job_repository import JobRepository
from smsjobs.services.photo_scope import PhotoScoper
from smsjobs.services.preferences import PreferenceStore
from smsjobs.services.sessions import InMemorySessionStore
from smsjobs.services.store_client import StoreClient


class FakeClock:
    """Manually advanced clock for session expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_job(job_id: str = "1", **overrides) -> JobSearchResult:
    data = {
        "id": job_id,
        "title": "Fence Repair",
        "address": "1234 Oak St",
        "price": 350,
        "urgency": "medium",
        "posted_ago": "5m",
    }
    data.update(overrides)
    return JobSearchResult(**data)


@pytest.fixture
def settings():
    """Settings with every collaborator unconfigured."""
    return Settings(
        job_store_url="",
        job_store_key="",
        openai_api_key="",
        session_backend="memory",
        _env_file=None,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sessions(clock):
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def dispatcher(settings, sessions):
    """Dispatcher running entirely on fixtures and static fallbacks."""
    store = StoreClient(base_url="", api_key="")
    return SMSDispatcher(
        settings=settings,
        repository=JobRepository(store),
        preferences=PreferenceStore(store),
        sessions=sessions,
        photo_scoper=PhotoScoper(openai_client=None),
    )
