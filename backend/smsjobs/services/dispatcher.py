"""
SMS Command Dispatcher

Routes one inbound message to the component that answers it and returns
the reply text. The only state carried between messages is the session
store, consulted for claim replies.

Flow:
    1. Sweep expired sessions (all phones)
    2. Photo attached -> vision assessment, text is not parsed
    3. Parse text -> route on command:
         help / stop / prefs -> static text
         digest              -> top jobs, session stored
         claim               -> resolve job number against session
         search              -> repository search, session stored

Any unexpected exception becomes a generic apology so the webhook always
has a well-formed reply.
"""

import logging
from typing import List, Optional

from smsjobs.config import Settings, get_settings
from smsjobs.logging_config import mask_phone
from smsjobs.middleware.metrics import record_command, record_sessions_swept
from smsjobs.schemas import JobSearchResult
from smsjobs.services.formatter import format_digest, format_jobs
from smsjobs.services.job_repository import JobRepository
from smsjobs.services.photo_scope import PhotoScoper, build_photo_scoper
from smsjobs.services.preferences import PreferenceStore
from smsjobs.services.query_parser import Command, ParsedQuery, parse
from smsjobs.services.sessions import SessionStore, build_session_store
from smsjobs.services.store_client import build_store_client

logger = logging.getLogger(__name__)

DIGEST_SIZE = 5
NO_RECENT_SEARCH = 'No recent search. Text a query first (e.g., "fence 77002")'


def claim_reply(job_number: int, jobs: List[JobSearchResult]) -> str:
    if job_number < 1 or job_number > len(jobs):
        return f"Invalid job number. Reply 1-{len(jobs)} to claim."

    job = jobs[job_number - 1]
    return f"✅ Claimed! {job.title} at {job.address}. Homeowner notified and will call you shortly."


class SMSDispatcher:
    def __init__(
        self,
        settings: Settings,
        repository: JobRepository,
        preferences: PreferenceStore,
        sessions: SessionStore,
        photo_scoper: PhotoScoper,
    ):
        self.settings = settings
        self.repository = repository
        self.preferences = preferences
        self.sessions = sessions
        self.photo_scoper = photo_scoper

    @property
    def help_text(self) -> str:
        return (
            f"{self.settings.brand_name} Job Search:\n"
            '• "fence 77002" - jobs by trade/zip\n'
            '• "plumbing under 500" - with price\n'
            '• "anything tomorrow" - by timing\n'
            "• Reply 1-5 to claim\n"
            '• "STOP" to unsubscribe'
        )

    @property
    def stop_text(self) -> str:
        return (
            f"You have been unsubscribed from {self.settings.brand_name} job alerts. "
            'Text "START" to re-subscribe.'
        )

    @property
    def prefs_text(self) -> str:
        return (
            f"Set preferences at {self.settings.site_url}/prefs or reply:\n"
            '• "skip under 300" - min price\n'
            '• "max 20 miles" - distance\n'
            '• "digest on/off" - morning digest'
        )

    @property
    def error_text(self) -> str:
        return f"Sorry, something went wrong. Try again or visit {self.settings.site_url}"

    async def handle(self, phone: str, body: str, media_url: Optional[str] = None) -> str:
        """Produce the reply text for one inbound message. Never raises."""
        try:
            record_sessions_swept(await self.sessions.sweep())

            if media_url:
                record_command("photo")
                logger.info(f"Photo message from {mask_phone(phone)}")
                return await self.photo_scoper.reply_for(media_url)

            query = parse(body)
            record_command(query.command.value)
            logger.info(f"SMS {query.command.value} from {mask_phone(phone)}")
            return await self._route(phone, query)

        except Exception:
            logger.exception(f"SMS handler error for {mask_phone(phone)}")
            return self.error_text

    async def _route(self, phone: str, query: ParsedQuery) -> str:
        if query.command is Command.HELP:
            return self.help_text
        if query.command is Command.STOP:
            return self.stop_text
        if query.command is Command.PREFS:
            return self.prefs_text
        if query.command is Command.DIGEST:
            return await self._digest(phone)
        if query.command is Command.CLAIM:
            return await self._claim(phone, query.job_number)
        return await self._search(phone, query)

    async def _digest(self, phone: str) -> str:
        preferences = await self.preferences.get(phone)
        if preferences.value is not None:
            logger.debug(f"Digest preferences for {mask_phone(phone)}: {preferences.value}")

        jobs = (await self.repository.get_digest())[:DIGEST_SIZE]
        await self.sessions.set(phone, jobs)
        return format_digest(jobs)

    async def _claim(self, phone: str, job_number: int) -> str:
        session = await self.sessions.get(phone)
        if not session or not session.jobs:
            return NO_RECENT_SEARCH
        return claim_reply(job_number, session.jobs)

    async def _search(self, phone: str, query: ParsedQuery) -> str:
        jobs = await self.repository.search(query)
        await self.sessions.set(phone, jobs)
        return "\n".join(format_jobs(jobs))

    async def close(self) -> None:
        await self.repository.store.close()
        await self.sessions.close()
        await self.photo_scoper.close()


def build_dispatcher(settings: Optional[Settings] = None) -> SMSDispatcher:
    """Wire the dispatcher and its collaborators from settings."""
    settings = settings or get_settings()
    store = build_store_client(settings)
    if not settings.has_job_store:
        logger.warning("Job store not configured, searches will use fixture jobs")
    return SMSDispatcher(
        settings=settings,
        repository=JobRepository(store),
        preferences=PreferenceStore(store),
        sessions=build_session_store(settings),
        photo_scoper=build_photo_scoper(settings),
    )
