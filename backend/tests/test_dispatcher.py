"""
Tests for the SMS Command Dispatcher

Tests cover:
- Static replies (help, stop, prefs)
- Search storing a session
- Digest storing a session and tolerating preference failures
- Claim resolution and bounds
- Photo branch bypassing the parser
- Sweep at the start of every message
- Generic apology on unexpected faults
"""

import pytest
from unittest.mock import AsyncMock

from smsjobs.services.degradation import Degradable, DegradationReason
from smsjobs.services.dispatcher import NO_RECENT_SEARCH, claim_reply
from smsjobs.services.photo_scope import PHOTO_FALLBACK
from tests.conftest import make_job

PHONE = "+15550001111"


class TestStaticReplies:

    @pytest.mark.asyncio
    async def test_help(self, dispatcher):
        reply = await dispatcher.handle(PHONE, "help")
        assert reply.startswith("FTW Job Search:")
        assert '"STOP" to unsubscribe' in reply

    @pytest.mark.asyncio
    async def test_stop(self, dispatcher, sessions):
        reply = await dispatcher.handle(PHONE, "STOP")
        assert "unsubscribed" in reply
        assert await sessions.get(PHONE) is None

    @pytest.mark.asyncio
    async def test_prefs(self, dispatcher):
        reply = await dispatcher.handle(PHONE, "settings")
        assert reply.startswith("Set preferences at fairtradeworker.com/prefs")


class TestSearch:

    @pytest.mark.asyncio
    async def test_search_formats_and_stores_session(self, dispatcher, sessions):
        reply = await dispatcher.handle(PHONE, "fence 77002")

        assert reply.split("\n") == [
            "Found 1 job:",
            "1. 🔨 $350 Fence Repair | 1234 Oak St | 5m",
            "Reply 1-5 to claim job",
        ]
        session = await sessions.get(PHONE)
        assert [job.title for job in session.jobs] == ["Fence Repair"]

    @pytest.mark.asyncio
    async def test_no_results_hint_still_stores_session(self, dispatcher, sessions):
        reply = await dispatcher.handle(PHONE, "roofing 90210")

        assert reply.startswith("No jobs found")
        session = await sessions.get(PHONE)
        assert session.jobs == []

    @pytest.mark.asyncio
    async def test_search_overwrites_previous_session(self, dispatcher, sessions):
        await dispatcher.handle(PHONE, "anything")
        await dispatcher.handle(PHONE, "fence 77002")

        session = await sessions.get(PHONE)
        assert len(session.jobs) == 1


class TestDigest:

    @pytest.mark.asyncio
    async def test_digest_reply_and_session(self, dispatcher, sessions):
        reply = await dispatcher.handle(PHONE, "digest")

        lines = reply.split("\n")
        assert lines[0] == "☀️ Your top 5 matches today:"
        assert lines[1] == "1. $350 Fence Repair"
        assert lines[-1] == "Reply # to claim"
        assert len((await sessions.get(PHONE)).jobs) == 5

    @pytest.mark.asyncio
    async def test_digest_ignores_preference_failure(self, dispatcher):
        dispatcher.preferences.get = AsyncMock(
            return_value=Degradable.fallback(None, DegradationReason.NETWORK_ERROR)
        )
        reply = await dispatcher.handle(PHONE, "morning")
        assert reply.startswith("☀️")
        dispatcher.preferences.get.assert_awaited_once_with(PHONE)


class TestClaim:

    @pytest.mark.asyncio
    async def test_claim_without_session(self, dispatcher):
        assert await dispatcher.handle(PHONE, "1") == NO_RECENT_SEARCH

    @pytest.mark.asyncio
    async def test_claim_with_empty_session(self, dispatcher, sessions):
        await sessions.set(PHONE, [])
        assert await dispatcher.handle(PHONE, "claim 1") == NO_RECENT_SEARCH

    @pytest.mark.asyncio
    @pytest.mark.parametrize("number", [1, 2, 3])
    async def test_claim_in_range(self, dispatcher, sessions, number):
        jobs = [
            make_job(str(i), title=f"Job {i}", address=f"{i} Oak St")
            for i in range(1, 4)
        ]
        await sessions.set(PHONE, jobs)

        reply = await dispatcher.handle(PHONE, f"claim {number}")

        assert reply.startswith("✅ Claimed!")
        assert f"Job {number}" in reply
        assert f"{number} Oak St" in reply

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["0", "4", "claim 9"])
    async def test_claim_out_of_range(self, dispatcher, sessions, text):
        await sessions.set(PHONE, [make_job("1"), make_job("2"), make_job("3")])

        reply = await dispatcher.handle(PHONE, text)

        assert reply == "Invalid job number. Reply 1-3 to claim."

    @pytest.mark.asyncio
    async def test_claim_does_not_consume_session(self, dispatcher, sessions):
        await sessions.set(PHONE, [make_job()])
        await dispatcher.handle(PHONE, "1")
        assert await sessions.get(PHONE) is not None

    @pytest.mark.asyncio
    async def test_search_then_claim(self, dispatcher):
        await dispatcher.handle(PHONE, "fence 77002")
        reply = await dispatcher.handle(PHONE, "1")
        assert "Fence Repair at 1234 Oak St" in reply

    @pytest.mark.asyncio
    async def test_sessions_are_per_phone(self, dispatcher):
        await dispatcher.handle(PHONE, "fence 77002")
        assert await dispatcher.handle("+15559998888", "1") == NO_RECENT_SEARCH

    def test_claim_reply_bounds(self):
        jobs = [make_job()]
        assert claim_reply(0, jobs).startswith("Invalid")
        assert claim_reply(1, jobs).startswith("✅")
        assert claim_reply(2, jobs).startswith("Invalid")


class TestSweepAndPhotos:

    @pytest.mark.asyncio
    async def test_expired_session_swept_before_claim(self, dispatcher, clock):
        await dispatcher.handle(PHONE, "fence 77002")
        clock.advance(11 * 60)

        assert await dispatcher.handle(PHONE, "1") == NO_RECENT_SEARCH

    @pytest.mark.asyncio
    async def test_message_from_other_phone_sweeps_all(self, dispatcher, sessions, clock):
        await dispatcher.handle(PHONE, "fence 77002")
        clock.advance(11 * 60)

        await dispatcher.handle("+15559998888", "help")

        assert await sessions.get(PHONE) is None

    @pytest.mark.asyncio
    async def test_photo_bypasses_parser(self, dispatcher, sessions):
        reply = await dispatcher.handle(PHONE, "stop", media_url="https://example.com/p.jpg")

        assert reply == PHOTO_FALLBACK
        assert await sessions.get(PHONE) is None

    @pytest.mark.asyncio
    async def test_photo_uses_vision_reply(self, dispatcher):
        dispatcher.photo_scoper.reply_for = AsyncMock(return_value="📸 Leaky faucet")
        reply = await dispatcher.handle(PHONE, "", media_url="https://example.com/p.jpg")
        assert reply == "📸 Leaky faucet"


class TestUnexpectedFaults:

    @pytest.mark.asyncio
    async def test_repository_crash_becomes_apology(self, dispatcher):
        dispatcher.repository.search = AsyncMock(side_effect=RuntimeError("boom"))

        reply = await dispatcher.handle(PHONE, "fence 77002")

        assert reply == "Sorry, something went wrong. Try again or visit fairtradeworker.com"

    @pytest.mark.asyncio
    async def test_session_store_crash_becomes_apology(self, dispatcher):
        dispatcher.sessions.sweep = AsyncMock(side_effect=RuntimeError("boom"))
        reply = await dispatcher.handle(PHONE, "help")
        assert reply.startswith("Sorry, something went wrong")
