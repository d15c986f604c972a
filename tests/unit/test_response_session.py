"""Unit tests for the response session state machine."""

import pytest

from ieltsprep.errors import InvalidTransition
from ieltsprep.services.response_session import (
    MICROPHONE_ERROR_MESSAGE,
    SUCCESS_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    ResponseSession,
    SessionStatus,
)
from ieltsprep.services.submission_service import (
    EMPTY_RESPONSE_MESSAGE,
    SUBMIT_FAILED_MESSAGE,
    UPLOAD_AUDIO_PATH,
    Submitter,
)

SPEAKING_PATH = "/api/speaking-tests/7/audio-response"


@pytest.fixture
def make_session(fake_recorder, scripted_client):
    def factory(succeed_on=(), deny=False):
        client = scripted_client(succeed_on=succeed_on)
        session = ResponseSession(test_id=7, recorder=fake_recorder(deny=deny), submitter=Submitter(client))
        session.client = client
        return session
    return factory


@pytest.mark.unit
class TestRecording:

    def test_initial_state(self, make_session):
        session = make_session()
        assert session.status is SessionStatus.IDLE
        assert session.audio is None
        assert session.error is None

    def test_record_then_stop(self, make_session):
        session = make_session()

        assert session.start_recording() is True
        assert session.status is SessionStatus.RECORDING
        blob = session.stop_recording()

        assert session.status is SessionStatus.RECORDED
        assert session.audio is blob
        assert session.elapsed_seconds == 3

    def test_permission_denied_stays_idle(self, make_session):
        session = make_session(deny=True)

        assert session.start_recording() is False
        assert session.status is SessionStatus.IDLE
        assert session.error == MICROPHONE_ERROR_MESSAGE

    def test_delete_returns_to_idle(self, make_session):
        session = make_session()
        session.start_recording()
        session.stop_recording()

        session.delete_recording()

        assert session.status is SessionStatus.IDLE
        assert session.audio is None

    def test_record_again_discards_previous(self, make_session):
        session = make_session()
        session.start_recording()
        session.stop_recording()

        assert session.start_recording() is True
        assert session.audio is None
        assert session.recorder.starts == 2

    @pytest.mark.parametrize("action", ["stop_recording", "delete_recording"])
    def test_invalid_from_idle(self, make_session, action):
        session = make_session()
        with pytest.raises(InvalidTransition) as exc_info:
            getattr(session, action)()
        assert "while idle" in exc_info.value.message
        assert session.status is SessionStatus.IDLE

    def test_cannot_start_twice(self, make_session):
        session = make_session()
        session.start_recording()
        with pytest.raises(InvalidTransition):
            session.start_recording()

    @pytest.mark.asyncio
    async def test_cannot_submit_while_recording(self, make_session):
        session = make_session()
        session.start_recording()
        with pytest.raises(InvalidTransition):
            await session.submit("text")
        assert session.client.calls == []

    def test_close_releases_running_recording(self, make_session):
        session = make_session()
        session.start_recording()

        session.close()

        assert session.status is SessionStatus.IDLE
        assert session.recorder.closed is True
        assert session.recorder.is_recording is False


@pytest.mark.unit
class TestSubmit:

    @pytest.mark.asyncio
    async def test_empty_submit_is_rejected_without_network(self, make_session):
        session = make_session(succeed_on={UPLOAD_AUDIO_PATH})

        assert await session.submit("   ") is False

        assert session.status is SessionStatus.IDLE
        assert session.error == EMPTY_RESPONSE_MESSAGE
        assert session.client.calls == []

    @pytest.mark.asyncio
    async def test_text_only_submit(self, make_session):
        session = make_session(succeed_on={UPLOAD_AUDIO_PATH})

        assert await session.submit("My hometown is Porto.") is True

        assert session.status is SessionStatus.SUBMITTED
        assert session.message == SUCCESS_MESSAGE
        assert session.result.delivered_by == "upload-text"

    @pytest.mark.asyncio
    async def test_recorded_submit_keeps_audio_for_saving(self, make_session):
        session = make_session(succeed_on={SPEAKING_PATH})
        session.start_recording()
        blob = session.stop_recording()

        assert await session.submit() is True

        assert session.status is SessionStatus.SUBMITTED
        assert session.submitted_audio is blob
        assert session.client.paths == [SPEAKING_PATH]

    @pytest.mark.asyncio
    async def test_failed_submit_allows_retry(self, make_session):
        session = make_session()
        session.start_recording()
        session.stop_recording()

        assert await session.submit() is False
        assert session.status is SessionStatus.FAILED
        assert session.error == SUBMIT_FAILED_MESSAGE
        assert session.audio is not None

        session.client.succeed_on.add(UPLOAD_AUDIO_PATH)
        assert await session.submit() is True
        assert session.status is SessionStatus.SUBMITTED
        assert session.error is None

    @pytest.mark.asyncio
    async def test_failed_session_can_delete_or_record_again(self, make_session):
        session = make_session()
        session.start_recording()
        session.stop_recording()
        await session.submit()

        session.delete_recording()
        assert session.status is SessionStatus.IDLE
        assert session.start_recording() is True

    @pytest.mark.asyncio
    async def test_submitted_is_terminal(self, make_session):
        session = make_session(succeed_on={UPLOAD_AUDIO_PATH})
        await session.submit("answer")

        with pytest.raises(InvalidTransition):
            session.start_recording()
        with pytest.raises(InvalidTransition):
            await session.submit("again")

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_session(self, make_session):
        session = make_session()

        async def explode(payload):
            raise RuntimeError("boom")

        session.submitter.submit = explode

        assert await session.submit("answer") is False
        assert session.status is SessionStatus.FAILED
        assert session.error == UNEXPECTED_ERROR_MESSAGE


@pytest.mark.unit
class TestSessionEvents:

    @pytest.mark.asyncio
    async def test_transitions_are_published(self, make_session, session_events):
        session = make_session(succeed_on={SPEAKING_PATH})
        session.start_recording()
        session.stop_recording()
        await session.submit()

        mine = [e for e in session_events if e.session_key == session.session_key]
        assert [(e.previous_status, e.status) for e in mine] == [
            ("idle", "recording"),
            ("recording", "recorded"),
            ("recorded", "submitting"),
            ("submitting", "submitted"),
        ]
        assert mine[-1].message == SUCCESS_MESSAGE

    def test_errors_are_published_without_transition(self, make_session, session_events):
        session = make_session(deny=True)
        session.start_recording()

        mine = [e for e in session_events if e.session_key == session.session_key]
        assert len(mine) == 1
        assert mine[0].status == "idle"
        assert mine[0].error == MICROPHONE_ERROR_MESSAGE

    def test_session_keys_are_unique(self, make_session):
        assert make_session().session_key != make_session().session_key
