from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from vsa.config import AppConfig, FirefliesSettings, OpenRouterSettings, TeamsSettings, WebexSettings
from vsa.errors import ConfigurationError, LLMError, TranscriptError
from vsa.integrations import (
    SYSTEM_PROMPT,
    CallRecordingManager,
    CallTranscript,
    FirefliesClient,
    LocalCache,
    OpenRouterClient,
    TeamsClient,
    WebexClient,
    clean_ai_response,
    extract_project_requirements,
    substitute_variables,
)
from vsa.integrations.llm import CHAT_TITLE, GENERATE_TITLE
from vsa.integrations.transcripts import (
    FIREFLIES_URL,
    detect_transcript_project_type,
    estimate_scope,
    parse_timestamp,
    suggest_services,
)
from vsa.models import Service


# =============================================================================
# LOCAL CACHE
# =============================================================================

class TestLocalCache:
    def test_set_get_delete(self, tmp_path):
        cache = LocalCache(tmp_path / "cache.json")
        assert cache.get("missing", "default") == "default"
        assert cache.set("projects", [{"name": "Acme"}]) is True
        assert cache.get("projects") == [{"name": "Acme"}]
        assert cache.keys() == ["projects"]

        assert cache.delete("projects") is True
        assert cache.delete("projects") is False

    def test_revives_dates(self, tmp_path):
        cache = LocalCache(tmp_path / "cache.json")
        stamp = datetime(2024, 5, 1, 10, 30)
        cache.set("meta", {"lastUpdated": stamp, "label": "weekly"})

        meta = cache.get("meta")
        assert meta["lastUpdated"] == stamp
        assert meta["label"] == "weekly"

    def test_models_stored_by_alias(self, tmp_path):
        cache = LocalCache(tmp_path / "cache.json")
        cache.set("service", Service(id="s", name="Backup", estimated_hours=8))
        assert cache.get("service")["estimatedHours"] == 8

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json", encoding="utf-8")
        assert LocalCache(path).get("anything") is None

    def test_unserializable_value_is_not_saved(self, tmp_path):
        cache = LocalCache(tmp_path / "cache.json")
        assert cache.set("bad", object()) is False

    def test_clear(self, tmp_path):
        cache = LocalCache(tmp_path / "cache.json")
        cache.set("a", 1)
        cache.clear()
        assert cache.keys() == []


# =============================================================================
# LLM CLIENT
# =============================================================================

def completion_payload(content="Hello there"):
    return {"choices": [{"message": {"content": content}}], "usage": {"total_tokens": 12}}


@pytest.fixture
def llm_session(response_factory):
    session = MagicMock()
    session.post.return_value = response_factory(completion_payload())
    return session


@pytest.fixture
def llm(llm_session):
    return OpenRouterClient(OpenRouterSettings(api_key="or-key"), session=llm_session)


class TestOpenRouterClient:
    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError):
            OpenRouterClient(OpenRouterSettings())

    def test_chat_prepends_system_prompt(self, llm, llm_session):
        reply = llm.chat([{"role": "user", "content": "hello"}])

        assert reply.content == "Hello there"
        assert reply.model == "anthropic/claude-3.5-sonnet"
        assert reply.usage == {"total_tokens": 12}

        url = llm_session.post.call_args.args[0]
        kwargs = llm_session.post.call_args.kwargs
        assert url == "https://openrouter.ai/api/v1/chat/completions"
        assert kwargs["json"]["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert kwargs["json"]["messages"][1]["content"] == "hello"
        assert kwargs["json"]["max_tokens"] == 1000
        assert kwargs["json"]["temperature"] == 0.7
        assert kwargs["headers"]["Authorization"] == "Bearer or-key"
        assert kwargs["headers"]["X-Title"] == CHAT_TITLE

    def test_chat_rejects_non_list(self, llm):
        with pytest.raises(ValueError):
            llm.chat("hello")

    def test_generate_substitutes_variables(self, llm, llm_session):
        llm.generate("Summarize {project}", {"project": {"name": "Acme"}}, model="openai/gpt-4o", temperature=0.2)

        kwargs = llm_session.post.call_args.kwargs
        assert kwargs["json"]["messages"] == [
            {"role": "user", "content": 'Summarize {\n  "name": "Acme"\n}'}
        ]
        assert kwargs["json"]["model"] == "openai/gpt-4o"
        assert kwargs["json"]["max_tokens"] == 2000
        assert kwargs["json"]["temperature"] == 0.2
        assert kwargs["headers"]["X-Title"] == GENERATE_TITLE

    def test_generate_requires_prompt(self, llm):
        with pytest.raises(ValueError):
            llm.generate("")

    def test_http_error(self, llm, llm_session, response_factory):
        llm_session.post.return_value = response_factory(status_code=429, reason="Too Many Requests")
        with pytest.raises(LLMError) as exc_info:
            llm.chat([])
        assert exc_info.value.status_code == 429

    def test_empty_completion(self, llm, llm_session, response_factory):
        llm_session.post.return_value = response_factory({"choices": []})
        with pytest.raises(LLMError, match="No content generated"):
            llm.generate("hi")

    def test_connection_error(self, llm, llm_session):
        llm_session.post.side_effect = requests.ConnectionError("offline")
        with pytest.raises(LLMError, match="offline"):
            llm.generate("hi")


class TestResponseHelpers:
    def test_substitute_plain_string(self):
        assert substitute_variables("Hi {name}, {other}", {"name": "Ada"}) == 'Hi "Ada", {other}'

    def test_clean_fenced_json(self):
        assert clean_ai_response('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_clean_outermost_braces(self):
        assert clean_ai_response('Sure! {"a": {"b": 2}} hope that helps') == '{"a": {"b": 2}}'

    def test_clean_without_json(self):
        assert clean_ai_response("  plain text  ") == "plain text"
        assert clean_ai_response(None) == ""


# =============================================================================
# TRANSCRIPT ANALYSIS
# =============================================================================

class TestTranscriptAnalysis:
    def test_extract_requirements_in_pattern_order(self):
        text = (
            "We are looking for a phased rollout. We need to migrate our mailboxes. "
            "The requirement is zero downtime, ideally."
        )
        assert extract_project_requirements(text) == [
            "migrate our mailboxes",
            "zero downtime",
            "a phased rollout",
        ]

    def test_requirement_stops_at_and(self):
        assert extract_project_requirements("we must have backups and monitoring.") == ["backups"]

    @pytest.mark.parametrize("text,expected", [
        ("move everything to azure", "cloud migration"),
        ("replace the core router", "network upgrade"),
        ("prepare for the hipaa audit", "security audit"),
        ("test our restore process", "backup solution"),
        ("hello", "general IT project"),
    ])
    def test_project_type(self, text, expected):
        assert detect_transcript_project_type(text) == expected

    def test_estimate_scope(self):
        assert estimate_scope(" ".join(["word"] * 2000)) == "small"
        assert estimate_scope(" ".join(["word"] * 2001)) == "medium"
        assert estimate_scope(" ".join(["word"] * 5001)) == "large"

    def test_suggest_services(self):
        assert suggest_services("Network and security review") == [
            "Network Assessment",
            "Network Design & Implementation",
            "Security Audit",
            "Vulnerability Assessment",
        ]

    def test_parse_timestamp(self):
        assert parse_timestamp(1700000000000) == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert parse_timestamp("2024-05-01T10:00:00Z") == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)
        assert parse_timestamp("next tuesday") is None
        assert parse_timestamp(None) is None


# =============================================================================
# RECORDING PLATFORMS
# =============================================================================

FIREFLIES_MEETING = {
    "id": "t1",
    "title": "Kickoff",
    "date": 1700000000000,
    "duration": 1800,
    "participants": ["ada@example.com"],
    "sentences": [
        {"text": "We need to replace the firewall.", "speaker_name": "Ada"},
        {"text": "Sounds good", "speaker_name": None},
    ],
    "summary": {"overview": "Firewall refresh", "action_items": "Send quote\nBook install"},
}


class TestFirefliesClient:
    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError):
            FirefliesClient(FirefliesSettings())

    def test_fetch_transcripts(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory({"data": {"transcripts": [FIREFLIES_MEETING]}})
        client = FirefliesClient(FirefliesSettings(api_key="ff"), session=session)

        transcripts = client.fetch_transcripts()

        assert session.request.call_args.args == ("POST", FIREFLIES_URL)
        assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer ff"
        assert "variables" not in session.request.call_args.kwargs["json"]

        transcript = transcripts[0]
        assert transcript.platform == "fireflies"
        assert transcript.meeting_title == "Kickoff"
        assert transcript.transcript == "Ada: We need to replace the firewall.\nSpeaker: Sounds good"
        assert transcript.summary == "Firewall refresh"
        assert transcript.action_items == ["Send quote", "Book install"]
        assert transcript.project_requirements == ["replace the firewall"]
        assert transcript.date.year == 2023

    def test_fetch_by_id(self, response_factory):
        meeting = {"id": "t2", "transcript": "We need to add wifi.", "summary": "Wifi survey"}
        session = MagicMock()
        session.request.return_value = response_factory({"data": {"transcript": meeting}})
        client = FirefliesClient(FirefliesSettings(api_key="ff"), session=session)

        transcript = client.fetch_transcript_by_id("t2")

        assert session.request.call_args.kwargs["json"]["variables"] == {"id": "t2"}
        assert transcript.meeting_title == "Untitled Meeting"
        assert transcript.summary == "Wifi survey"
        assert transcript.project_requirements == ["add wifi"]

    def test_graphql_error(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory({"errors": [{"message": "Invalid API key"}]})
        client = FirefliesClient(FirefliesSettings(api_key="ff"), session=session)
        with pytest.raises(TranscriptError, match="Invalid API key"):
            client.fetch_transcripts()

    def test_no_transcripts(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory({"data": {"transcripts": []}})
        client = FirefliesClient(FirefliesSettings(api_key="ff"), session=session)
        with pytest.raises(TranscriptError):
            client.fetch_transcripts()

    def test_map_non_list(self):
        assert FirefliesClient.map_transcripts({"id": "x"}) == []


TEAMS_SETTINGS = TeamsSettings(client_id="cid", client_secret="secret", tenant_id="tenant")


class TestTeamsClient:
    def test_requires_all_credentials(self):
        with pytest.raises(ConfigurationError):
            TeamsClient(TeamsSettings(client_id="cid"))

    def test_fetch_call_recordings(self, response_factory):
        meetings = {"value": [
            {
                "id": "m1",
                "subject": "Planning",
                "startDateTime": "2024-05-01T10:00:00Z",
                "endDateTime": "2024-05-01T10:30:00Z",
                "participants": [{"upn": "ada@example.com"}, {"role": "guest"}],
            },
            {"id": "m2"},
        ]}
        session = MagicMock()
        session.request.side_effect = [
            response_factory({"access_token": "tok"}),
            response_factory(meetings),
            response_factory({"transcript": "We must have MFA everywhere."}),
            response_factory(status_code=404, reason="Not Found"),
        ]
        client = TeamsClient(TEAMS_SETTINGS, session=session)

        transcripts = client.fetch_call_recordings("user-1")

        token_call = session.request.call_args_list[0]
        assert token_call.args == ("POST", "https://login.microsoftonline.com/tenant/oauth2/v2.0/token")
        assert token_call.kwargs["data"]["grant_type"] == "client_credentials"

        assert len(transcripts) == 1
        transcript = transcripts[0]
        assert transcript.meeting_title == "Planning"
        assert transcript.duration == 1800
        assert transcript.participants == ["ada@example.com"]
        assert transcript.project_requirements == ["MFA everywhere"]

    def test_missing_token(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory({"token_type": "Bearer"})
        with pytest.raises(TranscriptError):
            TeamsClient(TEAMS_SETTINGS, session=session).authenticate()


class TestWebexClient:
    def test_fetch_recordings(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory({"items": [
            {"id": "r1", "topic": "Review", "createTime": "2024-05-01T10:00:00Z", "durationSeconds": 600},
        ]})
        recordings = WebexClient(WebexSettings(access_token="wx"), session=session).fetch_recordings()

        assert [r.id for r in recordings] == ["r1"]
        assert recordings[0].duration == 600
        assert recordings[0].transcript == ""

    def test_fetch_transcript(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory({"text": "hello"})
        client = WebexClient(WebexSettings(access_token="wx"), session=session)
        assert client.fetch_recording_transcript("r1") == "hello"
        assert session.request.call_args.args[1].endswith("/recordings/r1/transcript")

    def test_http_error(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory(status_code=500, reason="Server Error")
        with pytest.raises(TranscriptError) as exc_info:
            WebexClient(WebexSettings(access_token="wx"), session=session).fetch_recordings()
        assert exc_info.value.status_code == 500
        assert exc_info.value.platform == "webex"


# =============================================================================
# MANAGER
# =============================================================================

def mock_client(cls, platform):
    client = MagicMock(spec=cls)
    client.platform = platform
    return client


class TestCallRecordingManager:
    def test_from_config_registers_configured_platforms(self):
        config = AppConfig(
            fireflies=FirefliesSettings(api_key="ff"),
            webex=WebexSettings(access_token="wx"),
        )
        manager = CallRecordingManager.from_config(config, session=MagicMock())
        assert manager.platforms == ["fireflies", "webex"]

    def test_failing_platform_is_skipped(self):
        fireflies = mock_client(FirefliesClient, "fireflies")
        fireflies.fetch_transcripts.side_effect = TranscriptError("down", platform="fireflies")
        teams = mock_client(TeamsClient, "teams")
        webex = mock_client(WebexClient, "webex")
        recording = CallTranscript(id="r1", platform="webex", meeting_title="Review")
        webex.fetch_recordings.return_value = [recording]

        manager = CallRecordingManager()
        for client in (fireflies, teams, webex):
            manager.add_integration(client)

        assert manager.fetch_all_transcripts() == [recording]
        teams.fetch_call_recordings.assert_not_called()

    def test_teams_with_user_id(self):
        teams = mock_client(TeamsClient, "teams")
        teams.fetch_call_recordings.return_value = []
        manager = CallRecordingManager()
        manager.add_integration(teams)
        manager.fetch_all_transcripts(teams_user_id="user-1")
        teams.fetch_call_recordings.assert_called_once_with("user-1")

    def test_analyze_transcript(self):
        transcript = CallTranscript(
            id="t",
            platform="fireflies",
            meeting_title="Scoping",
            transcript="We want to move our mail to the cloud. Security review too.",
            project_requirements=["move our mail"],
        )
        analysis = CallRecordingManager().analyze_transcript(transcript)
        assert analysis.project_type == "cloud migration"
        assert analysis.requirements == ["move our mail"]
        assert analysis.estimated_scope == "small"
        assert analysis.suggested_services == [
            "Security Audit",
            "Vulnerability Assessment",
            "Cloud Migration",
            "Cloud Architecture Design",
        ]
        assert analysis.to_dict()["estimatedScope"] == "small"
