"""
Call Recording Integrations
Pull meeting transcripts from Fireflies.ai, Microsoft Teams and Webex and
mine them for project requirements.

Platforms:
- Fireflies: GraphQL at https://api.fireflies.ai/graphql (bearer API key)
- Teams: client-credential OAuth, then Microsoft Graph online meetings
- Webex: REST recordings at https://webexapis.com/v1 (bearer access token)

CallRecordingManager fans in every configured platform; a failing platform
is logged and skipped so the others still contribute.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from vsa.config import AppConfig, FirefliesSettings, TeamsSettings, WebexSettings
from vsa.errors import ConfigurationError, TranscriptError

logger = logging.getLogger(__name__)

FIREFLIES_URL = "https://api.fireflies.ai/graphql"
GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
TEAMS_TOKEN_URL = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"
WEBEX_BASE_URL = "https://webexapis.com/v1"

FIREFLIES_LIST_QUERY = """
query {
  transcripts {
    id
    title
    date
    duration
    participants
    sentences {
      text
      speaker_name
    }
    summary {
      overview
      action_items
      keywords
      outline
    }
  }
}
"""

FIREFLIES_DETAIL_QUERY = """
query GetTranscript($id: String!) {
  transcript(id: $id) {
    id
    title
    date
    duration
    participants
    transcript
    summary
    action_items
    sentences {
      text
      speaker_name
      start_time
    }
  }
}
"""

# Phrases that introduce a requirement; the capture stops at the first
# period, comma or "and".
REQUIREMENT_PATTERNS = [
    re.compile(r"we need to (.+?)(?:\.|,|and)", re.IGNORECASE),
    re.compile(r"requirement is (.+?)(?:\.|,|and)", re.IGNORECASE),
    re.compile(r"must have (.+?)(?:\.|,|and)", re.IGNORECASE),
    re.compile(r"should include (.+?)(?:\.|,|and)", re.IGNORECASE),
    re.compile(r"want to implement (.+?)(?:\.|,|and)", re.IGNORECASE),
    re.compile(r"looking for (.+?)(?:\.|,|and)", re.IGNORECASE),
]

PROJECT_TYPES = {
    "cloud migration": ["cloud", "aws", "azure", "migration", "migrate"],
    "network upgrade": ["network", "router", "switch", "wifi", "bandwidth"],
    "security audit": ["security", "audit", "compliance", "hipaa", "sox"],
    "backup solution": ["backup", "disaster", "recovery", "restore"],
}

SERVICE_SUGGESTIONS = {
    "network": ["Network Assessment", "Network Design & Implementation"],
    "security": ["Security Audit", "Vulnerability Assessment"],
    "cloud": ["Cloud Migration", "Cloud Architecture Design"],
}

LARGE_SCOPE_WORDS = 5000
MEDIUM_SCOPE_WORDS = 2000


@dataclass
class CallTranscript:
    """A meeting transcript normalized across platforms. duration is in seconds."""
    id: str
    platform: str
    meeting_title: str
    date: Optional[datetime] = None
    duration: float = 0
    participants: List[str] = field(default_factory=list)
    transcript: str = ""
    summary: Optional[str] = None
    action_items: List[str] = field(default_factory=list)
    project_requirements: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "platform": self.platform,
            "meetingTitle": self.meeting_title,
            "date": self.date.isoformat() if self.date else None,
            "duration": self.duration,
            "participants": self.participants,
            "transcript": self.transcript,
            "summary": self.summary,
            "actionItems": self.action_items,
            "projectRequirements": self.project_requirements,
        }


@dataclass
class TranscriptAnalysis:
    project_type: str
    requirements: List[str]
    estimated_scope: str  # small / medium / large
    suggested_services: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectType": self.project_type,
            "requirements": self.requirements,
            "estimatedScope": self.estimated_scope,
            "suggestedServices": self.suggested_services,
        }


def extract_project_requirements(transcript: str) -> List[str]:
    """Requirement phrases, grouped by pattern in pattern order."""
    requirements = []
    for pattern in REQUIREMENT_PATTERNS:
        for match in pattern.finditer(transcript or ""):
            phrase = match.group(1).strip()
            if phrase:
                requirements.append(phrase)
    return requirements


def detect_transcript_project_type(transcript: str) -> str:
    lower = (transcript or "").lower()
    for project_type, keywords in PROJECT_TYPES.items():
        if any(keyword in lower for keyword in keywords):
            return project_type
    return "general IT project"


def estimate_scope(transcript: str) -> str:
    word_count = len((transcript or "").split(" "))
    if word_count > LARGE_SCOPE_WORDS:
        return "large"
    if word_count > MEDIUM_SCOPE_WORDS:
        return "medium"
    return "small"


def suggest_services(transcript: str) -> List[str]:
    lower = (transcript or "").lower()
    services = []
    for keyword, names in SERVICE_SUGGESTIONS.items():
        if keyword in lower:
            services.extend(names)
    return services


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Epoch milliseconds or ISO-8601 text; None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable timestamp: {value!r}")
        return None


class _RecordingClient:
    """Shared request handling for the platform clients."""

    platform = ""

    def __init__(self, timeout: float, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def _call(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug(f"{self.platform}: {method} {url}")
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            reason = e.response.reason if e.response is not None else ""
            raise TranscriptError(
                f"{self.platform} API error: {status_code} {reason}".strip(),
                platform=self.platform,
                status_code=status_code,
            ) from e
        except requests.RequestException as e:
            raise TranscriptError(f"{self.platform} request failed: {e}", platform=self.platform) from e
        return resp

    def _json(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise TranscriptError(f"Invalid JSON from {self.platform}", platform=self.platform) from e


class FirefliesClient(_RecordingClient):
    platform = "fireflies"

    def __init__(self, settings: FirefliesSettings, session: Optional[requests.Session] = None):
        if not settings.configured:
            raise ConfigurationError("No Fireflies API key configured", setting="FIREFLIES_API_KEY")
        super().__init__(settings.timeout, session)
        self.settings = settings

    def _query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        resp = self._call(
            "POST",
            FIREFLIES_URL,
            headers={
                "Authorization": f"Bearer {self.settings.api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
        )
        data = self._json(resp)
        if data.get("errors"):
            message = (data["errors"][0] or {}).get("message") or "Unknown error"
            raise TranscriptError(f"Fireflies GraphQL error: {message}", platform=self.platform)
        return data.get("data") or {}

    def fetch_transcripts(self) -> List[CallTranscript]:
        data = self._query(FIREFLIES_LIST_QUERY)
        if not data.get("transcripts"):
            raise TranscriptError(
                "Invalid response from Fireflies API - no transcripts found", platform=self.platform
            )
        transcripts = self.map_transcripts(data["transcripts"])
        logger.info(f"Fireflies: fetched {len(transcripts)} transcripts")
        return transcripts

    def fetch_transcript_by_id(self, transcript_id: str) -> CallTranscript:
        data = self._query(FIREFLIES_DETAIL_QUERY, {"id": transcript_id})
        if not data.get("transcript"):
            raise TranscriptError(
                "Invalid response from Fireflies API - transcript not found", platform=self.platform
            )
        return self.map_transcripts([data["transcript"]])[0]

    @staticmethod
    def map_transcripts(meetings: Any) -> List[CallTranscript]:
        """Normalize Fireflies meetings; the summary may be text or an object."""
        if not isinstance(meetings, list):
            logger.warning(f"Fireflies data is not a list: {type(meetings).__name__}")
            return []

        transcripts = []
        for meeting in meetings:
            participants = [
                p if isinstance(p, str) else (p.get("name") or p.get("email") or str(p))
                for p in meeting.get("participants") or []
            ]

            text = meeting.get("transcript") or ""
            if not text and isinstance(meeting.get("sentences"), list):
                text = "\n".join(
                    f"{s.get('speaker_name') or 'Speaker'}: {s.get('text', '')}"
                    for s in meeting["sentences"]
                )

            summary = meeting.get("summary")
            if isinstance(summary, dict):
                action_items = summary.get("action_items") or meeting.get("action_items") or []
                summary = summary.get("overview") or ""
            else:
                action_items = meeting.get("action_items") or []
                summary = summary or ""
            if isinstance(action_items, str):
                action_items = [line.strip() for line in action_items.splitlines() if line.strip()]

            transcripts.append(CallTranscript(
                id=str(meeting.get("id", "")),
                platform="fireflies",
                meeting_title=meeting.get("title") or "Untitled Meeting",
                date=parse_timestamp(meeting.get("date")),
                duration=meeting.get("duration") or 0,
                participants=participants,
                transcript=text,
                summary=summary,
                action_items=list(action_items),
                project_requirements=extract_project_requirements(text),
            ))
        return transcripts


class TeamsClient(_RecordingClient):
    platform = "teams"

    def __init__(self, settings: TeamsSettings, session: Optional[requests.Session] = None):
        if not settings.configured:
            raise ConfigurationError(
                "Teams needs client id, client secret and tenant id", setting="TEAMS_CLIENT_ID"
            )
        super().__init__(settings.timeout, session)
        self.settings = settings
        self.access_token: Optional[str] = None

    def authenticate(self) -> str:
        """Client-credential grant against the tenant's token endpoint."""
        resp = self._call(
            "POST",
            TEAMS_TOKEN_URL.format(tenant_id=self.settings.tenant_id),
            data={
                "client_id": self.settings.client_id,
                "client_secret": self.settings.client_secret,
                "scope": "https://graph.microsoft.com/.default",
                "grant_type": "client_credentials",
            },
        )
        token = self._json(resp).get("access_token")
        if not token:
            raise TranscriptError("Teams token response had no access_token", platform=self.platform)
        self.access_token = token
        return token

    def _auth_headers(self) -> Dict[str, str]:
        if not self.access_token:
            self.authenticate()
        return {"Authorization": f"Bearer {self.access_token}"}

    def fetch_call_recordings(self, user_id: str) -> List[CallTranscript]:
        """Meetings for one user; meetings whose call record fails are skipped."""
        resp = self._call("GET", f"{GRAPH_BASE_URL}/users/{user_id}/onlineMeetings", headers=self._auth_headers())
        meetings = self._json(resp).get("value") or []

        transcripts = []
        for meeting in meetings:
            try:
                record = self._json(self._call(
                    "GET",
                    f"{GRAPH_BASE_URL}/communications/callRecords/{meeting.get('id')}",
                    headers=self._auth_headers(),
                ))
            except TranscriptError as e:
                logger.debug(f"Teams: no call record for meeting {meeting.get('id')}: {e}")
                continue
            transcripts.append(self.map_meeting(meeting, record))

        logger.info(f"Teams: fetched {len(transcripts)} recordings for {user_id}")
        return transcripts

    @staticmethod
    def map_meeting(meeting: Dict[str, Any], record: Dict[str, Any]) -> CallTranscript:
        start = parse_timestamp(meeting.get("startDateTime"))
        end = parse_timestamp(meeting.get("endDateTime"))
        duration = (end - start).total_seconds() if start and end else 0
        participants = [
            p.get("upn") or p.get("displayName")
            for p in meeting.get("participants") or []
            if isinstance(p, dict) and (p.get("upn") or p.get("displayName"))
        ]
        text = record.get("transcript") or ""
        return CallTranscript(
            id=str(meeting.get("id", "")),
            platform="teams",
            meeting_title=meeting.get("subject") or "Teams Meeting",
            date=start,
            duration=duration,
            participants=participants,
            transcript=text,
            summary=record.get("summary"),
            project_requirements=extract_project_requirements(text),
        )


class WebexClient(_RecordingClient):
    platform = "webex"

    def __init__(self, settings: WebexSettings, session: Optional[requests.Session] = None):
        if not settings.configured:
            raise ConfigurationError("No Webex access token configured", setting="WEBEX_ACCESS_TOKEN")
        super().__init__(settings.timeout, session)
        self.settings = settings

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.access_token}",
            "Content-Type": "application/json",
        }

    def fetch_recordings(self) -> List[CallTranscript]:
        """Recording metadata only; transcripts are fetched per recording."""
        data = self._json(self._call("GET", f"{WEBEX_BASE_URL}/recordings", headers=self._headers()))
        recordings = [
            CallTranscript(
                id=str(item.get("id", "")),
                platform="webex",
                meeting_title=item.get("topic") or "Webex Meeting",
                date=parse_timestamp(item.get("createTime")),
                duration=item.get("durationSeconds") or 0,
                participants=list(item.get("participants") or []),
            )
            for item in data.get("items") or []
        ]
        logger.info(f"Webex: fetched {len(recordings)} recordings")
        return recordings

    def fetch_recording_transcript(self, recording_id: str) -> str:
        data = self._json(self._call(
            "GET", f"{WEBEX_BASE_URL}/recordings/{recording_id}/transcript", headers=self._headers()
        ))
        return data.get("text") or ""


class CallRecordingManager:
    """
    Fan-in over every configured recording platform.

    Usage:
        manager = CallRecordingManager.from_config(AppConfig.from_env())
        for transcript in manager.fetch_all_transcripts():
            print(manager.analyze_transcript(transcript).to_dict())
    """

    def __init__(self):
        self.integrations: Dict[str, _RecordingClient] = {}

    @classmethod
    def from_config(cls, config: AppConfig, session: Optional[requests.Session] = None) -> "CallRecordingManager":
        """Register a client for each platform with complete credentials."""
        manager = cls()
        if config.fireflies.configured:
            manager.add_integration(FirefliesClient(config.fireflies, session))
        if config.teams.configured:
            manager.add_integration(TeamsClient(config.teams, session))
        if config.webex.configured:
            manager.add_integration(WebexClient(config.webex, session))
        return manager

    def add_integration(self, client: _RecordingClient) -> None:
        self.integrations[client.platform] = client

    @property
    def platforms(self) -> List[str]:
        return list(self.integrations)

    def fetch_all_transcripts(self, teams_user_id: Optional[str] = None) -> List[CallTranscript]:
        """
        Transcripts from all platforms, in registration order.

        Teams needs a user id; without one it is skipped.
        """
        transcripts: List[CallTranscript] = []
        for platform, client in self.integrations.items():
            try:
                if isinstance(client, FirefliesClient):
                    transcripts.extend(client.fetch_transcripts())
                elif isinstance(client, TeamsClient):
                    if not teams_user_id:
                        logger.info("Teams: no user id given, skipping")
                        continue
                    transcripts.extend(client.fetch_call_recordings(teams_user_id))
                elif isinstance(client, WebexClient):
                    transcripts.extend(client.fetch_recordings())
            except TranscriptError as e:
                logger.warning(f"Error fetching from {platform}: {e}")
        return transcripts

    def analyze_transcript(self, transcript: CallTranscript) -> TranscriptAnalysis:
        return TranscriptAnalysis(
            project_type=detect_transcript_project_type(transcript.transcript),
            requirements=list(transcript.project_requirements),
            estimated_scope=estimate_scope(transcript.transcript),
            suggested_services=suggest_services(transcript.transcript),
        )
