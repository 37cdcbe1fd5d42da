"""
External collaborators: call recordings, LLM completions and the local cache.
"""

from .cache import LocalCache
from .llm import (
    SYSTEM_PROMPT,
    Completion,
    OpenRouterClient,
    clean_ai_response,
    substitute_variables,
)
from .transcripts import (
    CallRecordingManager,
    CallTranscript,
    FirefliesClient,
    TeamsClient,
    TranscriptAnalysis,
    WebexClient,
    extract_project_requirements,
)

__all__ = [
    "LocalCache",
    "SYSTEM_PROMPT",
    "Completion",
    "OpenRouterClient",
    "clean_ai_response",
    "substitute_variables",
    "CallRecordingManager",
    "CallTranscript",
    "FirefliesClient",
    "TeamsClient",
    "TranscriptAnalysis",
    "WebexClient",
    "extract_project_requirements",
]
