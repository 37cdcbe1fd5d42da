"""
OpenRouter LLM Client
Chat completions for the assistant and free-form prompt generation.

Both calls POST to {base_url}/chat/completions and return the first
choice's message content. Non-2xx responses and empty completions raise
LLMError.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import requests

from vsa.config import OpenRouterSettings
from vsa.errors import ConfigurationError, LLMError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an AI assistant for the Virtual Service Architect (VSA) platform. VSA is a project management tool for service businesses that features:

- Project management with scope, call recordings, and notes
- AI-powered project summaries and insights
- Service scope management and billing
- Call recording integration (Fireflies)
- Team collaboration tools

Help users with:
1. Understanding how to use VSA features
2. Project management best practices
3. Service scoping and estimations
4. General business consulting advice
5. Technical questions about the platform

Be helpful, professional, and concise. Focus on practical advice and actionable insights."""

CHAT_TITLE = "Virtual Service Architect AI Assistant"
GENERATE_TITLE = "Virtual Service Architect"

CHAT_MAX_TOKENS = 1000
GENERATE_MAX_TOKENS = 2000


@dataclass
class Completion:
    content: str
    model: str
    usage: Dict[str, Any] = field(default_factory=dict)


def substitute_variables(prompt: str, variables: Optional[Mapping[str, Any]] = None) -> str:
    """Replace every {name} with the value as indented JSON."""
    for key, value in (variables or {}).items():
        prompt = prompt.replace(f"{{{key}}}", json.dumps(value, indent=2, ensure_ascii=False, default=str))
    return prompt


def clean_ai_response(response: str) -> str:
    """Strip code fences and keep the outermost {...} span if there is one."""
    cleaned = re.sub(r"```json\s*", "", response or "")
    cleaned = re.sub(r"```\s*", "", cleaned).strip()

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first != -1 and last > first:
        cleaned = cleaned[first:last + 1]
    return cleaned


class OpenRouterClient:
    """
    OpenRouter chat-completions client.

    Usage:
        client = OpenRouterClient(config.openrouter)
        reply = client.chat([{"role": "user", "content": "How do I scope a migration?"}])
        print(reply.content)
    """

    def __init__(self, settings: OpenRouterSettings, session: Optional[requests.Session] = None):
        if not settings.configured:
            raise ConfigurationError("No OpenRouter API key configured", setting="OPENROUTER_API_KEY")
        self.settings = settings
        self.session = session or requests.Session()

    def _complete(
        self,
        messages: List[Dict[str, str]],
        title: str,
        model: Optional[str],
        max_tokens: int,
        temperature: Optional[float],
    ) -> Completion:
        model = model or self.settings.model
        url = f"{self.settings.base_url.rstrip('/')}/chat/completions"
        payload = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": self.settings.temperature if temperature is None else temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.settings.site_url,
            "X-Title": title,
        }

        logger.debug(f"OpenRouter: {len(messages)} messages to {model}")
        try:
            resp = self.session.post(url, headers=headers, json=payload, timeout=self.settings.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise LLMError(f"OpenRouter API error: {status_code}", status_code=status_code) from e
        except requests.RequestException as e:
            raise LLMError(f"OpenRouter request failed: {e}") from e
        except ValueError as e:
            raise LLMError("Invalid JSON from OpenRouter") from e

        choices = data.get("choices") or []
        content = ((choices[0] or {}).get("message") or {}).get("content") if choices else None
        if not content:
            raise LLMError("No content generated")

        return Completion(content=content, model=model, usage=data.get("usage") or {})

    def chat(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        max_tokens: int = CHAT_MAX_TOKENS,
        temperature: Optional[float] = None,
    ) -> Completion:
        """Assistant chat; the VSA system prompt is prepended to the messages."""
        if not isinstance(messages, list):
            raise ValueError("messages must be a list")
        return self._complete(
            [{"role": "system", "content": SYSTEM_PROMPT}, *messages],
            CHAT_TITLE,
            model,
            max_tokens,
            temperature,
        )

    def generate(
        self,
        prompt: str,
        variables: Optional[Mapping[str, Any]] = None,
        model: Optional[str] = None,
        max_tokens: int = GENERATE_MAX_TOKENS,
        temperature: Optional[float] = None,
    ) -> Completion:
        """Single-turn completion of a prompt template."""
        if not prompt:
            raise ValueError("prompt is required")
        return self._complete(
            [{"role": "user", "content": substitute_variables(prompt, variables)}],
            GENERATE_TITLE,
            model,
            max_tokens,
            temperature,
        )
