"""Text-completion client for OpenAI-compatible chat endpoints."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import LLMConfig

_AUTO = object()


@dataclass
class LLMRequest:
    """A single completion request."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]


class LLMRunner:
    """Sends prompts to the configured model and returns the completion text.

    Calls are stateless, so retrying with the same prompt is always safe.
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_TEMPERATURE = 0.7
    ENV_MODEL_KEYS = ("SITEGEN_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("SITEGEN_LLM_BASE_URL", "OPENAI_BASE_URL")
    ENV_API_KEY_KEYS = ("SITEGEN_LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None | object = _AUTO,
        temperature: Optional[float] = DEFAULT_TEMPERATURE,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 120.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.model = model or self._first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        resolved_url = base_url or self._first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        self.base_url = resolved_url.rstrip("/")
        if api_key is _AUTO:
            self.api_key = self._first_env_value(self.ENV_API_KEY_KEYS)
        else:
            self.api_key = api_key  # type: ignore[assignment]
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._runner = runner or self._http_runner

    @classmethod
    def from_config(cls, config: LLMConfig | None) -> "LLMRunner":
        """Build a runner from the ``llm`` section of .sitegen.yml."""
        if config is None:
            return cls()
        return cls(
            config.model,
            base_url=config.base_url,
            api_key=config.api_key if config.api_key else _AUTO,
            temperature=config.temperature if config.temperature is not None else cls.DEFAULT_TEMPERATURE,
            max_tokens=config.max_tokens,
            request_timeout=config.request_timeout or 120.0,
        )

    def complete(
        self, prompt: str, temperature: Optional[float] = None, *, system: str | None = None
    ) -> str:
        """Return the model's completion for ``prompt``."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature if temperature is None else temperature,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        endpoint = f"{request.base_url}/chat/completions"
        payload: dict[str, object] = {
            "model": request.model,
            "messages": LLMRunner._build_messages(request.system, request.prompt),
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"

        http_request = Request(
            endpoint,
            data=json.dumps(payload).encode("utf-8"),
            headers=headers,
            method="POST",
        )
        try:
            with urlopen(http_request, timeout=request.request_timeout or 120.0) as response:
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            detail = exc.read().decode("utf-8", errors="ignore")
            raise RuntimeError(
                f"LLM request failed with status {exc.code}: {detail.strip() or exc.reason}"
            ) from exc
        except URLError as exc:  # pragma: no cover - depends on runtime
            raise RuntimeError(f"LLM request failed: {exc.reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise RuntimeError("LLM endpoint returned invalid JSON") from exc
        if not isinstance(response_payload, dict):
            raise RuntimeError("LLM endpoint returned an unexpected payload")
        return LLMRunner._extract_content(response_payload)

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _extract_content(payload: dict[str, object]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
        text = choices[0].get("text")
        return text if isinstance(text, str) else ""

    @staticmethod
    def _first_env_value(keys: Sequence[str]) -> str | None:
        for key in keys:
            value = os.getenv(key)
            if value:
                return value
        return None
