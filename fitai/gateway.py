from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ValidationError

from .config import Settings


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GenerationErrorKind(str, Enum):
    UNCONFIGURED = "unconfigured"
    TRANSPORT_FAILURE = "transport_failure"
    PARSE_FAILURE = "parse_failure"


class GenerationError(Exception):
    def __init__(self, kind: GenerationErrorKind, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.cause = cause

    def __str__(self) -> str:
        base = f"{self.kind.value}: {self.args[0]}"
        if self.cause is not None:
            return f"{base} ({self.cause})"
        return base


class GenerationGateway:
    """Single choke point for calls to the chat-completion API.

    One outbound request per ``complete`` call: the client is built with
    retries disabled and a wall-clock timeout.
    """

    def __init__(self, settings: Optional[Settings] = None, llm: Any = None) -> None:
        self.settings = settings or Settings.from_env()
        self._llm = llm

    @property
    def is_configured(self) -> bool:
        return self._llm is not None or self.settings.ai_configured

    def _get_llm(self) -> Any:
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self.settings.openai_model,
                api_key=self.settings.openai_api_key,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
                timeout=self.settings.timeout_seconds,
                max_retries=0,
            )
        return self._llm

    def complete(
        self,
        user_prompt: str,
        *,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        if not self.is_configured:
            raise GenerationError(GenerationErrorKind.UNCONFIGURED, "OpenAI API key not configured")

        messages: List[BaseMessage] = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=user_prompt))

        overrides = {}
        if max_tokens is not None:
            overrides["max_tokens"] = max_tokens
        if temperature is not None:
            overrides["temperature"] = temperature

        try:
            response = self._get_llm().invoke(messages, **overrides)
        except Exception as e:
            raise GenerationError(GenerationErrorKind.TRANSPORT_FAILURE, "Error generating AI response", cause=e) from e

        content = getattr(response, "content", response)
        if content is None:
            return ""
        if isinstance(content, list):
            # Content blocks; keep the text parts only
            return "".join(
                block.get("text", "") if isinstance(block, dict) else str(block) for block in content
            )
        return str(content)


def parse_structured(text: str, model: Type[ModelT]) -> ModelT:
    """Parse generated text as JSON and validate it against ``model``.

    Markdown fences and any prose around the outermost object are
    dropped first. Every failure is a PARSE_FAILURE.
    """
    candidate = (text or "").strip().replace("```json", "").replace("```", "").strip()
    if not candidate:
        raise GenerationError(GenerationErrorKind.PARSE_FAILURE, "Empty response")

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start != -1 and end > start:
        candidate = candidate[start : end + 1]

    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise GenerationError(GenerationErrorKind.PARSE_FAILURE, "Response is not valid JSON", cause=e) from e

    if not isinstance(payload, dict):
        raise GenerationError(GenerationErrorKind.PARSE_FAILURE, "Response is not a JSON object")

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise GenerationError(
            GenerationErrorKind.PARSE_FAILURE, f"Response does not match {model.__name__}", cause=e
        ) from e
