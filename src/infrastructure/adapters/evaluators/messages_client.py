"""HTTP client for the messages-style language model endpoint.

One POST per call; the response text is returned as-is and parsed by the
caller against a pydantic schema.

Error mapping:
    timeout, connection failure, non-200 status -> EvaluatorUnavailableError
    200 without a text block                    -> EvaluatorResponseError
"""

from __future__ import annotations

import json
import re
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from src.config.evaluator_config import EvaluatorServiceConfig
from src.domain.errors.evaluator import (
    EvaluatorResponseError,
    EvaluatorUnavailableError,
)

ANTHROPIC_VERSION = "2023-06-01"
MESSAGES_PATH = "/v1/messages"

# A whole reply wrapped in one markdown code fence, optionally tagged json
_FENCED_REPLY = re.compile(r"\A```(?:json)?[ \t]*\n(?P<body>[\s\S]*?)\n?```\Z")

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_reply(schema: type[SchemaT], raw_text: str, service: str) -> SchemaT:
    """Validate a model reply against a schema.

    The reply must be exactly one JSON object, optionally inside a single
    code fence. Surrounding prose is rejected, not skipped.

    Raises:
        EvaluatorResponseError: Reply is not a lone JSON object or fails
            validation; the raw text is carried on the error.
    """
    body = raw_text.strip()
    fenced = _FENCED_REPLY.match(body)
    if fenced is not None:
        body = fenced.group("body").strip()
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise EvaluatorResponseError(
            service, f"reply is not a JSON object: {exc}", raw_text
        ) from exc
    if not isinstance(payload, dict):
        raise EvaluatorResponseError(service, "reply is not a JSON object", raw_text)
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise EvaluatorResponseError(service, f"invalid reply: {exc}", raw_text) from exc


class MessagesClient:
    """Thin async client for one model on the messages endpoint."""

    def __init__(
        self,
        config: EvaluatorServiceConfig,
        model: str,
        service: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Endpoint, key and timeout settings.
            model: Model identifier sent with every request.
            service: Name used in errors and logs ("judgment", ...).
            transport: Optional httpx transport, for tests.
        """
        self._config = config
        self._model = model
        self._service = service
        self._transport = transport
        self._url = f"{config.base_url.rstrip('/')}{MESSAGES_PATH}"

    @property
    def model(self) -> str:
        return self._model

    @property
    def service(self) -> str:
        return self._service

    async def complete(self, system: str, prompt: str) -> str:
        """Send one user message and return the reply text.

        Raises:
            EvaluatorUnavailableError: Transport failure, timeout or non-200.
            EvaluatorResponseError: Reply had no text content.
        """
        api_key = self._config.api_key
        if not api_key:
            raise EvaluatorUnavailableError(
                self._service, f"{self._config.api_key_env} is not set"
            )
        headers = {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        payload: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._config.max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }

        async with httpx.AsyncClient(
            timeout=self._config.timeout_seconds, transport=self._transport
        ) as client:
            try:
                response = await client.post(self._url, json=payload, headers=headers)
            except httpx.TimeoutException as e:
                raise EvaluatorUnavailableError(
                    self._service,
                    f"request timeout after {self._config.timeout_seconds}s",
                ) from e
            except httpx.RequestError as e:
                raise EvaluatorUnavailableError(
                    self._service, f"request failed: {e}"
                ) from e

        if response.status_code != 200:
            raise EvaluatorUnavailableError(
                self._service,
                f"unexpected status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise EvaluatorResponseError(
                self._service, "reply body is not JSON", response.text
            ) from e
        texts = [
            block.get("text", "")
            for block in body.get("content", [])
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        text = "".join(texts).strip()
        if not text:
            raise EvaluatorResponseError(
                self._service, "reply has no text content", response.text
            )
        return text
