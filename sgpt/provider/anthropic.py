"""Anthropic provider using the Messages API over raw HTTP"""

import json

from pydantic import BaseModel

from sgpt.config.schema import models_for
from sgpt.errors import NoResponseGenerated, UnsupportedModel
from .base import ErrorDetail, ErrorEnvelope, Provider, Request, StreamDelta
from .sse import ServerSentEvent

SUPPORTED_MODELS = frozenset(models_for("anthropic"))

CONTENT_EVENT = "content_block_delta"
STOP_EVENT = "message_stop"
ERROR_EVENT = "error"


class Message(BaseModel):
    role: str
    content: str


class MessagesRequest(BaseModel):
    model: str
    max_tokens: int
    temperature: float
    stream: bool = False
    messages: list[Message]
    system: str | None = None


class ContentBlock(BaseModel):
    type: str
    text: str = ""


class MessagesResponse(BaseModel):
    content: list[ContentBlock] = []


class TextDelta(BaseModel):
    type: str | None = None
    text: str = ""


class StreamEvent(BaseModel):
    type: str
    delta: TextDelta | None = None
    error: ErrorDetail | None = None


class AnthropicErrorDetail(ErrorDetail):
    type: str | None = None


class AnthropicError(ErrorEnvelope):
    error: AnthropicErrorDetail | None = None


class AnthropicProvider(Provider):
    """Provider for Anthropic Claude models"""

    name = "anthropic"
    label = "Anthropic"
    error_model = AnthropicError

    API_URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"
    MAX_TOKENS = 1000

    def endpoint(self, request: Request, stream: bool) -> str:
        return self.API_URL

    def headers(self, stream: bool) -> dict[str, str]:
        headers = super().headers(stream)
        headers["x-api-key"] = self.api_key
        headers["anthropic-version"] = self.API_VERSION
        return headers

    def build_payload(self, request: Request, stream: bool) -> BaseModel:
        if request.model not in SUPPORTED_MODELS:
            raise UnsupportedModel(f"unsupported model: {request.model}")

        return MessagesRequest(
            model=request.model,
            max_tokens=self.MAX_TOKENS,
            temperature=request.temperature,
            stream=stream,
            messages=[Message(role="user", content=request.input)],
            system=request.instruction or None,
        )

    def parse_response(self, body: bytes, request: Request) -> str:
        try:
            response = MessagesResponse.model_validate_json(body)
        except ValueError as e:
            raise NoResponseGenerated(f"failed to parse response: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        if not text:
            raise NoResponseGenerated("no response generated")
        return text

    def decode_event(self, event: ServerSentEvent) -> StreamDelta:
        if event.is_done:
            return StreamDelta(done=True)
        # Only content, stop and error events matter; pings and message
        # bookkeeping are skipped without parsing.
        if event.event and event.event not in (CONTENT_EVENT, STOP_EVENT, ERROR_EVENT):
            return StreamDelta()

        parsed = StreamEvent.model_validate(json.loads(event.data))

        if parsed.type == CONTENT_EVENT and parsed.delta is not None:
            return StreamDelta(text=parsed.delta.text)
        if parsed.type == STOP_EVENT:
            return StreamDelta(done=True)
        if parsed.type == ERROR_EVENT:
            message = parsed.error.message if parsed.error else "unknown error"
            self.logger.warning(f"Anthropic stream reported an error: {message}")
            return StreamDelta(done=True)
        return StreamDelta()
