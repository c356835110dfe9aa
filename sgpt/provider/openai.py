"""OpenAI provider: chat completions, legacy completions and gpt-4o multimodal input"""

import json
from typing import Literal

from pydantic import BaseModel

from sgpt.errors import NoResponseGenerated, UnsupportedModel
from .base import (
    ErrorDetail,
    ErrorEnvelope,
    Provider,
    Request,
    StreamDelta,
    load_audio,
    load_image,
)
from .sse import ServerSentEvent

MULTIMODAL_CHAT_MODELS = frozenset({"gpt-4o"})
CHAT_MODELS = frozenset({"gpt-4", "gpt-4-0314", "gpt-4-32k", "gpt-4-32k-0314", "gpt-3.5-turbo"})
LEGACY_MODELS = frozenset({
    "text-davinci-003", "text-davinci-002", "text-curie-001", "text-babbage-001", "text-ada-001",
})


# Request bodies

class ImageURL(BaseModel):
    url: str


class AudioData(BaseModel):
    data: str


class ContentPart(BaseModel):
    type: Literal["text", "image_url", "audio"]
    text: str | None = None
    image_url: ImageURL | None = None
    audio: AudioData | None = None


class ChatMessage(BaseModel):
    role: Literal["system", "user"]
    content: str | list[ContentPart]


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    temperature: float
    stream: bool = False


class CompletionRequest(BaseModel):
    model: str
    prompt: str
    temperature: float
    stream: bool = False


# Response bodies

class ResponseMessage(BaseModel):
    role: str | None = None
    content: str | None = None


class Choice(BaseModel):
    message: ResponseMessage | None = None
    text: str | None = None


class CompletionResponse(BaseModel):
    choices: list[Choice] = []


class Delta(BaseModel):
    content: str | None = None


class StreamChoice(BaseModel):
    delta: Delta = Delta()
    finish_reason: str | None = None


class StreamChunk(BaseModel):
    choices: list[StreamChoice] = []


class OpenAIErrorDetail(ErrorDetail):
    type: str | None = None


class OpenAIError(ErrorEnvelope):
    error: OpenAIErrorDetail | None = None


def is_chat_model(model: str) -> bool:
    return model in CHAT_MODELS or model in MULTIMODAL_CHAT_MODELS


class OpenAIProvider(Provider):
    """Provider for OpenAI GPT models"""

    name = "openai"
    label = "OpenAI"
    error_model = OpenAIError

    CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
    COMPLETIONS_URL = "https://api.openai.com/v1/completions"

    def endpoint(self, request: Request, stream: bool) -> str:
        if request.model.startswith("gpt-"):
            return self.CHAT_COMPLETIONS_URL
        return self.COMPLETIONS_URL

    def headers(self, stream: bool) -> dict[str, str]:
        headers = super().headers(stream)
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def check_stream_support(self, request: Request):
        if not is_chat_model(request.model):
            raise UnsupportedModel(f"unsupported model: streaming not supported for model {request.model}")

    def build_payload(self, request: Request, stream: bool) -> BaseModel:
        model = request.model

        if model in MULTIMODAL_CHAT_MODELS:
            return ChatCompletionRequest(
                model=model,
                messages=self._multimodal_messages(request),
                temperature=request.temperature,
                stream=stream,
            )

        if model in CHAT_MODELS:
            messages = []
            if request.instruction:
                messages.append(ChatMessage(role="system", content=request.instruction))
            messages.append(ChatMessage(role="user", content=request.input))
            return ChatCompletionRequest(
                model=model,
                messages=messages,
                temperature=request.temperature,
                stream=stream,
            )

        if model in LEGACY_MODELS:
            prompt = " ".join(part for part in (request.instruction, request.input) if part)
            return CompletionRequest(
                model=model,
                prompt=prompt,
                temperature=request.temperature,
                stream=stream,
            )

        raise UnsupportedModel(f"unsupported model: {model}")

    def _multimodal_messages(self, request: Request) -> list[ChatMessage]:
        messages = []
        if request.instruction:
            messages.append(ChatMessage(role="system", content=request.instruction))

        parts: list[ContentPart] = []
        if request.input:
            parts.append(ContentPart(type="text", text=request.input))
        if request.image_path:
            parts.append(ContentPart(
                type="image_url",
                image_url=ImageURL(url=load_image(request.image_path)),
            ))
        if request.audio_path:
            parts.append(ContentPart(
                type="audio",
                audio=AudioData(data=load_audio(request.audio_path)),
            ))

        messages.append(ChatMessage(role="user", content=parts))
        return messages

    def parse_response(self, body: bytes, request: Request) -> str:
        try:
            response = CompletionResponse.model_validate_json(body)
        except ValueError as e:
            raise NoResponseGenerated(f"failed to parse response: {e}") from e

        if not response.choices:
            raise NoResponseGenerated("no response generated")

        choice = response.choices[0]
        if request.model.startswith("gpt-"):
            return (choice.message.content or "") if choice.message else ""
        return choice.text or ""

    def decode_event(self, event: ServerSentEvent) -> StreamDelta:
        if event.is_done:
            return StreamDelta(done=True)

        chunk = StreamChunk.model_validate(json.loads(event.data))
        if not chunk.choices:
            return StreamDelta()

        choice = chunk.choices[0]
        return StreamDelta(
            text=choice.delta.content or "",
            done=bool(choice.finish_reason),
        )
