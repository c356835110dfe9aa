"""Google Gemini provider using the generateContent REST API"""

import json

from pydantic import BaseModel, Field

from sgpt.config.schema import models_for
from sgpt.errors import NoResponseGenerated, UnsupportedModel
from .base import (
    ErrorDetail,
    ErrorEnvelope,
    Provider,
    Request,
    StreamDelta,
    guess_mime_type,
    is_remote,
    read_base64,
)
from .sse import ServerSentEvent

SUPPORTED_MODELS = frozenset(models_for("google"))


class InlineData(BaseModel):
    mime_type: str
    data: str


class FileData(BaseModel):
    mime_type: str
    file_uri: str


class Part(BaseModel):
    text: str | None = None
    inline_data: InlineData | None = None
    file_data: FileData | None = None


class Content(BaseModel):
    role: str | None = None
    parts: list[Part] = []


class GenerationConfig(BaseModel):
    temperature: float


class GenerateContentRequest(BaseModel):
    contents: list[Content]
    system_instruction: Content | None = Field(default=None, serialization_alias="systemInstruction")
    generation_config: GenerationConfig = Field(serialization_alias="generationConfig")


class Candidate(BaseModel):
    content: Content = Content()


class GenerateContentResponse(BaseModel):
    candidates: list[Candidate] = []

    def first_text(self) -> str | None:
        """Text of the first part of the first candidate, if any"""
        if not self.candidates or not self.candidates[0].content.parts:
            return None
        return self.candidates[0].content.parts[0].text or ""


class GeminiErrorDetail(ErrorDetail):
    code: int | None = None
    status: str | None = None


class GeminiError(ErrorEnvelope):
    error: GeminiErrorDetail | None = None


def image_part(path: str) -> Part:
    """URLs are referenced as-is; local files are inlined as base64"""
    mime_type = guess_mime_type(path, "image/jpeg")
    if is_remote(path):
        return Part(file_data=FileData(mime_type=mime_type, file_uri=path))
    return Part(inline_data=InlineData(mime_type=mime_type, data=read_base64(path, "image")))


def audio_part(path: str) -> Part:
    mime_type = guess_mime_type(path, "audio/wav")
    return Part(inline_data=InlineData(mime_type=mime_type, data=read_base64(path, "audio")))


class GeminiProvider(Provider):
    """Provider for Google Gemini models"""

    name = "google"
    label = "Google Gemini"
    error_model = GeminiError

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def endpoint(self, request: Request, stream: bool) -> str:
        method = "streamGenerateContent" if stream else "generateContent"
        return f"{self.BASE_URL}/{request.model}:{method}"

    def params(self, stream: bool) -> dict[str, str]:
        params = {"key": self.api_key}
        if stream:
            params["alt"] = "sse"
        return params

    def build_payload(self, request: Request, stream: bool) -> BaseModel:
        if request.model not in SUPPORTED_MODELS:
            raise UnsupportedModel(f"unsupported model: {request.model}")

        parts = []
        if request.input or not (request.image_path or request.audio_path):
            parts.append(Part(text=request.input))
        if request.image_path:
            parts.append(image_part(request.image_path))
        if request.audio_path:
            parts.append(audio_part(request.audio_path))

        system_instruction = None
        if request.instruction:
            system_instruction = Content(parts=[Part(text=request.instruction)])

        return GenerateContentRequest(
            contents=[Content(role="user", parts=parts)],
            system_instruction=system_instruction,
            generation_config=GenerationConfig(temperature=request.temperature),
        )

    def parse_response(self, body: bytes, request: Request) -> str:
        try:
            response = GenerateContentResponse.model_validate_json(body)
        except ValueError as e:
            raise NoResponseGenerated(f"failed to parse response: {e}") from e

        text = response.first_text()
        if text is None:
            raise NoResponseGenerated("no response generated")
        return text

    def decode_event(self, event: ServerSentEvent) -> StreamDelta:
        if event.is_done:
            return StreamDelta(done=True)

        chunk = GenerateContentResponse.model_validate(json.loads(event.data))
        return StreamDelta(text=chunk.first_text() or "")
