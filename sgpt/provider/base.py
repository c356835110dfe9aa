"""Provider abstraction for LLM APIs"""

import base64
import logging
import mimetypes
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import httpx
from pydantic import BaseModel, ValidationError

from sgpt.errors import APIRequestFailed, InvalidConfiguration, NoResponseGenerated
from sgpt.transport import TransportClient
from sgpt.util import logsafe
from .sse import ServerSentEvent, aiter_sse


@dataclass(frozen=True)
class Request:
    """One generation request, built per input chunk"""
    instruction: str = ""
    input: str = ""
    temperature: float = 0.5
    model: str = ""
    image_path: str = ""
    audio_path: str = ""
    stream: bool = False


@dataclass(frozen=True)
class Response:
    """Result of a non-streaming call"""
    text: str
    raw: bytes = b""


@dataclass(frozen=True)
class StreamDelta:
    """Text carried by one stream event, and whether the stream is finished"""
    text: str = ""
    done: bool = False


class ErrorDetail(BaseModel):
    message: str = ""


class ErrorEnvelope(BaseModel):
    """The {"error": {"message": ...}} body all three vendors send on failure"""
    error: ErrorDetail | None = None


def is_remote(path: str) -> bool:
    return path.startswith(("http://", "https://"))


def guess_mime_type(path: str, fallback: str) -> str:
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or fallback


def read_base64(path: str, kind: str) -> str:
    """Read a local file and return its base64 encoding"""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise InvalidConfiguration(f"failed to read {kind} file: {e}") from e
    return base64.b64encode(data).decode("ascii")


def load_image(path: str) -> str:
    """Return a URL unchanged, or a local image as a base64 data URI"""
    if is_remote(path):
        return path
    mime_type = guess_mime_type(path, "image/png")
    return f"data:{mime_type};base64,{read_base64(path, 'image')}"


def load_audio(path: str) -> str:
    """Return a local audio file as a base64 data URI"""
    mime_type = guess_mime_type(path, "audio/wav")
    return f"data:{mime_type};base64,{read_base64(path, 'audio')}"


class Provider(ABC):
    """Base class for vendor adapters.

    Subclasses describe the wire format (endpoint, headers, payload, response
    and stream parsing); this class owns the request/response cycle.
    """

    name: str = ""
    label: str = ""
    error_model: type[ErrorEnvelope] = ErrorEnvelope

    def __init__(
        self,
        client: TransportClient,
        api_key: str,
        logger: logging.Logger | None = None,
        output: TextIO | None = None,
    ):
        self.client = client
        self.api_key = api_key
        self.logger = logger or logging.getLogger(type(self).__module__)
        self._output = output

    @property
    def output(self) -> TextIO:
        return self._output or sys.stdout

    @abstractmethod
    def build_payload(self, request: Request, stream: bool) -> BaseModel:
        """Build the typed request body, raising UnsupportedModel when unknown"""

    @abstractmethod
    def endpoint(self, request: Request, stream: bool) -> str:
        """URL to POST the payload to"""

    @abstractmethod
    def parse_response(self, body: bytes, request: Request) -> str:
        """Extract generated text from a full response body"""

    @abstractmethod
    def decode_event(self, event: ServerSentEvent) -> StreamDelta:
        """Turn one stream event into text; raise ValueError when malformed"""

    def headers(self, stream: bool) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if stream:
            headers["Accept"] = "text/event-stream"
        return headers

    def params(self, stream: bool) -> dict[str, str] | None:
        return None

    def check_stream_support(self, request: Request):
        """Hook for adapters that cannot stream every model they know"""

    def encode(self, request: Request, stream: bool) -> bytes:
        payload = self.build_payload(request, stream)
        logsafe.dump_json(
            self.logger,
            f"{self.label} request payload",
            payload.model_dump(mode="json", exclude_none=True, by_alias=True),
        )
        return payload.model_dump_json(exclude_none=True, by_alias=True).encode("utf-8")

    def api_error(self, status_code: int, body: bytes) -> APIRequestFailed:
        """Surface the vendor error message, or the bare status code"""
        try:
            envelope = self.error_model.model_validate_json(body)
        except ValidationError:
            envelope = None
        if envelope is not None and envelope.error is not None and envelope.error.message:
            message = f"API error: {envelope.error.message}"
        else:
            message = f"API error: status {status_code}"
        return APIRequestFailed(message, status_code=status_code, provider=self.name)

    async def _send(self, request: Request, content: bytes, stream: bool) -> httpx.Response:
        http_request = self.client.build_request(
            "POST",
            self.endpoint(request, stream),
            content=content,
            headers=self.headers(stream),
            params=self.params(stream),
            stream=stream,
        )
        try:
            return await self.client.send(http_request, stream=stream)
        except httpx.HTTPError as e:
            raise APIRequestFailed(
                f"API request failed: {e}", provider=self.name
            ) from e

    async def complete(self, request: Request) -> Response:
        """Send the request and wait for the full response"""
        content = self.encode(request, stream=False)
        response = await self._send(request, content, stream=False)

        try:
            body = await self.client.read_all(response)
        except httpx.HTTPError as e:
            raise APIRequestFailed(
                f"failed to read response body: {e}", provider=self.name
            ) from e

        if not response.is_success:
            raise self.api_error(response.status_code, body)

        text = self.parse_response(body, request)
        return Response(text=text.strip(), raw=body)

    async def stream_complete(self, request: Request):
        """Send the request and write tokens to the output as they arrive.

        Malformed events are logged and skipped; only transport failures and
        handshake errors abort the stream. A trailing newline ends the output.
        """
        self.check_stream_support(request)
        content = self.encode(request, stream=True)
        response = await self._send(request, content, stream=True)

        if not response.is_success:
            try:
                body = await self.client.read_all(response)
            except httpx.HTTPError:
                body = b""
            raise self.api_error(response.status_code, body)

        out = self.output
        try:
            async for event in aiter_sse(response.aiter_lines()):
                try:
                    delta = self.decode_event(event)
                except ValueError as e:
                    self.logger.warning(f"Skipping malformed {self.label} stream event: {e}")
                    continue
                if delta.text:
                    out.write(delta.text)
                    out.flush()
                if delta.done:
                    break
        except httpx.HTTPError as e:
            raise APIRequestFailed(
                f"error reading stream: {e}", provider=self.name
            ) from e
        finally:
            await response.aclose()

        out.write("\n")
        out.flush()
