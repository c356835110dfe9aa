"""Chunked input processing

Input is split on the configured separator and every chunk becomes one
request. Chunks run strictly in order; the first failure stops the run.
"""

import logging
import sys
from typing import TextIO

from sgpt.config import Config
from sgpt.provider import Provider, Request

logger = logging.getLogger(__name__)


def split_chunks(text: str, separator: str, has_media: bool = False) -> list[str]:
    """Split input into trimmed, non-empty chunks.

    With an image or audio attached and no text at all, one empty chunk is
    kept so the media is still sent once.
    """
    pieces = text.split(separator) if separator else [text]
    chunks = [piece.strip() for piece in pieces]
    chunks = [chunk for chunk in chunks if chunk]
    if not chunks and has_media:
        return [""]
    return chunks


def build_request(config: Config, chunk: str) -> Request:
    streaming = config.capabilities.streaming if config.capabilities else False
    return Request(
        instruction=config.instruction,
        input=chunk,
        temperature=config.temperature,
        model=config.model,
        image_path=config.image_path,
        audio_path=config.audio_path,
        stream=streaming,
    )


async def run_chunks(
    provider: Provider,
    config: Config,
    chunks: list[str],
    output: TextIO | None = None,
):
    """Process chunks one at a time, printing each result"""
    out = output or sys.stdout
    for index, chunk in enumerate(chunks, start=1):
        request = build_request(config, chunk)
        logger.debug(f"Processing chunk {index}/{len(chunks)} ({len(chunk)} chars, stream={request.stream})")
        if request.stream:
            await provider.stream_complete(request)
        else:
            response = await provider.complete(request)
            out.write(response.text + "\n")
            out.flush()
