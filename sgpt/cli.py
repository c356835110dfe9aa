"""CLI entry point for sgpt"""

import asyncio
import logging
import signal
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from sgpt.config import Config, MODEL_CAPABILITIES, load_config
from sgpt.errors import SgptError
from sgpt.provider import build_registry
from sgpt.runner import run_chunks, split_chunks
from sgpt.transport import TransportClient

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

app = typer.Typer(
    name="sgpt",
    help="Pipe text through OpenAI, Anthropic or Google Gemini models",
    add_completion=False,
)
console = Console(stderr=True)


def configure_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def print_error(error: Exception | str):
    console.print(f"Error: {error}", style="red", markup=False, highlight=False)
    hint = getattr(error, "hint", None)
    if hint:
        console.print(hint, style="dim", markup=False, highlight=False)


def print_models():
    table = Table(title="Supported Models")
    table.add_column("Model", style="cyan")
    table.add_column("Provider", style="green")
    table.add_column("Multimodal")
    table.add_column("Streaming")

    for name, caps in MODEL_CAPABILITIES.items():
        table.add_row(
            name,
            caps.provider,
            "yes" if caps.multimodal else "no",
            "yes" if caps.streaming else "no",
        )

    Console().print(table)


def read_input(text: list[str] | None) -> str:
    """Positional text wins over stdin"""
    if text:
        return " ".join(text)
    if sys.stdin.isatty():
        console.print("Reading input from stdin. Press Ctrl+D when finished.", style="dim")
    return sys.stdin.read()


async def process(config: Config, chunks: list[str]):
    async with TransportClient() as client:
        registry = build_registry(client, config)
        provider = registry.get(config.provider)
        await run_chunks(provider, config, chunks)


async def run_cancellable(config: Config, chunks: list[str]):
    """Run until done; SIGTERM cancels the in-flight request like Ctrl+C does.

    Platforms without loop signal handlers only get Ctrl+C.
    """
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, RuntimeError):
        pass
    await process(config, chunks)


@app.command()
def run(
    text: list[str] = typer.Argument(
        None,
        help="Text to process (optional, falls back to stdin)",
    ),
    api_key: str = typer.Option(
        None,
        "--api_key", "--api-key", "-k",
        help="API key for the selected provider",
    ),
    model: str = typer.Option(None, "--model", "-m", help="Model to use"),
    instruction: str = typer.Option(None, "--instruction", "-i", help="Instruction for the model"),
    temperature: float = typer.Option(None, "--temperature", "-t", help="Temperature setting for the model"),
    separator: str = typer.Option(None, "--separator", "-s", help="Separator between input chunks"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
    provider: str = typer.Option(
        None,
        "--provider", "-p",
        help="Provider to use (openai, anthropic, google)",
    ),
    image: str = typer.Option(None, "--image", "-g", help="Path or URL to an image file"),
    audio: str = typer.Option(None, "--audio", "-a", help="Path to an audio file"),
    config_file: Path = typer.Option(None, "--config", "-c", help="YAML config file"),
    list_models: bool = typer.Option(False, "--list-models", help="List supported models and exit"),
):
    """Send each chunk of input to a language model and print the result"""
    if list_models:
        print_models()
        return

    flags = {
        "api_key": api_key,
        "model": model,
        "instruction": instruction,
        "temperature": temperature,
        "separator": separator,
        "debug": True if debug else None,
        "provider": provider,
        "image": image,
        "audio": audio,
    }

    try:
        config = load_config(flags, config_file=config_file)
        configure_logging(config.debug)
        config = config.validated()
    except SgptError as e:
        print_error(e)
        raise typer.Exit(1)

    data = read_input(text)
    if not data.strip() and not config.has_media:
        print_error("no input provided")
        raise typer.Exit(1)

    chunks = split_chunks(data, config.separator, config.has_media)

    try:
        asyncio.run(run_cancellable(config, chunks))
    except SgptError as e:
        print_error(e)
        raise typer.Exit(1)
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("Interrupted", style="yellow")
        raise typer.Exit(130)


def main():
    app()


if __name__ == "__main__":
    main()
