"""Command-line interface for nanobanana."""

import asyncio
import contextlib
import json
import logging
import platform
import sys
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from nanobanana import __version__
from nanobanana.config import (
    APP_NAME,
    ConfigError,
    Settings,
    config_path,
    load_config,
    mask_key,
    resolve_api_key,
    resolve_model_name,
    save_config,
)
from nanobanana.models.errors import ApiError, ErrorCode
from nanobanana.models.requests import DEFAULT_ASPECT, DEFAULT_SIZE, MAX_IMAGES, HintMode
from nanobanana.models.responses import ImageGenerationResponse, ImagePayload
from nanobanana.services.image_codec import auto_name, batch_paths, edited_name, read_image, write_image
from nanobanana.services.image_service import ImageService
from nanobanana.validation import MODEL_ALIASES, resolve_model, validate_aspect, validate_size

app = typer.Typer(
    help="Generate and edit images with Gemini",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    add_completion=False,
)
console = Console(stderr=True)
logger = logging.getLogger(__name__)

AUTO_NAME_PREFIX = APP_NAME


class Output:
    """Console reporting that honours --quiet."""

    def __init__(self, quiet: bool = False, stream: Console = console):
        self.quiet = quiet
        self.console = stream

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[blue]→[/blue] {escape(message)}", highlight=False)

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]✓[/green] {escape(message)}", highlight=False)

    def warn(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}", highlight=False)

    def status(self, message: str):
        """Spinner on a terminal, a plain line elsewhere, nothing when quiet."""
        if self.quiet:
            return contextlib.nullcontext()
        if not self.console.is_terminal:
            self.console.print(f"{message}...", highlight=False)
            return contextlib.nullcontext()
        return self.console.status(message)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def describe_error(code: ErrorCode, message: str, status: Optional[int] = None) -> str:
    """Human-readable rendering of a classified error."""
    if code == ErrorCode.SERVER_ERROR:
        return f"API error ({status}): {message}" if message else f"API error ({status})"
    if code == ErrorCode.BAD_REQUEST:
        return f"API error: {message}"
    return message


def _output_paths(
    response: ImageGenerationResponse,
    output: Optional[Path],
    source_path: Optional[Path],
) -> list[Path]:
    count = len(response.results)
    if output is not None:
        return batch_paths(output, count)
    if source_path is not None:
        return batch_paths(edited_name(source_path), count)

    paths = []
    for result in response.results:
        mime_type = result.payload.mime_type if result.payload else "image/png"
        paths.append(Path(auto_name(AUTO_NAME_PREFIX, mime_type, result.index if count > 1 else None)))
    return paths


def _execute(
    prompt_words: List[str],
    *,
    source_path: Optional[Path],
    model: Optional[str],
    output: Optional[Path],
    aspect: str,
    size: str,
    count: int,
    concurrency: Optional[int],
    retries: int,
    hint_mode: Optional[HintMode],
    quiet: bool,
    as_json: bool,
    verbose: bool,
) -> int:
    configure_logging(verbose)
    out = Output(quiet=quiet or as_json)
    prompt = " ".join(prompt_words).strip()
    if not prompt:
        out.error("prompt must not be empty")
        return 1

    try:
        cfg = load_config()
        settings = Settings()
    except (ConfigError, ValidationError) as e:
        out.error(str(e))
        return 1

    model_name = resolve_model_name(model, settings, cfg)

    # Validate before touching credentials, files or the network
    try:
        resolved = resolve_model(model_name)
        validate_aspect(resolved, aspect)
        validate_size(resolved, size)
    except ApiError as e:
        out.error(e.message)
        return 1

    try:
        api_key = resolve_api_key(settings, cfg)
    except ConfigError as e:
        out.error(str(e))
        return 1

    source: Optional[ImagePayload] = None
    if source_path is not None:
        try:
            source = read_image(source_path)
        except OSError as e:
            out.error(f"reading image: {e}")
            return 1

    service = ImageService(
        api_key,
        base_url=settings.base_url,
        timeout_seconds=settings.timeout_seconds,
        max_concurrency=concurrency or settings.max_concurrency,
        hint_mode=hint_mode or settings.hint_mode,
        retry_attempts=retries + 1,
    )

    verb = "Editing" if source is not None else "Generating"
    target = f"{source_path} " if source_path is not None else ""
    plural = f"{count} images" if count > 1 else "image"
    out.info(f"{verb} {target}with {model_name} ({aspect}, {size}, {prompt})")

    try:
        with out.status(f"{verb} {plural}"):
            response = asyncio.run(
                service.generate(
                    prompt,
                    source=source,
                    model=model_name,
                    aspect=aspect,
                    size=size,
                    count=count,
                )
            )
    except ApiError as e:
        out.error(describe_error(e.code, e.message, e.status))
        return 1

    images = []
    errors = []
    for result, path in zip(response.results, _output_paths(response, output, source_path)):
        if result.error is not None:
            message = describe_error(result.error.code, result.error.message, result.error.status)
            errors.append({"index": result.index, "code": result.error.code.value, "message": message})
            out.warn(f"Image {result.index + 1} failed: {message}")
            continue

        try:
            write_image(path, result.payload.data, result.payload.mime_type)
        except OSError as e:
            errors.append({"index": result.index, "code": "WRITE", "message": str(e)})
            out.error(f"writing image: {e}")
            continue

        images.append(
            {
                "index": result.index,
                "path": str(path),
                "bytes": len(result.payload),
                "mime_type": result.payload.mime_type,
            }
        )
        if quiet and not as_json:
            typer.echo(str(path))
        else:
            out.success(f"Saved to {path} ({len(result.payload)} bytes)")

    if as_json:
        typer.echo(
            json.dumps(
                {
                    "model": response.model,
                    "model_identifier": response.model_identifier,
                    "prompt": response.prompt,
                    "images": images,
                    "errors": errors,
                },
                indent=2,
            )
        )

    if not images:
        if not as_json and len(response.results) > 1:
            out.error(f"all {len(response.results)} images failed")
        return 1
    return 0


def _options():
    return {
        "model": typer.Option(None, "--model", "-m", help="Model: flash, pro, legacy, or a full model name"),
        "output": typer.Option(None, "--output", "-o", help="Output file path (default: auto-generated)"),
        "aspect": typer.Option(DEFAULT_ASPECT, "--aspect", "-a", help="Aspect ratio, e.g. 1:1, 16:9, 9:16"),
        "size": typer.Option(DEFAULT_SIZE, "--size", "-s", help="Image size: 512 (flash), 1K, 2K, 4K (pro)"),
        "count": typer.Option(1, "--count", "-n", min=1, max=MAX_IMAGES, help="Number of images to generate (1-8)"),
        "concurrency": typer.Option(None, "--concurrency", min=1, max=MAX_IMAGES, help="Concurrent requests for batches"),
        "retries": typer.Option(0, "--retries", min=0, max=5, help="Retries per image on rate limits, server or network errors"),
        "hint_mode": typer.Option(None, "--hint-mode", help="How aspect/size reach the model: structured or prompt"),
        "quiet": typer.Option(False, "--quiet", "-q", help="Suppress output, print only file paths to stdout"),
        "as_json": typer.Option(False, "--json", help="Print a JSON summary to stdout"),
        "verbose": typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    }


_gen_opts = _options()
_edit_opts = _options()


@app.command("generate")
def generate(
    prompt: List[str] = typer.Argument(..., help="Text prompt"),
    model: Optional[str] = _gen_opts["model"],
    output: Optional[Path] = _gen_opts["output"],
    aspect: str = _gen_opts["aspect"],
    size: str = _gen_opts["size"],
    count: int = _gen_opts["count"],
    concurrency: Optional[int] = _gen_opts["concurrency"],
    retries: int = _gen_opts["retries"],
    hint_mode: Optional[HintMode] = _gen_opts["hint_mode"],
    quiet: bool = _gen_opts["quiet"],
    as_json: bool = _gen_opts["as_json"],
    verbose: bool = _gen_opts["verbose"],
) -> None:
    """Generate images from a text prompt."""
    raise typer.Exit(
        _execute(
            prompt,
            source_path=None,
            model=model,
            output=output,
            aspect=aspect,
            size=size,
            count=count,
            concurrency=concurrency,
            retries=retries,
            hint_mode=hint_mode,
            quiet=quiet,
            as_json=as_json,
            verbose=verbose,
        )
    )


app.command("gen", hidden=True, help="Alias for generate.")(generate)


@app.command("edit")
def edit(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Source image"),
    prompt: List[str] = typer.Argument(..., help="Edit instructions"),
    model: Optional[str] = _edit_opts["model"],
    output: Optional[Path] = _edit_opts["output"],
    aspect: str = _edit_opts["aspect"],
    size: str = _edit_opts["size"],
    count: int = _edit_opts["count"],
    concurrency: Optional[int] = _edit_opts["concurrency"],
    retries: int = _edit_opts["retries"],
    hint_mode: Optional[HintMode] = _edit_opts["hint_mode"],
    quiet: bool = _edit_opts["quiet"],
    as_json: bool = _edit_opts["as_json"],
    verbose: bool = _edit_opts["verbose"],
) -> None:
    """Edit an existing image with a text prompt."""
    raise typer.Exit(
        _execute(
            prompt,
            source_path=image,
            model=model,
            output=output,
            aspect=aspect,
            size=size,
            count=count,
            concurrency=concurrency,
            retries=retries,
            hint_mode=hint_mode,
            quiet=quiet,
            as_json=as_json,
            verbose=verbose,
        )
    )


@app.command("setup")
def setup() -> None:
    """Configure the API key and default model."""
    out = Output()
    try:
        cfg = load_config()
    except ConfigError as e:
        out.error(str(e))
        raise typer.Exit(1)

    console.print(f"\n[bold]{APP_NAME} setup[/bold]\n")

    label = "Enter your Gemini API key"
    if cfg.api_key:
        label += f" (current: {mask_key(cfg.api_key)})"
    key = typer.prompt(label, default="", show_default=False, hide_input=True).strip()
    if key:
        cfg.api_key = key
    if not cfg.api_key:
        out.error("API key is required")
        raise typer.Exit(1)

    aliases = [variant.value for variant in MODEL_ALIASES]
    model = typer.prompt(
        f"Default model [{'/'.join(aliases)}] (current: {cfg.model})",
        default="",
        show_default=False,
    ).strip()
    if model:
        if model not in aliases:
            out.error(f"invalid model: {model} (must be {', '.join(aliases)})")
            raise typer.Exit(1)
        cfg.model = model

    try:
        path = save_config(cfg)
    except ConfigError as e:
        out.error(f"saving config: {e}")
        raise typer.Exit(1)
    out.success(f"Config saved to {path}")


@app.command("config")
def show_config() -> None:
    """Show the current configuration."""
    out = Output()
    try:
        cfg = load_config()
        settings = Settings()
    except (ConfigError, ValidationError) as e:
        out.error(str(e))
        raise typer.Exit(1)

    console.print(f"\n[bold]{APP_NAME} config[/bold]\n")
    console.print(f"  [bold]Config file:[/bold]  {config_path()}", highlight=False)
    if cfg.api_key:
        console.print(f"  [bold]API key:[/bold]      {mask_key(cfg.api_key)}", highlight=False)
    else:
        console.print("  [bold]API key:[/bold]      [yellow](not set)[/yellow]")
    console.print(f"  [bold]Model:[/bold]        {cfg.model}", highlight=False)

    if settings.gemini_api_key:
        console.print("\n  [yellow]NANOBANANA_GEMINI_API_KEY:[/yellow] set (overrides config)")
    elif settings.fallback_api_key:
        console.print("\n  [yellow]GEMINI_API_KEY:[/yellow] set (overrides config)")
    if settings.model:
        console.print(f"  [yellow]NANOBANANA_MODEL:[/yellow] {settings.model} (overrides config)", highlight=False)
    console.print()


@app.command("version")
def version() -> None:
    """Show version info."""
    typer.echo(f"{APP_NAME} {__version__} ({platform.system().lower()}/{platform.machine()})")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
