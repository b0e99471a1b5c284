"""aichat CLI: Typer + Rich terminal interface.

Commands: chat, set, use, delete, list.
The chat reply is rendered by the paced response renderer; everything
else is plain Rich output.
"""

from __future__ import annotations

import asyncio
import os
import sys

import typer
from rich.console import Console
from rich.table import Table

from aichat import __version__
from aichat.chat import build_render_config, completion
from aichat.config import ConfigStore, resolve_chat_profiles, resolve_settings
from aichat.errors import AichatError, ChatError, ConfigError
from aichat.keys import load_keys_env, mask_key, resolve_api_key
from aichat.logging_config import LOG_LEVEL_ENV, configure_logging, resolve_log_level
from aichat.providers import LiteLLMProvider
from aichat.schemas.config import AppConfig, ModelProfile, PromptProfile
from aichat.schemas.render import OutputUnit

console = Console()
err_console = Console(stderr=True)

# ── App and sub-apps ─────────────────────────────────────────────

app = typer.Typer(
    name="aichat",
    help="Chat with OpenAI-compatible models from the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

set_app = typer.Typer(
    name="set",
    help="Create or update a model or prompt configuration.",
    no_args_is_help=True,
)
app.add_typer(set_app, name="set")

use_app = typer.Typer(
    name="use",
    help="Select the default model or prompt configuration.",
    no_args_is_help=True,
)
app.add_typer(use_app, name="use")

delete_app = typer.Typer(
    name="delete",
    help="Delete a model or prompt configuration.",
    no_args_is_help=True,
)
app.add_typer(delete_app, name="delete")


# ── Version callback ───────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"aichat {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Paced, streamed chat replies in your terminal."""


# ── Helpers ──────────────────────────────────────────────────────


def _fail(message: str) -> typer.Exit:
    """Print a user-facing error and return the exit to raise."""
    err_console.print(f"[red]Error:[/red] {message}", highlight=False)
    return typer.Exit(1)


def _require_name(name: str, kind: str) -> str:
    name = name.strip()
    if not name:
        raise _fail(f"{kind} configuration name cannot be empty.")
    return name


def _read_input() -> str:
    """Read the message interactively: lines until an empty one.

    When stdin is not a terminal the whole stream is the message.
    """
    if not sys.stdin.isatty():
        return sys.stdin.read().strip()

    console.print("[dim]Enter your message (finish with an empty line):[/dim]")
    lines: list[str] = []
    while True:
        try:
            line = input()
        except EOFError:
            break
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines).strip()


# ── aichat chat ──────────────────────────────────────────────────


@app.command()
def chat(
    message: list[str] | None = typer.Argument(
        None, help="Message to send (read interactively when omitted)",
    ),
    model: str | None = typer.Option(
        None, "--model", "-m", help="Model configuration to use",
    ),
    prompt: str | None = typer.Option(
        None, "--prompt", "-p", help="Prompt configuration to use",
    ),
    pure: bool = typer.Option(
        False, "--pure", help="Print only the reply: no status line, no styling",
    ),
    disable_stream: bool = typer.Option(
        False, "--disable-stream", help="Request the whole reply and print it at once",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Show debug logs",
    ),
    type_speed: float | None = typer.Option(
        None, "--type-speed", help="Output rate in units per second",
    ),
    unit: OutputUnit | None = typer.Option(
        None, "--unit", case_sensitive=False, help="Pacing unit: word or character",
    ),
) -> None:
    """Send a message and render the reply."""
    store = ConfigStore()
    load_keys_env(store.config_dir)

    try:
        file_config = store.load()
        settings = resolve_settings(
            file_config,
            model=model,
            prompt=prompt,
            pure=pure,
            disable_stream=disable_stream,
            verbose=verbose,
            type_speed=type_speed,
            output_unit=unit,
        )
        model_profile, prompt_profile = resolve_chat_profiles(file_config, settings)
    except ConfigError as e:
        raise _fail(str(e)) from None

    configure_logging(resolve_log_level(settings.verbose, os.environ.get(LOG_LEVEL_ENV)))

    if settings.verbose and not settings.pure:
        console.print(
            f"[dim]Using model: {settings.model}({model_profile.model_name}) "
            f"prompt: {settings.prompt}[/dim]",
            highlight=False,
        )

    user_input = " ".join(message).strip() if message else _read_input()
    if not user_input:
        raise _fail("No input provided.")

    provider = LiteLLMProvider(model_profile, api_key=resolve_api_key(model_profile))
    try:
        asyncio.run(completion(
            user_input,
            provider=provider,
            system_prompt=prompt_profile.content,
            render_config=build_render_config(settings, model_profile),
            console=console,
            error_console=Console(stderr=True, no_color=True) if settings.pure else err_console,
        ))
    except ChatError:
        # Transport errors were already printed after the render finished
        raise typer.Exit(1) from None
    except AichatError as e:
        raise _fail(str(e)) from None


# ── aichat set ───────────────────────────────────────────────────


@set_app.command("model")
def set_model(
    name: str = typer.Argument(..., help="Model configuration name"),
    base_url: str | None = typer.Option(None, "--base-url", help="API base URL"),
    model_name: str | None = typer.Option(None, "--model-name", help="Model identifier"),
    api_key: str | None = typer.Option(None, "--api-key", help="API key"),
    temperature: float | None = typer.Option(
        None, "--temperature", min=0.0, max=2.0, help="Sampling temperature",
    ),
) -> None:
    """Create a model configuration, or update the given fields of one."""
    name = _require_name(name, "Model")
    profile = ModelProfile(
        model_name=model_name,
        base_url=base_url,
        api_key=api_key,
        temperature=temperature,
    )
    try:
        ConfigStore().set_model(name, profile)
    except ConfigError as e:
        raise _fail(str(e)) from None
    console.print(f"[green]Model configuration '{name}' saved.[/green]")


@set_app.command("prompt")
def set_prompt(
    name: str = typer.Argument(..., help="Prompt configuration name"),
    content: str = typer.Option(..., "--content", "-c", help="System prompt text"),
) -> None:
    """Create or replace a prompt configuration."""
    name = _require_name(name, "Prompt")
    try:
        ConfigStore().set_prompt(name, PromptProfile(content=content))
    except ConfigError as e:
        raise _fail(str(e)) from None
    console.print(f"[green]Prompt configuration '{name}' saved.[/green]")


# ── aichat use / delete ──────────────────────────────────────────


@use_app.command("model")
def use_model(name: str = typer.Argument(..., help="Model configuration name")) -> None:
    """Make a model configuration the default."""
    try:
        ConfigStore().use_model(name)
    except ConfigError as e:
        raise _fail(str(e)) from None
    console.print(f"Default model set to [bold cyan]{name}[/bold cyan].")


@use_app.command("prompt")
def use_prompt(name: str = typer.Argument(..., help="Prompt configuration name")) -> None:
    """Make a prompt configuration the default."""
    try:
        ConfigStore().use_prompt(name)
    except ConfigError as e:
        raise _fail(str(e)) from None
    console.print(f"Default prompt set to [bold cyan]{name}[/bold cyan].")


@delete_app.command("model")
def delete_model(name: str = typer.Argument(..., help="Model configuration name")) -> None:
    """Delete a model configuration."""
    try:
        ConfigStore().delete_model(name)
    except ConfigError as e:
        raise _fail(str(e)) from None
    console.print(f"Model configuration '{name}' deleted.")


@delete_app.command("prompt")
def delete_prompt(name: str = typer.Argument(..., help="Prompt configuration name")) -> None:
    """Delete a prompt configuration."""
    try:
        ConfigStore().delete_prompt(name)
    except ConfigError as e:
        raise _fail(str(e)) from None
    console.print(f"Prompt configuration '{name}' deleted.")


# ── aichat list ──────────────────────────────────────────────────


def _models_table(config: AppConfig) -> Table:
    table = Table(title="Model Configurations", show_lines=True)
    table.add_column("Name", style="bold cyan")
    table.add_column("Model")
    table.add_column("Base URL", style="dim")
    table.add_column("API Key")
    table.add_column("Temp", justify="right")

    for name, profile in sorted(config.models.items()):
        marker = " (default)" if name == config.default_model else ""
        table.add_row(
            f"{name}{marker}",
            profile.model_name or "-",
            profile.base_url or "-",
            mask_key(profile.api_key or "") or "-",
            f"{profile.temperature:.2f}" if profile.temperature is not None else "-",
        )
    return table


def _prompts_table(config: AppConfig) -> Table:
    table = Table(title="Prompt Configurations", show_lines=True)
    table.add_column("Name", style="bold cyan")
    table.add_column("Content")

    for name, profile in sorted(config.prompts.items()):
        marker = " (default)" if name == config.default_prompt else ""
        content = profile.content.strip().replace("\n", " ")
        if len(content) > 60:
            content = content[:57] + "..."
        table.add_row(f"{name}{marker}", content or "-")
    return table


@app.command("list")
def list_configs(
    target: str = typer.Argument("all", help="What to list: models, prompts or all"),
) -> None:
    """Show stored model and prompt configurations."""
    target = target.lower()
    if target not in ("models", "prompts", "all"):
        raise _fail(f"Unknown list target '{target}'. Use models, prompts or all.")

    try:
        config = ConfigStore().load()
    except ConfigError as e:
        raise _fail(str(e)) from None

    if target in ("models", "all"):
        console.print(_models_table(config))
    if target in ("prompts", "all"):
        console.print(_prompts_table(config))
