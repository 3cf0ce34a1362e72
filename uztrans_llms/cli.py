"""
Command-line interface for UzTrans-LLMs.

Provides commands for:
- Translating Uzbek text to Russian or English
- Browsing, summarizing and clearing the translation history
- Managing API keys and default preferences
- System information

Usage:
    uztrans translate "Salom, yaxshimisiz?" --to ru --tone natural
    uztrans history list --limit 10
    uztrans keys set gemini
    uztrans settings set --to en --tone formal
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from getpass import getpass
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from uztrans_llms import __version__
from uztrans_llms.config import APP_NAME, SETTINGS_FILE, STORAGE_FILE, AppSettings
from uztrans_llms.history import HistoryStore
from uztrans_llms.keys import SERVICES, KeyManager, service_for_backend
from uztrans_llms.models import TargetLanguage, Tone
from uztrans_llms.pipeline import AppStatus, TranslationOrchestrator
from uztrans_llms.storage import JsonFileStorage, KeyValueStorage, MemoryStorage

app = typer.Typer(
    name="uztrans",
    help="UzTrans-LLMs: Uzbek to Russian/English translation with hosted LLMs",
    add_completion=False,
)
console = Console()

SAMPLE_TEXT = "Salom, yaxshimisiz? Ishlaringiz qanday ketmoqda?"


def version_callback(value: bool):
    if value:
        console.print(f"{APP_NAME} v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _key_manager() -> KeyManager:
    return KeyManager()


def _storage() -> KeyValueStorage:
    return JsonFileStorage(STORAGE_FILE)


def _load_settings(
    target: Optional[str] = None,
    tone: Optional[str] = None,
    backend: Optional[str] = None,
    model: Optional[str] = None,
) -> AppSettings:
    """Saved preferences, overridden by command-line options, plus the credential."""
    settings = AppSettings.load(SETTINGS_FILE)
    try:
        if target:
            settings.target = TargetLanguage.parse(target)
        if tone:
            settings.tone = Tone.parse(tone)
    except ValueError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(2)
    if backend:
        settings.backend = backend
    if model:
        settings.model = model

    service = service_for_backend(settings.backend)
    if service:
        settings.api_key = _key_manager().get_key(service)
    return settings


def _format_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """UzTrans-LLMs: translate Uzbek text with hosted language models."""
    configure_logging(verbose)


async def _run_translation(
    orchestrator: TranslationOrchestrator,
    text: str,
):
    try:
        with console.status("[bold cyan]Translating...[/]"):
            return await orchestrator.submit(text)
    finally:
        await orchestrator.aclose()


@app.command()
def translate(
    text: str = typer.Argument(..., help="Uzbek text to translate"),
    target: Optional[str] = typer.Option(None, "--to", "-t", help="Target language: ru or en"),
    tone: Optional[str] = typer.Option(None, "--tone", help="Tone: natural, formal or slang"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Backend: gemini, openai or demo"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name for LLM backends"),
    no_history: bool = typer.Option(False, "--no-history", help="Do not record this translation"),
):
    """Translate Uzbek text."""
    settings = _load_settings(target, tone, backend, model)
    storage = MemoryStorage() if no_history else _storage()

    try:
        orchestrator = TranslationOrchestrator.from_settings(settings, storage)
    except ValueError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(2)

    state = asyncio.run(_run_translation(orchestrator, text))

    if state.status is AppStatus.SUCCESS:
        console.print(state.translated_text, highlight=False, markup=False)
        return

    if state.translated_text:
        console.print(state.translated_text, highlight=False, markup=False)
    console.print(f"[red]Error:[/] {state.message}")
    raise typer.Exit(1)


@app.command()
def history(
    action: str = typer.Argument("list", help="Action: list, stats, clear"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of records to show"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Clear without asking"),
):
    """Show, summarize or clear the translation history.

    Examples:
        uztrans history                 # Latest translations
        uztrans history stats           # Totals per language and tone
        uztrans history clear --yes     # Delete everything
    """
    store = HistoryStore(_storage())
    store.load()

    if action == "list":
        if not store.records:
            console.print("[yellow]No translations yet.[/]")
            return

        table = Table(title=f"Translation History ({len(store)} records)")
        table.add_column("When", style="dim")
        table.add_column("Pair", style="cyan")
        table.add_column("Tone", style="magenta")
        table.add_column("Original")
        table.add_column("Translation", style="green")

        for record in store.records[:limit]:
            table.add_row(
                _format_time(record.timestamp),
                f"{record.source} → {record.target.value}",
                record.tone.value,
                record.original,
                record.translated,
            )
        console.print(table)

    elif action == "stats":
        stats = store.stats()
        table = Table(title="History Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Translations", str(stats.total))
        table.add_row("Source characters", str(stats.characters))
        for target_code, count in sorted(stats.by_target.items()):
            table.add_row(f"UZ → {target_code}", str(count))
        for tone_name, count in sorted(stats.by_tone.items()):
            table.add_row(f"Tone: {tone_name}", str(count))
        if stats.last_timestamp is not None:
            table.add_row("Last translation", _format_time(stats.last_timestamp))
        console.print(table)

    elif action == "clear":
        if not yes and not typer.confirm(f"Delete all {len(store)} stored translations?"):
            raise typer.Exit(0)
        store.clear()
        console.print("[green]✓[/] History cleared")

    else:
        console.print(f"[red]Error:[/] Unknown action '{action}'")
        console.print("Available actions: list, stats, clear")
        raise typer.Exit(1)


@app.command()
def keys(
    action: str = typer.Argument("list", help="Action: list, set, status, delete"),
    service: Optional[str] = typer.Argument(None, help="Service name (gemini, openai)"),
):
    """Manage API keys.

    Examples:
        uztrans keys list              # List all keys
        uztrans keys set gemini        # Set the Gemini key
        uztrans keys status gemini     # Check the Gemini key
        uztrans keys delete gemini     # Delete the Gemini key
    """
    km = _key_manager()

    if action == "list":
        table = Table(title="API Keys Status")
        table.add_column("Service", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Source", style="yellow")
        table.add_column("Value", style="dim")

        for key_info in km.list_keys():
            status = "✓ Set" if key_info.is_set else "✗ Not set"
            status_color = "green" if key_info.is_set else "red"
            table.add_row(
                key_info.service,
                f"[{status_color}]{status}[/]",
                key_info.source,
                key_info.masked_value if key_info.is_set else "-",
            )

        console.print(table)
        console.print("\n[dim]Priority: env > keychain > config file[/]")
        return

    if not service:
        console.print("[red]Error:[/] Service name required")
        console.print(f"Available services: {', '.join(SERVICES)}")
        raise typer.Exit(1)

    if action == "set":
        key = getpass(f"Enter API key for {service}: ").strip()
        if not key:
            console.print("[red]Error:[/] Key cannot be empty")
            raise typer.Exit(1)

        storage = km.set_key(service, key)
        console.print(f"[green]✓[/] API key for {service} saved to {storage}")
        if storage == "config":
            console.print(f"[yellow]Note:[/] Key stored in local file ({km.config_file})")

    elif action == "status":
        key_info = km.get_key_info(service)
        if key_info.is_set:
            console.print(f"[green]✓[/] API key for {service} is set")
            console.print(f"    Source: {key_info.source}")
            console.print(f"    Value: {key_info.masked_value}")
        else:
            env_var = SERVICES.get(service, (f"{service.upper()}_API_KEY",))[0]
            console.print(f"[red]✗[/] No API key found for {service}")
            console.print(f"  Option 1: [cyan]uztrans keys set {service}[/]")
            console.print(f"  Option 2: [cyan]export {env_var}='your-key-here'[/]")

    elif action == "delete":
        if km.delete_key(service):
            console.print(f"[green]✓[/] API key for {service} deleted")
        else:
            console.print(f"[yellow]⚠[/] No key found to delete for {service}")

    else:
        console.print(f"[red]Error:[/] Unknown action '{action}'")
        console.print("Available actions: list, set, status, delete")
        raise typer.Exit(1)


@app.command("settings")
def settings_command(
    action: str = typer.Argument("show", help="Action: show, set"),
    target: Optional[str] = typer.Option(None, "--to", "-t", help="Default target language: ru or en"),
    tone: Optional[str] = typer.Option(None, "--tone", help="Default tone"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="Default backend"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Default model"),
):
    """Show or change default preferences."""
    settings = AppSettings.load(SETTINGS_FILE)

    if action == "set":
        try:
            if target:
                settings.target = TargetLanguage.parse(target)
            if tone:
                settings.tone = Tone.parse(tone)
        except ValueError as e:
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(2)
        if backend:
            settings.backend = backend
        if model:
            settings.model = model
        settings.save(SETTINGS_FILE)
        console.print(f"[green]✓[/] Settings saved to {SETTINGS_FILE}")
    elif action != "show":
        console.print(f"[red]Error:[/] Unknown action '{action}'")
        console.print("Available actions: show, set")
        raise typer.Exit(1)

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Target language", f"{settings.target.display_name} ({settings.target.value})")
    table.add_row("Tone", settings.tone.value)
    table.add_row("Backend", settings.backend)
    table.add_row("Model", settings.model or "(backend default)")
    table.add_row("Temperature", str(settings.temperature))
    table.add_row("Timeout (s)", str(settings.timeout))
    console.print(table)


@app.command()
def demo(
    target: str = typer.Option("ru", "--to", "-t", help="Target language: ru or en"),
):
    """Run the pipeline offline with the demo backend (no API key needed)."""
    console.print(f"[bold]{APP_NAME} Demo[/]\n")
    console.print("[dim]Source text:[/]")
    console.print(SAMPLE_TEXT)
    console.print()

    settings = _load_settings(target=target, backend="demo")
    orchestrator = TranslationOrchestrator.from_settings(settings, MemoryStorage())
    state = asyncio.run(_run_translation(orchestrator, SAMPLE_TEXT))

    console.print("[bold green]Translation result:[/]")
    console.print(state.translated_text, highlight=False, markup=False)
    console.print(f"\n[dim]History records:[/] {len(orchestrator.history)}")


@app.command()
def info():
    """Show version, configuration and key status."""
    settings = AppSettings.load(SETTINGS_FILE)
    console.print(f"[bold]{APP_NAME} v{__version__}[/]\n")

    table = Table(title="Configuration")
    table.add_column("Item", style="cyan")
    table.add_column("Value")
    table.add_row("Mode", f"Uzbek → {settings.target.display_name}")
    table.add_row("Backend", settings.backend)
    table.add_row("Storage", str(STORAGE_FILE))
    table.add_row("Settings", str(SETTINGS_FILE))

    service = service_for_backend(settings.backend)
    if service:
        key_info = _key_manager().get_key_info(service)
        api_status = "[green]Configured[/]" if key_info.is_set else "[red]Missing API key[/]"
    else:
        api_status = "[dim]Not required[/]"
    table.add_row("API status", api_status)
    console.print(table)


if __name__ == "__main__":
    app()
