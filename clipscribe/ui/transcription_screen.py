"""Interactive terminal screen for selecting, recording and transcribing audio."""

import asyncio
import logging
from typing import Optional

import click
from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..errors import ClipscribeError, ConfigurationError
from ..models.events import RecorderTickEvent, SessionEvent
from ..models.session import SessionState
from ..services.publisher import RECORDER_TICK_TOPIC, SESSION_TOPIC
from ..services.session_controller import SessionController

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands:\n"
    "  [bold green]o <path>[/bold green] - Open an audio file (MP3, WAV, WEBM, OGG, M4A)\n"
    "  [bold red]r[/bold red] - Start/stop recording\n"
    "  [bold blue]t[/bold blue] - Transcribe audio\n"
    "  [bold]e[/bold] - Edit transcription\n"
    "  [bold]c[/bold] - Copy text\n"
    "  [bold yellow]x[/bold yellow] - Clear\n"
    "  [bold]s[/bold] - Show status\n"
    "  [bold red]q[/bold red] - Quit"
)


class TranscriptionScreen:
    """Line-oriented terminal interface driving a SessionController."""

    def __init__(self, controller: SessionController, console: Optional[Console] = None):
        self.controller = controller
        self.console = console or Console()
        self.running = False

    def on_session_event(self, event: SessionEvent) -> None:
        """Echo state changes published by the controller."""
        if event.event_type == SessionState.PROCESSING.value:
            self.console.print("⏳ Transcribing...", style="blue")
        elif event.event_type == SessionState.ERROR.value:
            self.console.print(f"❌ Error: {event.metadata.get('error')}", style="bold red")

    def on_recorder_tick(self, event: RecorderTickEvent) -> None:
        """Show the elapsed recording time once per second."""
        self.console.print(f"🔴 Recording {event.elapsed_seconds}s", style="red")

    def subscribe(self) -> None:
        pub.subscribe(self.on_session_event, SESSION_TOPIC)
        pub.subscribe(self.on_recorder_tick, RECORDER_TICK_TOPIC)

    def unsubscribe(self) -> None:
        pub.unsubscribe(self.on_session_event, SESSION_TOPIC)
        pub.unsubscribe(self.on_recorder_tick, RECORDER_TICK_TOPIC)

    def show_status(self) -> None:
        """Show current status."""
        context = self.controller.context
        payload = self.controller.payload

        self.console.rule("🎙️  ClipScribe")
        if self.controller.is_recording:
            stats = self.controller.recorder.get_recording_stats()
            self.console.print(f"🔴 RECORDING {stats.elapsed_seconds}s", style="bold red")
        if payload:
            self.console.print(f"File Selected: [cyan]{payload.source_label}[/cyan] "
                               f"({payload.size_mb:.2f} MB, {payload.mime_type})")
            if self.controller.playback_uri:
                self.console.print(f"Playback: {self.controller.playback_uri}", style="dim")
        elif not self.controller.is_recording:
            self.console.print("No audio selected. Open a file or record a clip.", style="dim")

        if not self.controller.client.is_configured:
            self.console.print(f"⚠️  {self.controller.client.credential_error}", style="yellow")
        if context.recorder_error:
            self.console.print(f"❌ {context.recorder_error}", style="red")
        if context.state is SessionState.ERROR and context.error_message:
            self.console.print(f"Error: {context.error_message}", style="bold red")

        if context.transcript:
            title = "Transcription (edited)" if context.transcript.is_edited else "Transcription"
            if context.copied:
                title += " - Copied!"
            self.console.print(Panel(Text(context.transcript.text), title=title))
        elif context.state is SessionState.IDLE and not payload:
            self.console.print("Your transcribed text will appear here.", style="dim")

    async def handle_command(self, line: str) -> bool:
        """Run one command. Returns False when the user quits."""
        command, _, argument = line.strip().partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command == "q":
            return False
        if command == "o":
            self._open(argument)
        elif command == "r":
            self._toggle_recording()
        elif command == "t":
            await self._transcribe()
        elif command == "e":
            await self._edit()
        elif command == "c":
            await self._copy()
        elif command == "x":
            self.controller.clear()
            self.console.print("🔄 Session cleared", style="bold blue")
        elif command == "s":
            self.show_status()
        elif command in ("h", "?"):
            self.console.print(HELP_TEXT)
        elif command:
            self.console.print(f"Unknown command: {command}", style="red")
        return True

    def _open(self, path: str) -> None:
        if not path:
            self.console.print("Usage: o <path>", style="red")
            return
        try:
            payload = self.controller.select_file(path)
        except (ClipscribeError, OSError) as e:
            self.console.print(f"❌ Could not open file: {e}", style="bold red")
            return
        self.console.print(f"✅ Selected {payload.source_label} ({payload.size_mb:.2f} MB)", style="green")

    def _toggle_recording(self) -> None:
        was_recording = self.controller.is_recording
        payload = self.controller.toggle_recording()
        if payload is not None:
            self.console.print(f"⏹️  Recording stopped ({payload.size_bytes} bytes)", style="bold yellow")
        elif self.controller.context.recorder_error:
            self.console.print(f"❌ {self.controller.context.recorder_error}", style="bold red")
        elif not was_recording:
            self.console.print("🔴 Recording... press r again to stop", style="bold red")

    async def _transcribe(self) -> None:
        if self.controller.payload is None:
            self.console.print("Select or record audio first.", style="yellow")
            return
        try:
            result = await self.controller.submit()
        except ConfigurationError as e:
            self.console.print(f"❌ {e}", style="bold red")
            return
        if result is not None and result.succeeded:
            self.show_status()

    async def _edit(self) -> None:
        if not self.controller.context.transcript:
            self.console.print("Nothing to edit yet.", style="yellow")
            return
        loop = asyncio.get_running_loop()
        edited = await loop.run_in_executor(None, click.edit, self.controller.transcript)
        if edited is None:
            self.console.print("Edit cancelled, transcription unchanged.", style="dim")
            return
        self.controller.edit_transcript(edited.rstrip("\n"))
        self.show_status()

    async def _copy(self) -> None:
        if not self.controller.context.transcript:
            self.console.print("Nothing to copy yet.", style="yellow")
            return
        if await self.controller.copy_to_clipboard():
            self.console.print("📋 Copied!", style="bold green")
        else:
            self.console.print("Could not copy text (see log for details).", style="yellow")

    async def run(self) -> None:
        """Run the interactive loop until the user quits."""
        self.running = True
        self.subscribe()
        loop = asyncio.get_running_loop()

        self.console.print("🎙️  Audio File Transcriber", style="bold green")
        self.console.print("Select an audio file or record a clip and let Gemini transcribe it.")
        self.console.print(HELP_TEXT)
        self.show_status()

        try:
            while self.running:
                line = await loop.run_in_executor(None, self.console.input, "> ")
                self.running = await self.handle_command(line)
        except (KeyboardInterrupt, EOFError):
            self.running = False
        finally:
            self.unsubscribe()
            self.controller.close()
            self.console.print("\n👋 ClipScribe session ended", style="bold blue")
            logger.info("TranscriptionScreen closed")
