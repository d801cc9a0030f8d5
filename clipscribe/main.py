"""Main application entry point for ClipScribe."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from . import __version__
from .config import ClipscribeConfig
from .errors import ClipscribeError, ConfigurationError
from .services.session_controller import SessionController
from .ui.transcription_screen import TranscriptionScreen

logger = logging.getLogger(__name__)


class App:
    """Builds the session controller from configuration and runs one of the modes."""

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None,
                 reformat: Optional[bool] = None):
        self.config = ClipscribeConfig(config_path)
        if reformat is not None:
            self.config.set('transcription.reformat', reformat)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        self.console = Console()
        self.controller = SessionController.from_config(self.config)

    async def transcribe_once(self, audio_file: Optional[str], record_seconds: Optional[int],
                              copy: bool = False) -> int:
        """Transcribe a file or a fixed-length recording and print the text.

        Returns:
            Process exit status
        """
        try:
            if audio_file:
                self.controller.select_file(audio_file)
            else:
                if not await self._record(record_seconds):
                    return 1

            with self.console.status("Transcribing..."):
                result = await self.controller.submit()

            if result is None or not result.succeeded:
                message = self.controller.context.error_message or "Transcription did not complete"
                self.console.print(f"❌ {message}", style="bold red")
                return 1

            print(self.controller.transcript)
            if copy:
                if await self.controller.copy_to_clipboard():
                    self.console.print("📋 Copied to clipboard", style="green")
                else:
                    self.console.print("⚠️  Could not copy to clipboard", style="yellow")
            return 0
        except ConfigurationError as e:
            self.console.print(f"❌ Configuration error: {e}", style="bold red")
            return 1
        except (ClipscribeError, OSError) as e:
            self.console.print(f"❌ {e}", style="bold red")
            return 1
        finally:
            self.controller.close()

    async def _record(self, seconds: int) -> bool:
        self.controller.toggle_recording()
        if not self.controller.is_recording:
            self.console.print(f"❌ {self.controller.context.recorder_error}", style="bold red")
            return False
        with self.console.status(f"Recording for {seconds}s..."):
            await asyncio.sleep(seconds)
        self.controller.stop_recording()
        return self.controller.payload is not None

    async def interactive(self) -> int:
        await TranscriptionScreen(self.controller, self.console).run()
        return 0


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path')
    console_output = config.get('logging.console_output', True)

    handlers = []

    # File handler - always write to file
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("ClipScribe application starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def main() -> None:
    """Main entry point for ClipScribe application."""
    parser = argparse.ArgumentParser(
        description="ClipScribe - transcribe audio clips with Gemini",
        epilog="Without AUDIO_FILE or --record, starts the interactive screen."
    )

    parser.add_argument(
        "audio_file",
        nargs="?",
        help="Audio file to transcribe (mp3, wav, webm, ogg, m4a)"
    )

    parser.add_argument(
        "--record",
        type=int,
        metavar="SECONDS",
        help="Record from the microphone for SECONDS and transcribe the clip"
    )

    parser.add_argument(
        "--copy",
        action="store_true",
        help="Copy the transcription to the clipboard"
    )

    parser.add_argument(
        "--no-format",
        action="store_true",
        help="Skip the readability reformatting pass"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: ./clipscribe.yaml if present)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ClipScribe v{__version__}"
    )

    args = parser.parse_args()
    if args.audio_file and args.record:
        parser.error("give either AUDIO_FILE or --record, not both")
    if args.record is not None and args.record <= 0:
        parser.error("--record must be a positive number of seconds")

    try:
        app = App(args.config, args.log_level, reformat=False if args.no_format else None)
        if args.audio_file or args.record:
            status = asyncio.run(app.transcribe_once(args.audio_file, args.record, copy=args.copy))
        else:
            status = asyncio.run(app.interactive())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        status = 130
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        status = 1
    sys.exit(status)


if __name__ == "__main__":
    main()
