"""Command-Line Interface handler for whispersub."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import AppConfig, SUPPORTED_FORMATS, build_config
from .log_setup import DEFAULT_ERROR_LOG, setup_logging, write_error_log
from .media import MediaTool
from .pipeline import SubtitleGenerator
from .text_extractor import srt_file_to_txt
from .transcriber import OpenAITranscriber
from .translator import OpenAITranslator, translate_srt_file
from .exceptions import ArgumentError, WhisperSubError
from .utils import extension_of

logger = logging.getLogger(__name__) # Get logger for this module

MEDIA_EXTENSIONS = ('.mp4', '.avi', '.mov', '.mp3', '.wav', '.flac')
SUBTITLE_EXTENSIONS = ('.srt',)

class CLIHandler:
    """Parses arguments and dispatches to the subtitle, translate and srt-to-txt commands."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        common = argparse.ArgumentParser(add_help=False)
        common.add_argument(
            "-c", "--config",
            default=None,
            help="Path to a YAML configuration file (default: whispersub.yaml if present)."
        )
        common.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )

        parser = argparse.ArgumentParser(
            prog="whispersub",
            description="Generate, translate and convert subtitles with the OpenAI API.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        subparsers = parser.add_subparsers(dest="command", required=True)

        subtitle = subparsers.add_parser(
            "subtitle", parents=[common],
            help="Transcribe an audio/video file into subtitles.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        subtitle.add_argument("path", help=f"Media file ({' '.join(MEDIA_EXTENSIONS)}).")
        subtitle.add_argument(
            "--format",
            default=None, # Default taken from SUBTITLE_FORMAT / config
            help=f"Comma-separated output formats out of: {','.join(SUPPORTED_FORMATS)}."
        )
        subtitle.add_argument(
            "--log-spawn",
            action="store_true",
            help="Show ffmpeg/ffprobe output on the console."
        )

        translate = subparsers.add_parser(
            "translate", parents=[common],
            help="Translate an SRT file.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        translate.add_argument("path", help="SRT file to translate.")
        translate.add_argument(
            "--from", dest="translate_from", default=None,
            help="Source language (overrides SUBTITLE_LANGUAGE_TRANSLATE_FROM)."
        )
        translate.add_argument(
            "--to", dest="translate_to", default=None,
            help="Target language (overrides SUBTITLE_LANGUAGE_TRANSLATE_TO)."
        )

        to_txt = subparsers.add_parser(
            "srt-to-txt", parents=[common],
            help="Write the text of an SRT file to a .txt file.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        to_txt.add_argument("path", help="SRT file to convert.")

        return parser

    def _validate_path(self, path: str, extensions) -> None:
        if not path:
            raise ArgumentError("Please provide an input file path.")
        if extension_of(path) not in extensions:
            raise ArgumentError(f"Unsupported file type {path!r}, expected one of: {' '.join(extensions)}")
        if not os.path.isfile(path):
            raise ArgumentError(f"Input file not found or is not a file: {path}")

    def _overrides(self, args: argparse.Namespace) -> dict:
        overrides = {}
        if args.command == "subtitle":
            overrides['formats'] = args.format
            overrides['log_spawn'] = True if args.log_spawn else None
        elif args.command == "translate":
            overrides['translate_from'] = args.translate_from
            overrides['translate_to'] = args.translate_to
        return overrides

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, runs the command and exits."""
        args = self.parser.parse_args(argv)

        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        # Console only until the configuration tells us where the log file goes
        setup_logging(log_level=log_level, log_dir=None)

        error_log = DEFAULT_ERROR_LOG
        try:
            if args.command == "subtitle":
                self._validate_path(args.path, MEDIA_EXTENSIONS)
            else:
                self._validate_path(args.path, SUBTITLE_EXTENSIONS)

            config = build_config(args.config, overrides=self._overrides(args))
            error_log = config.error_log_file
            setup_logging(log_level=log_level, log_dir=config.log_dir, log_file=config.log_file)

            self._dispatch(args, config)
            logger.info("whispersub finished successfully.")
            sys.exit(0)

        except ArgumentError as e:
            # User input problems are reported, not logged to the error file
            sys.stderr.write(f"{e}\n")
            sys.exit(1)
        except WhisperSubError as e:
            logger.error(f"A whispersub error occurred: {e}")
            write_error_log(e, error_log)
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            write_error_log(e, error_log)
            sys.exit(2) # Use a different exit code for unexpected crashes

    def _dispatch(self, args: argparse.Namespace, config: AppConfig) -> None:
        if args.command == "subtitle":
            api_key = config.require_api_key()
            generator = SubtitleGenerator(
                config=config,
                media_tool=MediaTool(
                    ffmpeg_path=config.ffmpeg_path,
                    ffprobe_path=config.ffprobe_path,
                    log_spawn=config.log_spawn
                ),
                transcriber=OpenAITranscriber(api_key=api_key, model_name=config.transcription_model),
            )
            generator.generate(args.path)

        elif args.command == "translate":
            if not config.translate_from or not config.translate_to:
                raise ArgumentError(
                    "Both source and target languages are required: use --from/--to or "
                    "SUBTITLE_LANGUAGE_TRANSLATE_FROM/SUBTITLE_LANGUAGE_TRANSLATE_TO."
                )
            api_key = config.require_api_key()
            translator = OpenAITranslator(api_key=api_key, model_name=config.translation_model)
            logger.info(f"Language from: {config.translate_from}, language to: {config.translate_to}")
            translate_srt_file(args.path, translator, config.translate_from, config.translate_to)

        elif args.command == "srt-to-txt":
            srt_file_to_txt(args.path)


def main() -> None:
    CLIHandler().run()
