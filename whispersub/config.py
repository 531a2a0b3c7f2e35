"""Builds the application configuration from YAML, the environment and CLI overrides."""

import yaml
import os
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

from .exceptions import ArgumentError, ConfigurationError
from .planner import MEGABYTE
from .transcriber import DEFAULT_TRANSCRIPTION_MODEL
from .translator import DEFAULT_TRANSLATION_MODEL

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('srt', 'txt')
DEFAULT_CONFIG_FILE = 'whispersub.yaml'

# Environment variable -> AppConfig field
ENVIRONMENT_KEYS = {
    'OPENAI_API_KEY': 'openai_api_key',
    'SUBTITLE_FORMAT': 'formats',
    'SUBTITLE_LANGUAGE': 'language',
    'SUBTITLE_LANGUAGE_TRANSLATE_FROM': 'translate_from',
    'SUBTITLE_LANGUAGE_TRANSLATE_TO': 'translate_to',
    'SUBTITLE_PROMPT_FILE': 'prompt_file',
}


@dataclass
class AppConfig:
    """All settings for one run. Built once at startup and passed down explicitly."""
    openai_api_key: Optional[str] = None
    formats: List[str] = field(default_factory=lambda: ['srt'])
    language: Optional[str] = None
    translate_from: Optional[str] = None
    translate_to: Optional[str] = None
    prompt_file: str = 'prompt.txt'
    chunk_size_mb: float = 24
    max_concurrency: int = 1
    format_concurrency: int = 1
    transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL
    translation_model: str = DEFAULT_TRANSLATION_MODEL
    ffmpeg_path: Optional[str] = None
    ffprobe_path: Optional[str] = None
    log_spawn: bool = False
    log_dir: str = 'logs'
    log_file: str = 'whispersub.log'
    error_log_file: str = 'whisper-subtitle-error.log'
    strip_trailing_period: bool = True
    keep_intermediate_audio: bool = False

    @property
    def chunk_byte_budget(self) -> int:
        return int(self.chunk_size_mb * MEGABYTE)

    def require_api_key(self) -> str:
        """Returns the OpenAI API key, raising ConfigurationError when it is unset."""
        if not self.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set. Add it to the environment or a .env file.")
        return self.openai_api_key

    def read_prompt(self) -> Optional[str]:
        """Contents of the transcription prompt file, or None if there is no such file."""
        if not self.prompt_file or not os.path.isfile(self.prompt_file):
            return None
        try:
            with open(self.prompt_file, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise ConfigurationError(f"Could not read prompt file {self.prompt_file}: {e}") from e


def parse_formats(value: Any) -> List[str]:
    """
    Normalizes a format list given as 'srt,txt' or ['srt', 'txt'].

    Raises:
        ArgumentError: If the list is empty or names an unsupported format.
    """
    if isinstance(value, str):
        items = value.split(',')
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        raise ArgumentError(f"Invalid format list: {value!r}")

    formats: List[str] = []
    for item in items:
        fmt = str(item).strip().lower()
        if not fmt:
            continue
        if fmt not in SUPPORTED_FORMATS:
            raise ArgumentError(
                f"Format {fmt!r} is invalid, supported formats: {', '.join(SUPPORTED_FORMATS)}"
            )
        if fmt not in formats:
            formats.append(fmt)
    if not formats:
        raise ArgumentError(f"No output format given, supported formats: {', '.join(SUPPORTED_FORMATS)}")
    return formats


class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.
            An empty file yields an empty dictionary.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except OSError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config


def _apply(settings: Dict[str, Any], values: Mapping[str, Any], source: str) -> None:
    known = {f.name for f in fields(AppConfig)}
    for key, value in values.items():
        if key not in known:
            logger.warning(f"Ignoring unknown configuration key {key!r} from {source}")
            continue
        if value is None:
            continue
        settings[key] = value


def build_config(
    config_path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    load_env_file: bool = True
) -> AppConfig:
    """
    Builds the AppConfig for a run.

    Precedence, lowest first: dataclass defaults, YAML file, environment,
    ``overrides`` (CLI flags). ``None`` values never override.

    Args:
        config_path: YAML file to load. If None, ``whispersub.yaml`` in the
                     working directory is used when it exists.
        overrides: Values from the command line.
        environ: Environment mapping; defaults to ``os.environ``.
        load_env_file: Load a ``.env`` file into the environment first.

    Raises:
        ConfigurationError: If the YAML file is missing, unreadable or invalid.
        ArgumentError: If the requested formats are not supported.
    """
    if load_env_file and environ is None:
        load_dotenv()
    environ = os.environ if environ is None else environ

    settings: Dict[str, Any] = {}

    if config_path is None and os.path.isfile(DEFAULT_CONFIG_FILE):
        config_path = DEFAULT_CONFIG_FILE
    if config_path is not None:
        try:
            file_settings = ConfigLoader().load_config(config_path)
        except FileNotFoundError as e:
            raise ConfigurationError(str(e)) from e
        _apply(settings, file_settings, config_path)

    env_settings = {
        attr: environ[name] for name, attr in ENVIRONMENT_KEYS.items() if environ.get(name)
    }
    _apply(settings, env_settings, "environment")

    if overrides:
        _apply(settings, overrides, "command line")

    if 'formats' in settings:
        settings['formats'] = parse_formats(settings['formats'])

    try:
        config = AppConfig(**settings)
        config.chunk_size_mb = float(config.chunk_size_mb)
        config.max_concurrency = int(config.max_concurrency)
        config.format_concurrency = int(config.format_concurrency)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}") from e

    if config.chunk_size_mb <= 0:
        raise ConfigurationError(f"chunk_size_mb must be positive, got {config.chunk_size_mb}")
    if config.max_concurrency < 1 or config.format_concurrency < 1:
        raise ConfigurationError("max_concurrency and format_concurrency must be at least 1")
    return config
