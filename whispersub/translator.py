"""Handles subtitle translation using the OpenAI chat API."""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from openai import OpenAI
from tqdm import tqdm

from .exceptions import FileSystemError, TranslationError
from .srt_codec import format_timestamp, parse_srt, serialize_srt
from .utils import derive_path, language_slug, read_text, write_text

logger = logging.getLogger(__name__)

DEFAULT_TRANSLATION_MODEL = "gpt-3.5-turbo"

SYSTEM_PROMPT = (
    "Act as a highly proficient translation assistant. Your task is to accurately translate "
    "the provided text from {source} to {target}, maintaining the original meaning, tone, and "
    "style. Pay attention to cultural nuances and idiomatic expressions so the translation is "
    "contextually appropriate. Keep the translation concise and suitable for subtitles. "
    "Add a half-width space between full-width and half-width characters to improve readability.\n\n"
    "Source Language: {source}\n"
    "Target Language: {target}"
)

class Translator(ABC):
    """Abstract base class for translation services."""

    @abstractmethod
    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """
        Translates text from source to target language.

        Args:
            text: The text to translate.
            source_lang: Source language (code or name, e.g. 'English').
            target_lang: Target language (code or name).

        Returns:
            The translated text.

        Raises:
            TranslationError: If translation fails.
        """
        pass

class OpenAITranslator(Translator):
    """Implements translation with an OpenAI chat completion per text."""

    def __init__(self, api_key: Optional[str] = None, model_name: str = DEFAULT_TRANSLATION_MODEL, client: Optional[OpenAI] = None):
        """
        Initializes the OpenAITranslator.

        Args:
            api_key: OpenAI API key. Ignored when ``client`` is given.
            model_name: Chat model identifier.
            client: A preconfigured OpenAI client.
        """
        self.model_name = model_name
        self.client = client or OpenAI(api_key=api_key)
        logger.info(f"Initializing OpenAITranslator with model '{self.model_name}'")

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """
        Translates a single string of text.

        Empty input is returned unchanged without calling the API, and an
        empty reply from the model falls back to the source text.
        """
        if not text:
            return text

        logger.debug(f"Translating ({source_lang}->{target_lang}): '{text[:50]}...'")
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT.format(source=source_lang, target=target_lang)},
                    {"role": "user", "content": text},
                ],
            )
            translated_text = response.choices[0].message.content
        except Exception as e:
            logger.error(f"Error during translation of text '{text[:50]}...': {e}", exc_info=True)
            raise TranslationError(f"OpenAI translation failed: {e}") from e

        logger.debug(f"Translation result: '{(translated_text or '')[:50]}...'")
        return translated_text or text


def translated_output_path(srt_path: str, target_lang: str) -> str:
    """``movie.srt`` + 'Traditional Chinese' -> ``movie-traditional-chinese.srt``."""
    return derive_path(srt_path, f"-{language_slug(target_lang)}", "srt")


def translate_srt_file(srt_path: str, translator: Translator, source_lang: str, target_lang: str) -> str:
    """
    Translates every cue of an SRT file, keeping the timings.

    Args:
        srt_path: Path to the source .srt file.
        translator: The translation service to use.
        source_lang: Language of the subtitles.
        target_lang: Language to translate into.

    Returns:
        The path of the translated file, ``<base>-<target-slug>.srt``.

    Raises:
        FileSystemError: If the SRT file cannot be read or written.
        FormatError: If the SRT content is malformed.
        TranslationError: On the first failed translation; no output is written.
    """
    if not os.path.isfile(srt_path):
        raise FileSystemError(f"SRT file not found: {srt_path}")

    output_path = translated_output_path(srt_path, target_lang)
    cues = parse_srt(read_text(srt_path))
    logger.info(f"Translating {len(cues)} cues in {srt_path} from {source_lang} to {target_lang}")

    for cue in tqdm(cues, unit="cue", desc=os.path.basename(srt_path)):
        original = cue.text
        cue.text = translator.translate(cue.text, source_lang, target_lang)
        logger.debug(
            f"{cue.index} {format_timestamp(cue.start)} --> {format_timestamp(cue.end)} "
            f"'{original}' -> '{cue.text}'"
        )

    write_text(output_path, serialize_srt(cues))
    logger.info(f"Translated subtitles saved to: {output_path}")
    return output_path
