"""Subtitle service: parse, translate and generate subtitle files."""

import logging
from typing import Any, List, Optional

from common.subtitle_parser import (
    SRTGenerator,
    SRTParser,
    SubtitleDocument,
    SubtitleGenerator,
    SubtitleParser,
    UnsupportedFormatError,
)
from translator.progress import ProgressSink
from translator.schemas import TranslationConfig
from translator.translation_orchestrator import TranslationOrchestrator
from translator.translation_service import Translator

logger = logging.getLogger(__name__)


class SubtitleService:
    """Coordinates format adapters and the translation orchestrator."""

    def __init__(self, translator: Optional[Translator] = None):
        self.parsers: List[SubtitleParser] = []
        self.generators: List[SubtitleGenerator] = []
        self.translator = translator

        self.register_parser(SRTParser())
        self.register_generator(SRTGenerator())

    def register_parser(self, parser: SubtitleParser) -> None:
        self.parsers.append(parser)

    def register_generator(self, generator: SubtitleGenerator) -> None:
        self.generators.append(generator)

    def set_translator(self, translator: Translator) -> None:
        self.translator = translator

    def find_parser(self, filename: str) -> Optional[SubtitleParser]:
        return next((p for p in self.parsers if p.can_parse(filename)), None)

    def find_generator(self, fmt: str) -> Optional[SubtitleGenerator]:
        fmt = fmt.lstrip(".").lower()
        return next((g for g in self.generators if g.format_name == fmt), None)

    def parse_subtitle(self, content: str, filename: str) -> SubtitleDocument:
        """
        Parse subtitle content using the parser registered for the filename.

        Raises:
            UnsupportedFormatError: If no parser claims the filename
        """
        parser = self.find_parser(filename)
        if parser is None:
            raise UnsupportedFormatError(filename, action="parse")
        return parser.parse(content)

    def generate_subtitle(
        self, document: SubtitleDocument, fmt: Optional[str] = None
    ) -> str:
        """
        Render a document, defaulting to the format it was parsed from.

        Raises:
            UnsupportedFormatError: If no generator claims the format
        """
        target_format = fmt or document.source_format
        generator = self.find_generator(target_format)
        if generator is None:
            raise UnsupportedFormatError(target_format, action="generate")
        return generator.generate(document)

    async def translate_subtitle(
        self,
        document: SubtitleDocument,
        source_language: str,
        target_language: str,
        config: Optional[TranslationConfig] = None,
        on_progress: Optional[ProgressSink] = None,
        abort_signal: Optional[Any] = None,
    ) -> SubtitleDocument:
        """
        Translate a parsed document with the configured translator.

        Raises:
            RuntimeError: If no translator has been set
            TranslationCancelledError: Cancellation was observed
            TranslationFailedError: A multi-line batch call failed
        """
        if self.translator is None:
            raise RuntimeError("No translator configured")

        orchestrator = TranslationOrchestrator(self.translator)
        return await orchestrator.translate_document(
            document,
            source_language,
            target_language,
            config=config,
            on_progress=on_progress,
            abort_signal=abort_signal,
        )

    async def process_subtitle(
        self,
        content: str,
        filename: str,
        source_language: str,
        target_language: str,
        output_format: Optional[str] = None,
        config: Optional[TranslationConfig] = None,
        on_progress: Optional[ProgressSink] = None,
        abort_signal: Optional[Any] = None,
    ) -> str:
        """Full pipeline: parse, translate, generate."""
        document = self.parse_subtitle(content, filename)
        translated = await self.translate_subtitle(
            document,
            source_language,
            target_language,
            config=config,
            on_progress=on_progress,
            abort_signal=abort_signal,
        )
        return self.generate_subtitle(translated, output_format)


def build_output_filename(filename: str, output_format: str) -> str:
    """
    Name of the translated file.

    Examples:
        >>> build_output_filename("movie.en.srt", "srt")
        'movie.en_translated.srt'
    """
    stem, dot, _ = filename.rpartition(".")
    if not dot:
        stem = filename
    return f"{stem}_translated.{output_format.lstrip('.')}"
