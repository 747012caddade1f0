"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from common.subtitle_parser import SubtitleDocument, SubtitleSegment
from translator.schemas import PromptTemplates


@pytest.fixture
def sample_srt_content():
    """Small well-formed SRT file."""
    return """1
00:00:01,000 --> 00:00:04,000
Welcome to this video

2
00:00:04,500 --> 00:00:08,000
Today we're going to learn something new

3
00:00:08,500 --> 00:00:12,000
Let's get started!
"""


def make_document(count: int, prefix: str = "line") -> SubtitleDocument:
    """Build a document of ``count`` entries with texts ``line 0`` ... ``line N-1``."""
    entries = [
        SubtitleSegment(
            index=i + 1,
            start_time=f"00:00:{i:02d},000",
            end_time=f"00:00:{i:02d},900",
            text=f"{prefix} {i}",
        )
        for i in range(count)
    ]
    return SubtitleDocument(entries=entries, source_format="srt")


@pytest.fixture
def document_factory():
    """Factory for positional test documents."""
    return make_document


@pytest.fixture
def prompt_templates():
    """Minimal templates exercising every placeholder."""
    return PromptTemplates(
        prompt="{sourceLang}->{targetLang}|{custom_prompt}|{context_prompt}|{content}",
        context_prompt="CTX:{context}",
        coherence_prompt="COH:{context}",
        coherence_mode_prompt="",
    )
