"""End-to-end translation flow through a real LLM translator over a mocked transport."""

import json

import httpx
import pytest

from translator.schemas import BATCH_SEPARATOR, PromptTemplates, TranslationConfig
from translator.subtitle_service import SubtitleService
from translator.translation_service import LLMTranslator


def make_gemini_translator(handler, templates):
    return LLMTranslator(
        provider="google",
        model="gemini-1.5-flash",
        api_key="g-key",
        templates=templates,
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def gemini_reply(text: str) -> httpx.Response:
    return httpx.Response(
        200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]}
    )


@pytest.mark.integration
class TestTranslationFlow:
    @pytest.mark.asyncio
    async def test_context_prompts_reach_backend(self, sample_srt_content):
        prompts = []

        def handler(request: httpx.Request) -> httpx.Response:
            prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            prompts.append(prompt)
            return gemini_reply(f"```\nZH {len(prompts)}\n```")

        templates = PromptTemplates(
            prompt="{sourceLang}>{targetLang}\n{context_prompt}\n{content}",
            context_prompt="CONTEXT\n{context}",
        )
        service = SubtitleService(make_gemini_translator(handler, templates))

        output = await service.process_subtitle(
            sample_srt_content,
            "movie.srt",
            "en",
            "zh",
            config=TranslationConfig(context_lines=1, enable_context=True),
        )
        await service.translator.aclose()

        assert len(prompts) == 3
        assert prompts[0] == (
            "en>zh\nCONTEXT\n[Target]\nWelcome to this video\n\n"
            "Below:\nToday we're going to learn something new\nWelcome to this video"
        )
        assert "ZH 1" in output
        assert "```" not in output

    @pytest.mark.asyncio
    async def test_multi_line_mode_with_coherence(self, sample_srt_content):
        prompts = []

        def handler(request: httpx.Request) -> httpx.Response:
            prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            prompts.append(prompt)
            return gemini_reply(BATCH_SEPARATOR.join(["one", "two"]))

        templates = PromptTemplates(
            prompt="{sourceLang}{targetLang}{content}",
            coherence_prompt="COH {context}",
        )
        service = SubtitleService(make_gemini_translator(handler, templates))
        document = service.parse_subtitle(sample_srt_content, "movie.srt")

        translated = await service.translate_subtitle(
            document,
            "en",
            "zh",
            TranslationConfig(mode="multi", multi_line_batch_size=2, enable_coherence=True),
        )
        await service.translator.aclose()

        assert len(prompts) == 2
        assert prompts[0].startswith("Rewrite each of the following 2")
        assert "COH" not in prompts[0]
        # Second batch has one unit; extra returned parts are ignored
        assert translated.texts == ["one", "two", "one"]

    @pytest.mark.asyncio
    async def test_backend_failures_keep_source_text(self, sample_srt_content):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 2:
                return httpx.Response(500)
            return gemini_reply("ok")

        templates = PromptTemplates(prompt="{content}")
        service = SubtitleService(make_gemini_translator(handler, templates))
        document = service.parse_subtitle(sample_srt_content, "movie.srt")

        translated = await service.translate_subtitle(document, "en", "zh")
        await service.translator.aclose()

        assert translated.texts == [
            "ok",
            "Today we're going to learn something new",
            "ok",
        ]
