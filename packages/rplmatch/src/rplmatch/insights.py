"""Natural-language data quality summary of match results."""

from __future__ import annotations

import os
from collections.abc import Sequence
from typing import Protocol

import structlog
from google import genai
from google.genai import types as genai_types

from rplmatch.config import SummaryConfig
from rplmatch.types import MatchResult

log = structlog.get_logger()


class TextGenerator(Protocol):
    """Protocol for text generation providers."""

    def generate(self, prompt: str, system_instruction: str) -> str: ...


def _make_client() -> genai.Client:
    api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    if api_key:
        return genai.Client(api_key=api_key)
    project = os.environ.get("GOOGLE_CLOUD_PROJECT")
    if not project:
        raise RuntimeError(
            "No Gemini credentials found. Set GEMINI_API_KEY or GOOGLE_CLOUD_PROJECT"
        )
    location = os.environ.get("GOOGLE_CLOUD_LOCATION", "us-central1")
    return genai.Client(vertexai=True, project=project, location=location)


class GeminiTextGenerator:
    """TextGenerator backed by a Gemini model."""

    def __init__(self, model: str = "gemini-2.0-flash", client: genai.Client | None = None) -> None:
        self.model = model
        self._client = client or _make_client()

    def generate(self, prompt: str, system_instruction: str) -> str:
        response = self._client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(system_instruction=system_instruction),
        )
        return response.text or ""


def select_samples(results: Sequence[MatchResult], config: SummaryConfig | None = None) -> list[MatchResult]:
    """Borderline results worth showing to an analyst, in input order."""
    config = config or SummaryConfig()
    samples = [r for r in results if r.tier in config.sample_tiers]
    return samples[: config.max_samples]


def build_prompt(samples: Sequence[MatchResult]) -> str:
    examples = "\n".join(
        f"- Customer: {s.customer_text}, Match: {s.matched_reference_text} "
        f"({s.similarity_percent:g}% similarity)"
        for s in samples
    )
    return (
        "Analyze these fuzzy match results between Customer names and "
        "Restricted Party List (RPL) entries.\n"
        "Focus on patterns of potential risk or data entry errors.\n\n"
        f"Examples:\n{examples}\n\n"
        "Provide a brief summary (2-3 sentences) of the overall data quality and "
        'highlight if any "Low" matches look suspicious enough to warrant manual review.'
    )


class Summarizer:
    """Summarizes a result set. Always returns text, never raises."""

    def __init__(self, config: SummaryConfig | None = None, provider: TextGenerator | None = None) -> None:
        self.config = config or SummaryConfig()
        self.provider = provider

    def generate(self, results: Sequence[MatchResult]) -> str:
        if self.provider is None:
            log.info("summary_skipped", reason="no_provider")
            return self.config.unavailable_text

        samples = select_samples(results, self.config)
        prompt = build_prompt(samples)
        try:
            text = self.provider.generate(prompt, self.config.system_instruction)
        except Exception as e:
            log.warning("summary_failed", error=str(e), error_type=type(e).__name__)
            return self.config.unavailable_text

        if not text or not text.strip():
            return self.config.empty_text
        log.info("summary_done", samples=len(samples))
        return text.strip()
