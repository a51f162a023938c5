"""
LeadSync grounded search - the generative-search capability behind scans.

A GroundedSearch takes one prompt and returns generated text plus the web
citations that grounded it. The client is built once and injected into the
scanner, so tests and offline runs can substitute StaticGroundedSearch.
"""

import os
from abc import ABC, abstractmethod
from typing import Any

import httpx
from openai import OpenAI

from .models import Citation, SearchResponse

DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 30.0


class GroundedSearch(ABC):
    """Abstract grounded generative-search interface."""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        *,
        grounded: bool = True,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> SearchResponse:
        """Run one prompt and return text plus grounding citations."""


def citations_from_response(response: Any) -> list[Citation]:
    """Collect url_citation annotations from a Responses API result.

    Items without the expected attributes are skipped.
    """
    citations: list[Citation] = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            for annotation in getattr(content, "annotations", None) or []:
                if getattr(annotation, "type", None) != "url_citation":
                    continue
                url = getattr(annotation, "url", None)
                if not isinstance(url, str) or not url:
                    continue
                title = getattr(annotation, "title", None)
                citations.append(Citation(uri=url, title=title if isinstance(title, str) else None))
    return citations


class OpenAIGroundedSearch(GroundedSearch):
    """Grounded search via the OpenAI Responses API and its web_search tool.

    One attempt per call: SDK retries are disabled and a request timeout is
    always set.
    """

    DEFAULT_MODEL = "gpt-4.1-mini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY not set")
        # Model can be set via env var LEADSYNC_MODEL
        self.model = model or os.getenv("LEADSYNC_MODEL", self.DEFAULT_MODEL)
        self.timeout = timeout or float(os.getenv("LEADSYNC_TIMEOUT", str(DEFAULT_TIMEOUT)))
        self.client = OpenAI(
            api_key=self.api_key,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            max_retries=0,
        )

    def generate(
        self,
        prompt: str,
        *,
        grounded: bool = True,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> SearchResponse:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "input": prompt,
            "temperature": temperature,
        }
        if grounded:
            kwargs["tools"] = [{"type": "web_search"}]

        response = self.client.responses.create(**kwargs)
        return SearchResponse(
            text=getattr(response, "output_text", "") or "",
            citations=citations_from_response(response),
        )


class StaticGroundedSearch(GroundedSearch):
    """Canned responses for testing and offline runs.

    Responses are served in order (the last one repeats). If `error` is set,
    every call raises it. Prompts are recorded in `prompts`.
    """

    def __init__(
        self,
        responses: list[SearchResponse] | None = None,
        error: Exception | None = None,
    ):
        self.responses = responses or [SearchResponse()]
        self.error = error
        self.prompts: list[str] = []

    def generate(
        self,
        prompt: str,
        *,
        grounded: bool = True,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> SearchResponse:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        index = min(len(self.prompts) - 1, len(self.responses) - 1)
        return self.responses[index]


def get_search(offline: bool = False) -> GroundedSearch:
    """Factory for the configured search capability."""
    if offline:
        return StaticGroundedSearch()
    return OpenAIGroundedSearch()
