"""LLM gateway for Gemini access via an OpenAI-compatible endpoint (Poe by default)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
import openai
from openai import OpenAI

from stock_analyst.analysis.errors import EmptyResponseError, TransportError
from stock_analyst.config import DEFAULT_BASE_URL


@dataclass
class ModelReply:
    """Assistant text plus grounding chunks shaped as {"web": {"title", "uri"}}."""

    text: str
    citations: List[Dict[str, Any]] = field(default_factory=list)


class GeminiClient:
    """Minimal Gemini client hiding transport plumbing from workflow nodes."""

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        proxy_url: Optional[str] = None,
        timeout: float = 120.0,
        default_web_search: Optional[bool] = None,
        default_thinking_budget: Optional[int] = None,
    ) -> None:
        if not api_key:
            raise ValueError("POE_API_KEY is required to contact Gemini endpoints.")

        http_client_kwargs: Dict[str, Any] = {
            "timeout": httpx.Timeout(timeout, connect=10.0),
        }
        if proxy_url:
            http_client_kwargs["proxy"] = proxy_url

        self._http_client = httpx.Client(**http_client_kwargs)
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            http_client=self._http_client,
        )
        self._model = model
        self._default_web_search = default_web_search
        self._default_thinking_budget = default_thinking_budget

    @property
    def model(self) -> str:
        return self._model

    def _complete(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        web_search: Optional[bool],
        thinking_budget: Optional[int],
    ) -> Any:
        resolved_web_search = (
            self._default_web_search if web_search is None else web_search
        )
        resolved_budget = (
            self._default_thinking_budget if thinking_budget is None else thinking_budget
        )

        extra_body: Dict[str, Any] = {}
        if resolved_web_search is not None:
            extra_body["web_search"] = bool(resolved_web_search)
        if resolved_budget is not None:
            extra_body["thinking_budget"] = resolved_budget

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=temperature,
                messages=messages,
                extra_body=extra_body or None,
            )
        except (openai.APIError, httpx.HTTPError) as exc:
            raise TransportError(str(exc)) from exc

        if not response.choices:
            raise EmptyResponseError("Gemini returned no choices.")
        return response.choices[0].message

    def generate_grounded(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float = 0.2,
        web_search: Optional[bool] = None,
        thinking_budget: Optional[int] = None,
    ) -> ModelReply:
        """Fire a chat completion request; return the answer text and its web citations."""
        message = self._complete(
            messages,
            temperature=temperature,
            web_search=web_search,
            thinking_budget=thinking_budget,
        )
        text = message.content or ""
        if not text.strip():
            raise EmptyResponseError()
        return ModelReply(text=text, citations=_extract_citations(message))

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self._http_client.close()


def _extract_citations(message: Any) -> List[Dict[str, Any]]:
    """Collect url_citation annotations as grounding chunks."""
    chunks: List[Dict[str, Any]] = []
    for annotation in getattr(message, "annotations", None) or []:
        if getattr(annotation, "type", None) != "url_citation":
            continue
        citation = getattr(annotation, "url_citation", None)
        if citation is None:
            chunks.append({"web": None})
            continue
        chunks.append(
            {
                "web": {
                    "title": getattr(citation, "title", None),
                    "uri": getattr(citation, "url", None),
                }
            }
        )
    return chunks
