"""Story text generators.

Generation providers
--------------------
``openrouter`` (default)
    ``ChatOpenAI`` pointed at the OpenRouter OpenAI-compatible endpoint.
    Requires ``OPENROUTER_API_KEY``.

``ollama``
    ``ChatOllama`` against the local Ollama server at ``OLLAMA_BASE_URL``.

``SimulatedGenerator`` returns deterministic text and is selected at
construction time when no provider is configured.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from chainmuse.errors import GenerationFailed
from chainmuse.generation.prompts import build_messages

DEFAULT_MODELS = [
    "mistralai/mistral-7b-instruct",
    "meta-llama/llama-3-8b-instruct",
    "anthropic/claude-3-haiku",
]


class Generator(ABC):
    """Capability interface shared by every generator variant."""

    name: str = "generator"

    @abstractmethod
    async def generate(
        self, prompt: str, parent_context: Optional[str], model_id: str
    ) -> str:
        """Return narrative text for *prompt*.

        Raises:
            GenerationFailed: On provider error, timeout or empty output.
        """

    async def list_models(self) -> list[str]:
        return list(DEFAULT_MODELS)

    async def aclose(self) -> None:
        return None


# ---------------------------------------------------------------------------
# LangChain-backed generator
# ---------------------------------------------------------------------------

class LangChainGenerator(Generator):
    def __init__(
        self,
        provider: str = "openrouter",
        api_key: str = "",
        base_url: str = "https://openrouter.ai/api/v1",
        referrer: str = "https://chainmuse.app",
        app_name: str = "ChainMuse",
        ollama_base_url: str = "http://localhost:11434",
        timeout: float = 60.0,
    ) -> None:
        if provider not in ("openrouter", "ollama"):
            raise ValueError(f"Unknown LLM_PROVIDER: {provider!r}")
        if provider == "openrouter" and not api_key:
            raise EnvironmentError(
                "OPENROUTER_API_KEY environment variable is not set. "
                "Set it or switch to GENERATION_BACKEND=simulated."
            )
        self.name = provider
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._referrer = referrer
        self._app_name = app_name
        self._ollama_base_url = ollama_base_url
        self._timeout = timeout

    def _get_llm(self, model_id: str) -> Any:
        """Return a configured LangChain chat model for *model_id*."""
        if self.name == "ollama":
            from langchain_ollama import ChatOllama

            return ChatOllama(
                model=model_id, base_url=self._ollama_base_url, temperature=0.8
            )

        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=model_id,
            api_key=self._api_key,
            base_url=self._base_url,
            temperature=0.8,
            max_tokens=600,
            top_p=0.9,
            max_retries=0,
            default_headers={
                "HTTP-Referer": self._referrer,
                "X-Title": self._app_name,
            },
        )

    async def generate(
        self, prompt: str, parent_context: Optional[str], model_id: str
    ) -> str:
        print(f"[generate] Calling {self.name} ({model_id}) …")
        messages = build_messages(prompt, parent_context)
        try:
            llm = self._get_llm(model_id)
            response = await asyncio.wait_for(llm.ainvoke(messages), self._timeout)
        except asyncio.TimeoutError as exc:
            raise GenerationFailed(
                f"{model_id} timed out after {self._timeout:.0f}s", cause=exc
            ) from exc
        except Exception as exc:
            print(f"[generate] ✗ {model_id} failed: {exc!r:.120}")
            raise GenerationFailed(f"{model_id} failed: {exc}", cause=exc) from exc

        text = response.content if hasattr(response, "content") else str(response)
        if not isinstance(text, str) or not text.strip():
            raise GenerationFailed(f"{model_id} returned empty content")
        print(f"[generate] ✓ {len(text)} chars.")
        return text

    async def list_models(self) -> list[str]:
        if self.name != "openrouter":
            return list(DEFAULT_MODELS)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(
                    f"{self._base_url}/models",
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            print(f"[generate] model list unavailable: {exc!r:.120}")
            return list(DEFAULT_MODELS[:2])

        ids = [
            m["id"]
            for m in data.get("data", [])
            if "instruct" in m.get("id", "") or "chat" in m.get("id", "")
        ]
        return ids[:10]


# ---------------------------------------------------------------------------
# Simulated
# ---------------------------------------------------------------------------

class SimulatedGenerator(Generator):
    """Deterministic stand-in; records every call it receives."""

    name = "simulated"

    def __init__(self) -> None:
        self.calls: list[tuple[str, Optional[str], str]] = []

    async def generate(
        self, prompt: str, parent_context: Optional[str], model_id: str
    ) -> str:
        self.calls.append((prompt, parent_context, model_id))
        opening = (
            "Continuing from the previous story..."
            if parent_context
            else "Starting a new adventure..."
        )
        return (
            f'A simulated story based on your prompt: "{prompt}". {opening} '
            "The hero faces new challenges and mysteries unfold."
        )
