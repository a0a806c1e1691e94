"""Shared HTTP access to Fal-AI models.

Fal models are invoked synchronously with ``POST https://fal.run/<model>``,
authenticated with ``Authorization: Key <FAL_KEY>``, and answer with the
model output as JSON.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from .base import ImageProvider

FAL_RUN_URL = "https://fal.run"


async def run_fal_model(
    client: httpx.AsyncClient,
    api_key: str,
    model: str,
    payload: Dict[str, Any],
    *,
    base_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Run a Fal model and return its JSON output.

    Raises:
        httpx.HTTPStatusError: When Fal answers with an error status.
        httpx.HTTPError: On transport failures.
    """
    response = await client.post(
        f"{(base_url or FAL_RUN_URL).rstrip('/')}/{model}",
        headers={"Authorization": f"Key {api_key}", "Content-Type": "application/json"},
        json=payload,
    )
    response.raise_for_status()
    return response.json()


class FalProvider(ImageProvider):
    """Base of the providers hosted on Fal-AI."""

    default_model: str

    @property
    def model(self) -> str:
        return self.config.options.get("model", self.default_model)

    async def run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await run_fal_model(
            self._client, self.config.api_key or "", self.model, payload, base_url=self.config.base_url
        )
