"""Protocol definitions for live provider model listing."""

from __future__ import annotations

from typing import Optional, Protocol

from starmap.catalogs.types import Author, Model, ModelFeatures, ModelModalities, Provider


class ProviderClient(Protocol):
    """Minimal interface a provider client must implement."""

    name: str  # provider ID served by this client (e.g., "openai", "groq")

    def list_models(self, provider: Provider, *, timeout: Optional[float] = None) -> list[Model]:
        """Return the models the provider's API currently lists.

        ``provider`` carries the loaded credentials; ``timeout`` bounds the
        whole listing in seconds.
        """


def text_features(*, streaming: bool = True) -> ModelFeatures:
    """Baseline capability flags for a text-in, text-out chat model."""
    return ModelFeatures(
        modalities=ModelModalities(input=["text"], output=["text"]),
        temperature=True,
        top_p=True,
        max_tokens=True,
        streaming=streaming,
    )


def author(author_id: str, name: str) -> Author:
    return Author(id=author_id, name=name)


__all__ = ["ProviderClient", "author", "text_features"]
