# src/llm/client_factory.py — v1
"""Factory: instantiate a generation client from a provider name.

Called by ``create_session`` with the provider configured in Settings.
"""

from __future__ import annotations

import importlib
import logging

from vidlearn.config.settings import Settings
from vidlearn.llm.base_client import BaseGenerationClient

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "google": "vidlearn.llm.adapters.google_adapter.GoogleAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_generation_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseGenerationClient:
    """Instantiate the adapter registered for ``provider``.

    Args:
        provider: Provider identifier (google).
        model: Default model name for the adapter.
        settings: Application settings (for API keys).
        **kwargs: Additional provider-specific arguments.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported generation provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model
    if settings is not None and provider == "google":
        init_kwargs.setdefault("api_key", settings.google_api_key)

    logger.debug("Creating generation client: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified path of a BaseGenerationClient subclass.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered generation provider: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
