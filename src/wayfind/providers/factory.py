from __future__ import annotations

from wayfind.providers.base import GenerationProvider


def build_provider(provider_str: str) -> GenerationProvider:
    """
    Build a generation provider from a CLI/API token:
      "gemini"   -> Google Generative Language (needs WAYFIND_GEMINI_API_KEY)
      "template" -> deterministic offline templates
    """
    token = (provider_str or "").strip().lower() or "gemini"

    # Local imports to avoid circular imports
    from wayfind.providers.gemini import GeminiProvider
    from wayfind.providers.template import TemplateProvider

    if token in ("gemini", "google"):
        return GeminiProvider()
    if token in ("template", "offline"):
        return TemplateProvider()
    raise ValueError(f"Unknown provider token: '{token}' (supported: gemini, template)")
