"""LLM access package.

Architectural role:
    Provides provider configuration, the provider-agnostic request/result
    contract, and transport adapters used by the conversation orchestrator.

Module split:
    - `provider_config`: environment-driven provider, model and key settings.
    - `types`: closed request/content/result shapes.
    - `errors`: native error classification and advisory text.
    - `client`: provider-specific HTTP adapters and `build_adapter`.
    - `location_tools`: single-shot image/text location helpers.
"""
