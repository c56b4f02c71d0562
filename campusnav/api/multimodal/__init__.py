"""Multimodal preprocessing package for API adapters.

Architectural role:
- Validates uploaded photos and converts them to `ImagePayload` values.

Scope:
- Content preprocessing only; no HTTP endpoint definitions.
"""
