"""
Boundary layer for external system integrations.

Handles all interactions with external systems (vector index, embedding
provider, source document store). Provides adapters behind narrow contracts.
"""
