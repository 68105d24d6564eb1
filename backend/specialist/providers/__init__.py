"""Model provider and host surface contracts."""

from specialist.providers.interfaces import (
    CancellationToken,
    InteractionSurface,
    ModelHandle,
    ModelProvider,
    OutputSurface,
)

__all__ = [
    "CancellationToken",
    "InteractionSurface",
    "ModelHandle",
    "ModelProvider",
    "OutputSurface",
]
