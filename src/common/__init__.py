"""
Common utilities for nuget-search-extension.

Modules:
- nuget: async NuGet search client and package records
- cards: card/response models and card composition helpers
"""

__all__ = [
    "cards",
    "nuget",
]
