from __future__ import annotations


class DaxContextError(ValueError):
    """Invalid argument passed to the dax_context API (e.g. an unknown feedback outcome)."""
