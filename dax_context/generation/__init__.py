"""
Generation module: turns selected knowledge into the model's context block.

- Fixed-priority section rendering (training examples, history, suggested
  measures, documentation excerpt)
- Character budget with tail truncation
"""

from .config import GenerationConfig
from .context_builder import build_context, render_documentation

__all__ = [
    "GenerationConfig",
    "build_context",
    "render_documentation",
]
