"""
Optimization Context

Responsibilities:
- Generates a professional summary for the target role
- Rewrites achievement and highlight bullets for ATS and readability
- Falls back to deterministic or original text whenever the model call fails

Owns: Rewriting prompts, summary fallback, bullet alignment
Never: Adds, removes or reorders career facts
"""

from cvsmith.contexts.optimization.rewriter import (
    ContentOptimizer,
    align_bullets,
    fallback_summary,
    parse_bullet_response,
)

__all__ = ["ContentOptimizer", "align_bullets", "fallback_summary", "parse_bullet_response"]
