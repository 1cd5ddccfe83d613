"""
Evaluation Context

Responsibilities:
- Scores final resume content for ATS compatibility
- Reports missing keywords and improvement suggestions

Owns: ATS scoring factors, weights and suggestion thresholds
Never: Modifies resume content
"""

from cvsmith.contexts.evaluation.ats_scorer import ATSBreakdown, ATSScore, calculate_ats_score

__all__ = ["ATSBreakdown", "ATSScore", "calculate_ats_score"]
