"""
Intake Context

Responsibilities:
- Defines the JobAnalysis consumed read-only by every downstream stage
- Analyzes job description text into a JobAnalysis
- Builds the keyword set used for relevance scoring
- Holds parsed uploads awaiting user review

Owns: Job analysis data model, job description analysis
Never: Scores career facts or renders documents
"""

from cvsmith.contexts.intake.job_analysis import (
    JobAnalysis,
    JobDescription,
    JobRequirement,
    build_keyword_set,
)
from cvsmith.contexts.intake.job_analyzer import analyze_job_description, basic_job_analysis
from cvsmith.contexts.intake.job_loader import load_job_description
from cvsmith.contexts.intake.review_store import PendingReviewStore

__all__ = [
    "JobAnalysis",
    "JobDescription",
    "JobRequirement",
    "build_keyword_set",
    "analyze_job_description",
    "basic_job_analysis",
    "load_job_description",
    "PendingReviewStore",
]
