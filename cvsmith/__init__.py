"""
cvsmith - tailored, ATS-optimized resume generation

Assembles a resume from a user's stored career history and a target job
description, then typesets it through a sandboxed LaTeX compiler.

Architecture:
- Intake Context: Job analysis data model and job description analysis
- Targeting Context: Relevance scoring, experience consolidation, content selection
- Optimization Context: AI-assisted summary and bullet rewriting
- Evaluation Context: ATS compatibility scoring
- Templating Context: Escaping and placeholder substitution into trusted templates
- Rendering Context: Sandboxed LaTeX compilation and artifact management
- Generation Context: Job lifecycle, queueing and pipeline orchestration
"""

__version__ = "0.1.0"
