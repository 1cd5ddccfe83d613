"""
AI content rewriting.

Turns SelectedContent into OptimizedContent: a professional summary plus
rewritten achievement and highlight bullets. Every model call is isolated
so a failure falls back to deterministic text and never aborts generation.

The summary call and each bullet-list call are independent and run
concurrently on a thread pool.
"""

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import List, Optional, Sequence

from omegaconf import DictConfig

from cvsmith.contexts.intake.job_analysis import JobAnalysis
from cvsmith.contexts.optimization.logger import _log_debug, _log_info, _log_warning
from cvsmith.contexts.optimization.prompts import (
    FALLBACK_SUMMARY_ROLE,
    FALLBACK_SUMMARY_SKILLS,
    FALLBACK_SUMMARY_TARGET,
    build_bullets_prompt,
    build_summary_prompt,
)
from cvsmith.contexts.targeting.career_data_structures import OptimizedContent, SelectedContent
from cvsmith.utils.config import load_generation_config
from cvsmith.utils.llm import LLMServiceError, TextGenerationService

# Leading list markers the model tends to echo back ("- ", "• ", "* ", "3. ")
BULLET_MARKER_PATTERN = re.compile(r"^(?:[-•*]|\d+[.)])\s*")

SUMMARY_ROLE_LIMIT = 3
SUMMARY_SKILL_LIMIT = 10
FALLBACK_SKILL_LIMIT = 3


def fallback_summary(roles: Sequence[str], skills: Sequence[str], position: str) -> str:
    """
    Deterministic summary used when the model call fails.

    Examples:
        >>> fallback_summary(["Engineer at Acme"], ["Python", "SQL"], "Data Engineer")
        'Experienced professional with expertise in Python, SQL. Proven track record in Engineer at Acme. Seeking to leverage skills and experience in the Data Engineer role.'
    """
    sentences = []
    if skills:
        sentences.append(
            FALLBACK_SUMMARY_SKILLS.format(skills=", ".join(skills[:FALLBACK_SKILL_LIMIT]))
        )
    else:
        sentences.append("Experienced professional.")
    if roles:
        sentences.append(FALLBACK_SUMMARY_ROLE.format(role=roles[0]))
    sentences.append(FALLBACK_SUMMARY_TARGET.format(position=position or "target"))
    return " ".join(sentences)


def parse_bullet_response(text: str) -> List[str]:
    """Split a model response into bullets, dropping blank lines and leading markers."""
    bullets = []
    for line in text.strip().splitlines():
        cleaned = BULLET_MARKER_PATTERN.sub("", line.strip()).strip()
        if cleaned:
            bullets.append(cleaned)
    return bullets


def align_bullets(rewritten: Sequence[str], originals: Sequence[str]) -> List[str]:
    """
    Force the rewritten list to the original length.

    Missing tail entries are filled from the index-aligned originals and
    surplus entries are dropped.
    """
    aligned = list(rewritten[: len(originals)])
    aligned.extend(originals[len(aligned) :])
    return aligned


class ContentOptimizer:
    """
    Rewrites selected content with the text-generation service.

    Attributes:
        service: Text-generation service boundary
        max_workers: Thread pool size for concurrent calls
    """

    def __init__(
        self,
        service: Optional[TextGenerationService] = None,
        config: Optional[DictConfig] = None,
    ):
        self.service = service or TextGenerationService()
        self._settings = (config or load_generation_config()).optimization
        self.max_workers = int(self._settings.max_workers)

    def generate_summary(
        self,
        selected: SelectedContent,
        company: str,
        position: str,
        job_skills: Sequence[str],
        keywords: Sequence[str],
    ) -> str:
        """
        Professional summary for the target role.

        Always returns text: falls back to fallback_summary() when the call
        fails or comes back empty.
        """
        roles = [
            f"{scored.fact.position} at {scored.fact.company}"
            for scored in selected.experience[:SUMMARY_ROLE_LIMIT]
        ]
        skills = [scored.fact.name for scored in selected.skills[:SUMMARY_SKILL_LIMIT]]
        prompt = build_summary_prompt(company, position, roles, skills, job_skills, keywords)

        try:
            summary = self.service.complete(
                prompt,
                temperature=self._settings.summary_temperature,
                max_tokens=self._settings.summary_max_tokens,
            ).strip()
        except LLMServiceError as e:
            _log_warning(f"Summary generation failed, using fallback: {e.message}")
            return fallback_summary(roles, skills, position)

        if not summary:
            _log_warning("Summary generation returned empty text, using fallback")
            return fallback_summary(roles, skills, position)

        return summary

    def optimize_bullets(
        self,
        bullets: Sequence[str],
        context: str,
        job_skills: Sequence[str],
        keywords: Sequence[str],
    ) -> List[str]:
        """
        Rewrite bullets for ATS and readability.

        The result always has exactly len(bullets) entries. An empty input
        returns [] without calling the service; a failed call returns the
        originals unchanged.
        """
        originals = list(bullets)
        if not originals:
            return []

        prompt = build_bullets_prompt(originals, context, job_skills, keywords)
        try:
            response = self.service.complete(
                prompt,
                temperature=self._settings.bullet_temperature,
                max_tokens=self._settings.bullet_max_tokens,
            )
        except LLMServiceError as e:
            _log_warning(f"Bullet rewrite failed for '{context}', keeping originals: {e.message}")
            return originals

        rewritten = parse_bullet_response(response)
        if len(rewritten) != len(originals):
            _log_debug(
                f"Bullet rewrite for '{context}' returned {len(rewritten)}/{len(originals)} lines"
            )
        return align_bullets(rewritten, originals)

    def optimize_content(self, selected: SelectedContent, analysis: JobAnalysis) -> OptimizedContent:
        """
        Produce OptimizedContent for one (user, job) pair.

        Args:
            selected: Content chosen by select_content()
            analysis: Target job analysis (company and position filled in)

        Returns:
            OptimizedContent with summary and rewritten bullets
        """
        job_skills = list(analysis.skills)
        keywords = list(analysis.keywords)
        experiences = [scored.fact for scored in selected.experience]
        projects = [scored.fact for scored in selected.projects]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            summary_future = executor.submit(
                self.generate_summary,
                selected,
                analysis.company,
                analysis.position,
                job_skills,
                keywords,
            )
            achievement_futures = [
                executor.submit(
                    self.optimize_bullets, exp.achievements, exp.position, job_skills, keywords
                )
                for exp in experiences
            ]
            highlight_futures = [
                executor.submit(
                    self.optimize_bullets, project.highlights, project.title, job_skills, keywords
                )
                for project in projects
            ]

            summary = summary_future.result()
            optimized_experience = [
                replace(exp, achievements=future.result())
                for exp, future in zip(experiences, achievement_futures)
            ]
            optimized_projects = [
                replace(project, highlights=future.result())
                for project, future in zip(projects, highlight_futures)
            ]

        _log_info(
            f"Optimized {len(optimized_experience)} experiences and "
            f"{len(optimized_projects)} projects for {analysis.position} at {analysis.company}"
        )

        return OptimizedContent(
            personal_info=selected.personal_info,
            summary=summary,
            experience=optimized_experience,
            education=list(selected.education),
            skills=[scored.fact for scored in selected.skills],
            projects=optimized_projects,
        )
