"""Prompt templates for content optimization."""

from typing import Sequence

SUMMARY_PROMPT_TEMPLATE = """\
Generate a professional resume summary (2-3 sentences) for a {position} position at {company}.

Candidate background:
- Recent experience: {experience_summary}
- Key skills: {top_skills}

Job requirements:
- Required skills: {job_skills}
- Keywords to incorporate: {keywords}

Write a compelling summary that:
1. Highlights relevant experience and skills
2. Naturally incorporates job keywords
3. Demonstrates value for the {position} role
4. Maintains authenticity and professionalism; do not invent information
5. Is concise (2-3 sentences maximum)

Return ONLY the summary text, no additional formatting or explanation."""

BULLETS_PROMPT_TEMPLATE = """\
Optimize these resume bullet points for ATS and readability.

Context: {context}
Target job skills: {job_skills}
Keywords to incorporate: {keywords}

Original bullet points:
{numbered_bullets}

Requirements:
1. Start each bullet with a strong action verb
2. Include quantifiable metrics where the original provides them
3. Naturally incorporate relevant keywords from the job
4. Keep each bullet concise (1-2 lines)
5. Maintain authenticity - do not invent information
6. Focus on achievements and impact, not just responsibilities
7. Return exactly {count} bullet points, in the original order

Return ONLY the optimized bullet points, one per line, without numbering or additional formatting."""

FALLBACK_SUMMARY_SKILLS = "Experienced professional with expertise in {skills}."
FALLBACK_SUMMARY_ROLE = "Proven track record in {role}."
FALLBACK_SUMMARY_TARGET = "Seeking to leverage skills and experience in the {position} role."

# Keywords listed in each prompt
SUMMARY_KEYWORD_LIMIT = 10
BULLET_KEYWORD_LIMIT = 15


def build_summary_prompt(
    company: str,
    position: str,
    roles: Sequence[str],
    skills: Sequence[str],
    job_skills: Sequence[str],
    keywords: Sequence[str],
) -> str:
    return SUMMARY_PROMPT_TEMPLATE.format(
        company=company,
        position=position,
        experience_summary=", ".join(roles),
        top_skills=", ".join(skills),
        job_skills=", ".join(job_skills),
        keywords=", ".join(list(keywords)[:SUMMARY_KEYWORD_LIMIT]),
    )


def build_bullets_prompt(
    bullets: Sequence[str],
    context: str,
    job_skills: Sequence[str],
    keywords: Sequence[str],
) -> str:
    numbered = "\n".join(f"{i}. {bullet}" for i, bullet in enumerate(bullets, 1))
    return BULLETS_PROMPT_TEMPLATE.format(
        context=context,
        job_skills=", ".join(job_skills),
        keywords=", ".join(list(keywords)[:BULLET_KEYWORD_LIMIT]),
        numbered_bullets=numbered,
        count=len(bullets),
    )
