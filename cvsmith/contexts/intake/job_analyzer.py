"""
Job description analysis.

Extracts a JobAnalysis from raw posting text with the text-generation service,
falling back to a keyword heuristic when the service is unavailable.
"""

from loguru import logger

from cvsmith.contexts.intake.job_analysis import JobAnalysis
from cvsmith.utils.llm import LLMServiceError, TextGenerationService

# =============================================================================
# PROMPT TEMPLATES
# =============================================================================

_SYSTEM_PROMPT = (
    "You are an expert at analyzing job descriptions. "
    "Extract structured information from job postings."
)

_USER_PROMPT_TEMPLATE = """\
Analyze the following job description and extract:
1. Requirements (both required and preferred) - categorize each as skill, experience, education, or certification
2. Skills mentioned (technical and soft skills)
3. Experience level (entry, mid, senior, or lead)
4. Important keywords for ATS optimization
5. Company information if mentioned

Job Description:
{content}

Return a JSON object with this structure:
{{
  "requirements": [
    {{
      "text": "requirement text",
      "category": "required" or "preferred",
      "type": "skill" or "experience" or "education" or "certification",
      "importance": 0.0 to 1.0
    }}
  ],
  "skills": ["skill1", "skill2"],
  "experienceLevel": "entry" or "mid" or "senior" or "lead",
  "keywords": ["keyword1", "keyword2"],
  "companyInfo": "brief company description"
}}"""

# Postings are truncated before prompting
MAX_POSTING_CHARS = 8000

# Skills recognized by the heuristic fallback
COMMON_SKILLS = [
    "javascript",
    "typescript",
    "python",
    "java",
    "react",
    "node",
    "sql",
    "aws",
    "docker",
    "kubernetes",
    "git",
    "agile",
    "rest",
    "api",
]


def basic_job_analysis(raw_text: str, company: str = "", position: str = "") -> JobAnalysis:
    """
    Heuristic analysis used when the text-generation service fails.

    Experience level by substring, skills from COMMON_SKILLS (also used as keywords).
    """
    lower_text = raw_text.lower()

    experience_level = "mid"
    if any(term in lower_text for term in ("entry", "junior", "0-2 years")):
        experience_level = "entry"
    elif any(term in lower_text for term in ("senior", "5+ years", "lead")):
        experience_level = "senior"

    skills = tuple(skill for skill in COMMON_SKILLS if skill in lower_text)

    return JobAnalysis(
        skills=skills,
        experience_level=experience_level,
        keywords=skills,
        company=company,
        position=position,
    )


def analyze_job_description(
    raw_text: str,
    service: TextGenerationService,
    company: str = "",
    position: str = "",
) -> JobAnalysis:
    """
    Analyze a job posting into a JobAnalysis.

    Args:
        raw_text: Posting text
        service: Text-generation service
        company: Hiring company, copied onto the analysis
        position: Position title, copied onto the analysis

    Returns:
        JobAnalysis from the model, or from basic_job_analysis() on any service failure
    """
    prompt = _USER_PROMPT_TEMPLATE.format(content=raw_text[:MAX_POSTING_CHARS])

    try:
        payload = service.complete_json(
            prompt, system_prompt=_SYSTEM_PROMPT, temperature=0.3, max_tokens=2000
        )
    except LLMServiceError as e:
        logger.warning(f"Job analysis fell back to heuristics: {e.message}")
        return basic_job_analysis(raw_text, company=company, position=position)

    return JobAnalysis.from_dict(payload, company=company, position=position)
