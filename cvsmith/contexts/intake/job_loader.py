"""
Load a job description from YAML or plain text.

YAML files carry company, position, optional raw_text, and an optional
analysis block in the stored (camelCase) format. Any other file is read as the
raw posting text, with company and position supplied by the caller.
"""

from pathlib import Path

from omegaconf import OmegaConf

from cvsmith.contexts.intake.job_analysis import JobAnalysis, JobDescription

YAML_SUFFIXES = (".yaml", ".yml")


def load_job_description(
    path: Path,
    user_id: str,
    job_description_id: str = "",
    company: str = "",
    position: str = "",
) -> JobDescription:
    """
    Load a job description owned by user_id.

    Args:
        path: YAML record or plain-text posting
        user_id: Owning user
        job_description_id: Record id (defaults to the file stem)
        company, position: Used when the file does not name them

    Raises:
        FileNotFoundError: If path does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Job description not found: {path}")

    record_id = job_description_id or path.stem

    if path.suffix.lower() not in YAML_SUFFIXES:
        return JobDescription(
            id=record_id,
            user_id=user_id,
            company=company,
            position=position,
            raw_text=path.read_text(encoding="utf-8"),
        )

    data = OmegaConf.to_container(OmegaConf.load(path), resolve=True) or {}
    company = str(data.get("company") or company)
    position = str(data.get("position") or position)
    return JobDescription(
        id=str(data.get("id") or record_id),
        user_id=user_id,
        company=company,
        position=position,
        raw_text=str(data.get("raw_text") or ""),
        analysis=JobAnalysis.from_dict(data.get("analysis"), company=company, position=position),
    )
