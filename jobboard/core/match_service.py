# jobboard/core/match_service.py

import json
import logging
from typing import Dict, Any, Optional

import litellm

from jobboard.config import settings
from jobboard.core.errors import CredentialRequired
from jobboard.models.job_models import Application, CandidateProfile, Job, MatchAnalysis

logger = logging.getLogger(__name__)

PLACEHOLDER_KEYS = {
    "votre_cle_gemini_ici",
    "your_api_key_here",
    "your-api-key",
    "changeme",
}

# Substrings of provider errors meaning the key / project itself is unusable
_CREDENTIAL_ERROR_HINTS = (
    "Requested entity was not found",
    "API key not valid",
    "API_KEY_INVALID",
)

MATCH_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "score": {"type": "number", "description": "Score from 0 to 100"},
        "feedback": {"type": "string", "description": "Constructive feedback for the recruiter"},
        "pros": {"type": "array", "items": {"type": "string"}, "description": "Strengths"},
        "cons": {"type": "array", "items": {"type": "string"}, "description": "Identified gaps"},
    },
    "required": ["score", "feedback", "pros", "cons"],
    "additionalProperties": False,
}


def is_valid_api_key(key: Optional[str]) -> bool:
    if not key or key.strip() in PLACEHOLDER_KEYS:
        return False
    return len(key) > 10


def build_candidate_profile(
    application: Application, cv_text: str = "", job: Optional[Job] = None
) -> CandidateProfile:
    """Candidate data for the prompt: the CV text, plus the job requirements it mentions."""
    text = cv_text or ""
    skills = []
    if job is not None and text:
        lowered = text.lower()
        skills = [req for req in job.requirements if req.strip() and req.lower() in lowered]
    return CandidateProfile(
        id=application.candidate_id,
        name=application.candidate_name,
        email=application.candidate_email,
        skills=skills,
        experience=text,
        cv_reference=application.cv_reference or None,
    )


class MatchService:
    """Scores a candidate against a job posting with a single JSON-constrained completion."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[int] = None,
    ):
        self.api_key = settings.LLM_API_KEY if api_key is None else api_key
        self.model = model or settings.full_model_id()
        self.base_url = base_url or settings.LLM_BASE_URL
        self.temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
        self.timeout = timeout or settings.LLM_REQUEST_TIMEOUT

    @property
    def is_configured(self) -> bool:
        return is_valid_api_key(self.api_key)

    def build_prompt(self, job: Job, candidate: CandidateProfile) -> str:
        return (
            "As an HR expert, analyse how well this candidate fits this position.\n\n"
            "POSITION:\n"
            f"Title: {job.title}\n"
            f"Description: {job.description}\n"
            f"Requirements: {', '.join(job.requirements)}\n\n"
            "CANDIDATE:\n"
            f"Name: {candidate.name}\n"
            f"Skills: {', '.join(candidate.skills)}\n"
            f"Experience: {candidate.experience}\n\n"
            "Return JSON with keys: score (0-100 number), feedback (string), "
            "pros (list of strings), cons (list of strings)."
        )

    def analyze_match(self, job: Job, candidate: CandidateProfile) -> Optional[MatchAnalysis]:
        if not self.is_configured:
            raise CredentialRequired()

        try:
            resp = litellm.completion(
                model=self.model,
                api_base=self.base_url,
                api_key=self.api_key,
                timeout=self.timeout,
                temperature=self.temperature,
                messages=[{"role": "user", "content": self.build_prompt(job, candidate)}],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": "match_analysis", "schema": MATCH_SCHEMA, "strict": True},
                },
            )
        except litellm.AuthenticationError as e:
            logger.error("Match analysis rejected the credential: %s", e)
            raise CredentialRequired("The AI API key was rejected") from e
        except Exception as e:
            if any(hint in str(e) for hint in _CREDENTIAL_ERROR_HINTS):
                logger.error("Match analysis credential/project invalid: %s", e)
                raise CredentialRequired("The AI API key or project is invalid") from e
            logger.error("Match analysis request failed: %s", e)
            return None

        payload = _parse_json(_response_text(resp))
        if payload is None:
            return None
        logger.info("Match analysis for job=%s candidate=%s score=%s", job.id, candidate.id, payload.get("score"))
        return MatchAnalysis.from_response(payload)


def _response_text(resp: Any) -> str:
    # litellm returns a dict-like ModelResponse
    try:
        return resp.get("choices", [{}])[0].get("message", {}).get("content", "") or ""
    except (AttributeError, IndexError, TypeError):
        return str(resp or "")


def _parse_json(raw: str) -> Optional[Dict[str, Any]]:
    text = raw.strip()
    if text.startswith("```"):
        # ```json ... ``` fences
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    try:
        data = json.loads(text)
    except ValueError:
        logger.warning("Match analysis returned non-JSON content (truncated): %s", raw[:120])
        return None
    if not isinstance(data, dict):
        logger.warning("Match analysis returned %s instead of an object", type(data).__name__)
        return None
    return data
