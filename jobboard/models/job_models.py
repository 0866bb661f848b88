
# jobboard/models/job_models.py

import math
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Any
from enum import Enum

class UserRole(str, Enum):
    CANDIDATE = "CANDIDATE"
    COMPANY = "COMPANY"

class ContractType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"

class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class WireModel(BaseModel):
    """Backend JSON is camelCase; attributes are snake_case."""
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class User(WireModel):
    id: str
    email: str
    name: str = ""
    role: UserRole = Field(..., alias="userType")
    token: Optional[str] = Field(default=None, description="Bearer token for authenticated calls")

class Job(WireModel):
    id: str
    title: str
    company_id: str = Field(default="", alias="companyId")
    company_name: str = Field(default="", alias="companyName")
    location: str = ""
    description: str = ""
    requirements: List[str] = Field(default_factory=list)
    salary: Optional[str] = None
    contract_type: ContractType = Field(default=ContractType.FULL_TIME, alias="type")
    created_at: str = Field(default="", alias="createdAt")

class NewJob(WireModel):
    title: str
    location: str
    description: str
    requirements: List[str] = Field(default_factory=list)
    contract_type: ContractType = Field(default=ContractType.FULL_TIME, alias="type")
    salary: Optional[str] = None

class Application(WireModel):
    id: str
    job_id: str = Field(..., alias="jobId")
    candidate_id: str = Field(default="", alias="candidateId")
    candidate_name: str = Field(default="", alias="candidateName")
    candidate_email: str = Field(default="", alias="candidateEmail")
    cv_reference: str = Field(default="", alias="cvUrl", description="Storage key of the uploaded CV")
    status: ApplicationStatus = ApplicationStatus.PENDING
    applied_at: str = Field(default="", alias="appliedAt")
    ai_match_score: Optional[float] = Field(default=None, alias="aiMatchScore")
    ai_feedback: Optional[str] = Field(default=None, alias="aiFeedback")

class ApplicationSubmission(WireModel):
    job_id: str = Field(..., alias="jobId")
    cv_reference: str = Field(..., alias="cvUrl")
    candidate_name: str = Field(..., alias="candidateName")
    candidate_email: str = Field(..., alias="candidateEmail")

class UploadTarget(WireModel):
    upload_url: str = Field(..., alias="uploadUrl")
    file_key: str = Field(..., alias="fileKey")

class CandidateProfile(WireModel):
    id: str = ""
    name: str
    email: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: str = ""
    cv_reference: Optional[str] = Field(default=None, alias="cvUrl")


class MatchAnalysis(BaseModel):
    """Compatibility score (0-100) and rationale for one candidate/job pair."""
    score: float = 0
    feedback: str = ""
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> float:
        try:
            score = float(value)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(score):
            return 0.0
        return max(0.0, min(100.0, score))

    @field_validator("feedback", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("pros", "cons", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(v) for v in value if v is not None]

    @classmethod
    def from_response(cls, payload: Any) -> "MatchAnalysis":
        """Coerce a raw model payload; absent fields fall back to empty values."""
        data = payload if isinstance(payload, dict) else {}
        return cls(
            score=data.get("score"),
            feedback=data.get("feedback"),
            pros=data.get("pros"),
            cons=data.get("cons"),
        )
