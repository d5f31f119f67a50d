"""
Candidate and batch Pydantic schemas - response shapes of the resume upload API.
"""
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from resume_parser.app.core.config import SKILLS_DELIMITER


class CandidateRecord(BaseModel):
    """Cleaned candidate data. Only ever built by the field cleaner."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    skills: Tuple[str, ...] = ()
    experience_years: str = ""
    education: str = ""
    location: str = ""
    summary: str = ""
    filename: str = ""

    def to_row(self) -> dict[str, Any]:
        """Flat spreadsheet row: skills joined into one cell."""
        row = self.model_dump()
        row["skills"] = SKILLS_DELIMITER.join(self.skills)
        return row


class FailedFile(BaseModel):
    filename: str
    error: str


class BatchResult(BaseModel):
    successful: List[CandidateRecord] = Field(default_factory=list)
    failed: List[FailedFile] = Field(default_factory=list)
    alreadyProcessed: List[str] = Field(default_factory=list)


class SessionStats(BaseModel):
    totalProcessedFiles: int = 0
    totalResumes: int = 0
    processedFiles: List[str] = Field(default_factory=list)


class ExportRequest(BaseModel):
    data: List[dict[str, Any]] = Field(default_factory=list)
    includeExisting: bool = False
    existingData: Optional[List[dict[str, Any]]] = None


class SpreadsheetLoadResult(BaseModel):
    data: List[dict[str, Any]] = Field(default_factory=list)
    recordCount: int = 0
    columns: List[str] = Field(default_factory=list)
