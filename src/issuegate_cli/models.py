from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from issuegate.models import Severity, Status
from issuegate.policy import FailOn


class LocationPayload(BaseModel):
    file: str
    line: int = 0


class IssuePayload(BaseModel):
    message: str
    location: Optional[LocationPayload] = None
    severity: Severity = Severity.MEDIUM
    recommendation: str = ""

    @field_validator("severity", mode="before")
    @classmethod
    def lower_severity(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class ResultPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    analyzer_id: str = Field(alias="analyzerId")
    status: Status
    message: str = ""
    issues: List[IssuePayload] = Field(default_factory=list)
    execution_time: float = Field(default=0.0, alias="executionTime")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("status", mode="before")
    @classmethod
    def lower_status(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class ResultsPayload(BaseModel):
    results: List[ResultPayload]


class GateSettings(BaseModel):
    """Scalar settings from [tool.issuegate]; ignore_errors is validated by the core"""

    fail_on: FailOn = FailOn.CRITICAL
    fail_threshold: Optional[int] = Field(default=None, ge=0, le=100)
    dont_report: List[str] = Field(default_factory=list)
    baseline_file: Optional[str] = ".issuegate-baseline.json"
    marker: str = Field(default="@issuegate-ignore", min_length=1)
    base_path: Optional[str] = None
    ignore_errors: Any = None
