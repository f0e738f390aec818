from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import ValidationError


class OperationStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    DONE = "DONE"


class OperationErrorDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class StatusSnapshot(BaseModel):
    """One observation of something being polled: an operation or a resource."""

    model_config = ConfigDict(frozen=True)

    status: str
    errors: list[OperationErrorDetail] = Field(default_factory=list)


class OperationSnapshot(StatusSnapshot):
    name: str

    @property
    def done(self) -> bool:
        return self.status == OperationStatus.DONE.value


class ValidationOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    value: str | None = None
    passed: bool


class ValidationReport(BaseModel):
    """Outcomes of the pre-flight checks, in the order they ran."""

    outcomes: list[ValidationOutcome] = Field(default_factory=list)
    source_image: str | None = Field(
        default=None, description="Resolved projects/{p}/global/images/{i} URL"
    )

    @property
    def rejection(self) -> ValidationOutcome | None:
        return next((o for o in self.outcomes if not o.passed), None)

    @property
    def passed(self) -> bool:
        return self.rejection is None

    def raise_for_failure(self) -> None:
        rejection = self.rejection
        if rejection is not None:
            raise ValidationError(rejection.field, rejection.value)
