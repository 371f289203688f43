from __future__ import annotations

from pydantic import BaseModel, Field


class UserRef(BaseModel):
    id: str
    email: str
    name: str


class UserOutcome(BaseModel):
    user: UserRef
    ok: bool


class BatchResult(BaseModel):
    sent: int = 0
    failed: int = 0
    per_user: list[UserOutcome] = Field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: list[UserOutcome]) -> "BatchResult":
        sent = sum(1 for outcome in outcomes if outcome.ok)
        return cls(sent=sent, failed=len(outcomes) - sent, per_user=outcomes)


class WelcomeRequest(BaseModel):
    email: str
    name: str
    country: str | None = None
    investment_goals: str | None = None
    risk_tolerance: str | None = None
    preferred_industry: str | None = None


class WelcomeResponse(BaseModel):
    email: str
    sent: bool
