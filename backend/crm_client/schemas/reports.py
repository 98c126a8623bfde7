"""Report Schemas — PDF export, email report, login, and preference payloads.

Invariants:
    - EmailReportRequest.recipients: 1-20 addresses, each shaped like an email
    - dashboard_type is one of the three dashboards
"""

import re
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DashboardType = Literal["opportunities", "salesOrders", "helpdesk"]


class PdfReportRequest(BaseModel):
    dashboard_type: DashboardType
    data: Any = None
    filters: dict[str, Any] = Field(default_factory=dict)


class EmailReportRequest(BaseModel):
    """Email report: validates recipient addresses."""
    dashboard_type: DashboardType
    recipients: list[str] = Field(min_length=1, max_length=20)
    subject: str = Field("Company A - Dashboard Report", min_length=1, max_length=200)
    message: str = Field(
        "Please find attached the latest dashboard report.", max_length=5000,
    )

    @field_validator("recipients")
    @classmethod
    def check_addresses(cls, v: list[str]) -> list[str]:
        cleaned = [r.strip() for r in v]
        bad = [r for r in cleaned if not _EMAIL.match(r)]
        if bad:
            raise ValueError(f"invalid email address: {', '.join(bad)}")
        return cleaned


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=1, max_length=200)


class PreferencesUpdate(BaseModel):
    """Free-form preference object; theme and pageSize are checked when present."""
    model_config = {"extra": "allow"}

    theme: Literal["light", "dark"] | None = None
    pageSize: int | None = Field(None, ge=1, le=500)
