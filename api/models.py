"""
API request and response models for the Zela REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
stats/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models only require the fields each operation actually reads. The
original mobile client sent Portuguese field names (nome, senha, tipo); those
are still accepted as aliases.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import User
from stats.models import AggregateReport

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /register."""

    name: str = Field(validation_alias=AliasChoices("name", "nome"))
    email: str
    password: str = Field(validation_alias=AliasChoices("password", "senha"))
    role: str = Field(validation_alias=AliasChoices("role", "tipo"))


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    email: str
    password: str = Field(validation_alias=AliasChoices("password", "senha"))


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a registered user. Has no password field by construction."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


class TokenResponse(BaseModel):
    """Response for POST /login."""

    model_config = ConfigDict(frozen=True)

    token: str


class StatsResponse(BaseModel):
    """Response for GET /estatisticas. Serialized with camelCase keys.

    avgRating is a string with exactly two decimal places ("0.00" when no
    ratings exist), matching what existing dashboards already parse.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total_users: int
    total_appointments: int
    total_payments: int
    avg_rating: str

    @classmethod
    def from_report(cls, report: AggregateReport) -> "StatsResponse":
        return cls(
            total_users=report.total_users,
            total_appointments=report.total_appointments,
            total_payments=report.total_payments,
            avg_rating=f"{report.avg_rating:.2f}",
        )


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
