"""Pydantic models for the decoded ``X-Rh-Identity`` principal."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _IdentityModel(BaseModel):
    """Frozen base; unknown keys from the gateway are tolerated."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class Associate(_IdentityModel):
    """Associate-type identity details."""

    email: str = ""
    given_name: str = Field(default="", alias="givenName")
    rhat_uuid: str = Field(default="", alias="rhatUUID")
    role: list[str] = Field(default_factory=list, alias="Role")
    surname: str = ""


class Internal(_IdentityModel):
    """Internal-type identity details."""

    auth_time: float | None = None
    cross_access: bool | None = None
    org_id: str = ""


class System(_IdentityModel):
    """System-type identity details."""

    cert_type: str | None = None
    cluster_id: str | None = None
    cn: str = ""


class User(_IdentityModel):
    """User-type identity details."""

    email: str = ""
    first_name: str = ""
    is_active: bool = False
    is_internal: bool = False
    is_org_admin: bool = False
    last_name: str = ""
    locale: str = ""
    user_id: str = ""
    username: str = ""


class X509(_IdentityModel):
    """Certificate subject and issuer for x509-type identities."""

    subject_dn: str = ""
    issuer_dn: str = ""


class Identity(_IdentityModel):
    """Identity body carried under the ``identity`` key."""

    account_number: str | None = None
    associate: Associate | None = None
    auth_type: str | None = None
    employee_account_number: str | None = None
    internal: Internal | None = None
    org_id: str = ""
    system: System | None = None
    type: str | None = None
    user: User | None = None
    x509: X509 | None = None


class Principal(_IdentityModel):
    """Decoded header payload; request-scoped and never persisted."""

    identity: Identity
    entitlements: Any = None

    @property
    def account_number(self) -> str:
        """Return the account number, or empty string when absent."""
        return self.identity.account_number or ""
