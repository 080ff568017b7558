"""Builders for well-formed principals used by tooling and tests."""

from __future__ import annotations

from typing import Sequence

from .models import Associate, Identity, Internal, Principal, System, User

DEFAULT_ACCOUNT_NUMBER = "111000"


def user_principal(
    *,
    account_number: str = DEFAULT_ACCOUNT_NUMBER,
    auth_type: str = "basic-auth",
    is_active: bool = True,
    locale: str = "en_US",
    is_org_admin: bool = False,
    username: str = "test@redhat.com",
    email: str = "test@redhat.com",
    first_name: str = "test",
    last_name: str = "user",
    is_internal: bool = True,
) -> Principal:
    """Build one user-type principal."""
    return Principal(
        identity=Identity(
            account_number=account_number,
            auth_type=auth_type,
            type="User",
            user=User(
                is_active=is_active,
                locale=locale,
                is_org_admin=is_org_admin,
                username=username,
                email=email,
                first_name=first_name,
                last_name=last_name,
                is_internal=is_internal,
            ),
        )
    )


def internal_principal(
    *,
    account_number: str = DEFAULT_ACCOUNT_NUMBER,
    auth_type: str | None = None,
    org_id: str = "10001",
) -> Principal:
    """Build one internal principal; these carry the System type."""
    return Principal(
        identity=Identity(
            account_number=account_number,
            auth_type=auth_type or None,
            type="System",
            internal=Internal(org_id=org_id),
        )
    )


def system_principal(
    *,
    account_number: str = DEFAULT_ACCOUNT_NUMBER,
    auth_type: str = "cert-auth",
    cn: str = "760e4a9b-c0cc-4538-8b8c-09d1a6335dd2",
) -> Principal:
    """Build one system-type principal."""
    return Principal(
        identity=Identity(
            account_number=account_number,
            auth_type=auth_type,
            type="System",
            system=System(cn=cn),
        )
    )


def associate_principal(
    *,
    account_number: str = DEFAULT_ACCOUNT_NUMBER,
    auth_type: str = "basic-auth",
    roles: Sequence[str] = (),
    email: str = "test@redhat.com",
    given_name: str = "test",
    rhat_uuid: str = "204f8e50-40b4-45d2-aa84-4bd7382e94d3",
    surname: str = "user",
) -> Principal:
    """Build one associate principal; these carry the User type."""
    return Principal(
        identity=Identity(
            account_number=account_number,
            auth_type=auth_type,
            type="User",
            associate=Associate(
                role=list(roles),
                email=email,
                given_name=given_name,
                rhat_uuid=rhat_uuid,
                surname=surname,
            ),
        )
    )
