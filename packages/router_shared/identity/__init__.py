"""Public identity API: header decoding, middleware and builders."""

from .codec import decode_identity, encode_identity
from .errors import (
    IdentityDecodeError,
    IdentityError,
    IdentityTypeError,
    MissingIdentityError,
)
from .factories import (
    DEFAULT_ACCOUNT_NUMBER,
    associate_principal,
    internal_principal,
    system_principal,
    user_principal,
)
from .middleware import IDENTITY_HEADER, IdentityMiddleware, get_identity
from .models import Associate, Identity, Internal, Principal, System, User, X509

__all__ = [
    "Associate",
    "DEFAULT_ACCOUNT_NUMBER",
    "IDENTITY_HEADER",
    "Identity",
    "IdentityDecodeError",
    "IdentityError",
    "IdentityMiddleware",
    "IdentityTypeError",
    "Internal",
    "MissingIdentityError",
    "Principal",
    "System",
    "User",
    "X509",
    "associate_principal",
    "decode_identity",
    "encode_identity",
    "get_identity",
    "internal_principal",
    "system_principal",
    "user_principal",
]
