"""认证模块"""
from __future__ import annotations

from .crypto import (
    ENROLLMENT_CODE_ALPHABET,
    generate_enrollment_code,
    enrollment_code_pattern,
    normalize_enrollment_code
)
from .verifier import (
    Principal,
    TokenVerifier,
    SupabaseTokenVerifier,
    verify_with_timeout,
    build_token_verifier
)

__all__ = [
    "ENROLLMENT_CODE_ALPHABET",
    "generate_enrollment_code",
    "enrollment_code_pattern",
    "normalize_enrollment_code",
    "Principal",
    "TokenVerifier",
    "SupabaseTokenVerifier",
    "verify_with_timeout",
    "build_token_verifier"
]
