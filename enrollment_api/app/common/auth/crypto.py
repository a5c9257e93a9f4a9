"""加密工具模块"""
from __future__ import annotations

import re
import secrets
import string

# 注册码字符表（大写字母 + 数字）
ENROLLMENT_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_enrollment_code(length: int = 8, alphabet: str = ENROLLMENT_CODE_ALPHABET) -> str:
    """生成注册码

    使用 secrets 均匀抽取字符，不保证唯一，冲突由存储层的唯一约束处理。
    """
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def enrollment_code_pattern(length: int = 8) -> re.Pattern[str]:
    """规范化后注册码的格式"""
    return re.compile(rf"^[A-Z0-9]{{{length}}}$")


def normalize_enrollment_code(raw: str | None) -> str:
    """去除首尾空白并转为大写"""
    return (raw or "").strip().upper()


__all__ = [
    "ENROLLMENT_CODE_ALPHABET",
    "generate_enrollment_code",
    "enrollment_code_pattern",
    "normalize_enrollment_code",
]
