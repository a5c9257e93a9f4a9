"""通用模块"""
from __future__ import annotations

from .log import logger, setup_logging
from .exception.errors import *
from .response.response_schema import *

__all__ = [
    "logger",
    "setup_logging"
]
