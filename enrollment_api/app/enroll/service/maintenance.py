"""维护命令业务逻辑"""
from __future__ import annotations

import json
import os
import threading
from collections import deque
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Callable, Optional

from enrollment_api.app.core.config import Settings
from enrollment_api.app.common.auth import Principal
from enrollment_api.app.common.log import logger
from enrollment_api.app.utils.timezone import utcnow, isoformat

RESULT_PREVIEW_LENGTH = 120

# env 命令只报告是否设置，不输出取值
REPORTED_ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "DATABASE_URL",
    "PORT",
    "LOG_LEVEL",
)


@dataclass(frozen=True)
class MaintenanceLogEntry:
    time: str
    actor: str
    command: str
    result_preview: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class MaintenanceLog:
    """定长维护日志，最新的记录在前，超出容量时淘汰最旧的记录"""

    def __init__(self, capacity: int = 25):
        self.capacity = capacity
        self._entries: deque[MaintenanceLogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(self, entry: MaintenanceLogEntry) -> None:
        with self._lock:
            self._entries.appendleft(entry)

    def list(self) -> list[MaintenanceLogEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __bool__(self) -> bool:
        # 空日志也是有效实例
        return True


def preview(result: Any, length: int = RESULT_PREVIEW_LENGTH) -> str:
    """结果摘要"""
    text = json.dumps(result, ensure_ascii=False, default=str, separators=(",", ":"))
    return text[:length]


class MaintenanceService:
    """维护命令业务逻辑类"""

    DEFAULT_COMMAND = "status"

    def __init__(
        self,
        log: MaintenanceLog,
        settings: Settings,
        started_at: datetime,
        clock: Callable[[], datetime] = utcnow
    ):
        self.log = log
        self.settings = settings
        self.started_at = started_at
        self._clock = clock
        self._handlers: dict[str, Callable[[], Any]] = {
            "status": self._status,
            "uptime": self._uptime,
            "env": self._env,
            "logs": self.list_logs,
            "help": self._help,
        }

    @classmethod
    def normalize_command(cls, command: Optional[str]) -> str:
        return (command or "").strip().lower() or cls.DEFAULT_COMMAND

    def run(self, principal: Principal, command: Optional[str]) -> dict[str, Any]:
        """执行维护命令并写入维护日志，未知命令返回错误信息而不是失败状态"""
        name = self.normalize_command(command)
        handler = self._handlers.get(name)
        if handler is None:
            result: Any = {"error": f"Unknown command: {name}"}
            logger.warning(f"未知维护命令: {name}, actor={principal.id}")
        else:
            result = handler()

        now = self._clock()
        self.log.record(MaintenanceLogEntry(
            time=isoformat(now),
            actor=principal.email or principal.id,
            command=name,
            result_preview=preview(result)
        ))
        logger.info(f"维护命令执行完成: command={name}, actor={principal.id}")

        return {"time": isoformat(now), "command": name, "result": result}

    def list_logs(self) -> list[dict[str, str]]:
        return [entry.to_dict() for entry in self.log.list()]

    def _status(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "service": self.settings.app_name,
            "version": self.settings.app_version
        }

    def _uptime(self) -> dict[str, Any]:
        uptime = self._clock() - self.started_at
        return {
            "started_at": isoformat(self.started_at),
            "uptime_seconds": round(uptime.total_seconds(), 3)
        }

    def _env(self) -> dict[str, bool]:
        configured = {
            "SUPABASE_URL": bool(self.settings.supabase_url),
            "SUPABASE_ANON_KEY": bool(self.settings.supabase_anon_key),
            "SUPABASE_SERVICE_ROLE_KEY": self.settings.supabase_service_role_key is not None,
        }
        return {
            name: configured.get(name, False) or name in os.environ
            for name in REPORTED_ENV_VARS
        }

    def _help(self) -> dict[str, list[str]]:
        return {"commands": sorted(self._handlers)}
