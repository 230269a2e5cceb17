from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (1/0, true/false, yes/no, on/off), got {raw!r}")


def _env_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    # zero-dependency jobs enter the registry (False drops them silently)
    register_empty_jobs: bool = True
    # reject events that skip or repeat lifecycle stages
    strict_lifecycle: bool = False
    # raise the first MissingJob after add_job finishes wiring
    strict_registration: bool = False
    # driver thread pool size (None -> cpu_count - 1)
    max_workers: Optional[int] = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            register_empty_jobs=_env_bool(env, "SYMFLOW_REGISTER_EMPTY_JOBS", True),
            strict_lifecycle=_env_bool(env, "SYMFLOW_STRICT_LIFECYCLE", False),
            strict_registration=_env_bool(env, "SYMFLOW_STRICT_REGISTRATION", False),
            max_workers=_env_int(env, "SYMFLOW_WORKERS"),
        )
