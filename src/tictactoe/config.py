"""Runtime settings read from ``TICTACTOE_*`` environment variables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
import os

ENV_PREFIX = "TICTACTOE_"


def _env(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _parse_delay(raw: str) -> Tuple[float, float]:
    parts = [p.strip() for p in raw.split(",")]
    try:
        values = [float(p) for p in parts]
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}AI_DELAY must be numbers, got {raw!r}") from exc
    if len(values) == 1:
        values *= 2
    if len(values) != 2 or min(values) < 0 or values[0] > values[1]:
        raise ValueError(f"{ENV_PREFIX}AI_DELAY must be 'min,max' seconds, got {raw!r}")
    return values[0], values[1]


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    ai_delay: Tuple[float, float] = (0.3, 0.8)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw_port = _env(env, "PORT", str(cls.port))
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ValueError(
                f"{ENV_PREFIX}PORT must be an integer, got {raw_port!r}"
            ) from exc
        return cls(
            host=_env(env, "HOST", cls.host),
            port=port,
            log_level=_env(env, "LOG_LEVEL", cls.log_level).upper(),
            ai_delay=_parse_delay(_env(env, "AI_DELAY", "0.3,0.8")),
        )
