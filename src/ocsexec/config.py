"""
Run configuration.

Defaults mirror the behaviour the tool has always had against the Octra
testnet: integers in 1..100, three attempts per transaction with a two
second pause, two seconds between methods, and a 100 second HTTP timeout.

Every field can be overridden from the environment (``OCSEXEC_*``) and from
the CLI; ``.env`` in the working directory is honoured through python-dotenv.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

ENV_PREFIX = "OCSEXEC_"

DEFAULT_WALLET_PATH = Path("wallet.json")
DEFAULT_INTERFACE_PATH = Path("exec_interface.json")
DEFAULT_REPORT_PATH = Path("ocs01_report.txt")

CHAINS = ("octra", "evm")
REPORT_FORMATS = ("text", "json")


@dataclass(frozen=True)
class RunConfig:
    chain: str = "octra"
    int_low: int = 1
    int_high: int = 100
    write_attempts: int = 3
    retry_delay: float = 2.0
    call_delay: float = 2.0
    http_timeout: float = 100.0
    confirm_timeout: float = 0.0
    poll_interval: float = 2.0
    seed: Optional[int] = None
    report_path: Path = DEFAULT_REPORT_PATH
    report_format: str = "text"

    def __post_init__(self) -> None:
        if self.chain not in CHAINS:
            raise ValueError(f"Unsupported chain: {self.chain!r} (expected one of {', '.join(CHAINS)})")
        if self.report_format not in REPORT_FORMATS:
            raise ValueError(f"Unsupported report format: {self.report_format!r}")
        if self.int_low > self.int_high:
            raise ValueError(f"int_low ({self.int_low}) must not exceed int_high ({self.int_high})")
        if self.write_attempts < 1:
            raise ValueError("write_attempts must be at least 1")

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[Path] = None,
    ) -> "RunConfig":
        """Build a config from ``OCSEXEC_*`` variables, falling back to defaults."""
        if env is None:
            load_dotenv(dotenv_path or Path(".env"), override=False)
            env = os.environ

        overrides: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            overrides[f.name] = _coerce(f.name, raw)
        return cls(**overrides)

    def with_overrides(self, **changes: Any) -> "RunConfig":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _coerce(name: str, raw: str) -> Any:
    if name in ("int_low", "int_high", "write_attempts", "seed"):
        return int(raw)
    if name in ("retry_delay", "call_delay", "http_timeout", "confirm_timeout", "poll_interval"):
        return float(raw)
    if name == "report_path":
        return Path(raw)
    return raw
