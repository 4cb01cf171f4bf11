from __future__ import annotations

from typing import Optional


class OcsexecError(RuntimeError):
    exit_code: int = 1


class SchemaError(OcsexecError):
    """Interface file is malformed or declares something we cannot run."""

    exit_code = 3

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return base + "\n" + "\n".join(f"  - {e}" for e in self.errors)


class SynthesisError(OcsexecError):
    exit_code = 4


class InvocationError(OcsexecError):
    exit_code = 5

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ReportError(OcsexecError):
    exit_code = 6


class WalletError(ValueError):
    exit_code = 2
