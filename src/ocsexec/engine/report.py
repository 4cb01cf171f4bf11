"""
Report Assembler and report sink.

``assemble`` is pure: it checks the outcomes against the schema and freezes
them into a Report. ``render_text`` / ``write_report`` turn a Report into the
human-readable file; the engine itself knows nothing about the format.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from ..errors import ReportError
from ..pneuma.client import Balance
from ..spec.models import Mutability, Schema
from ..spec.schemas import write_json
from ..utils import utc_now_rfc3339
from .pipeline import OutcomeRecord, Status


@dataclass(frozen=True)
class Report:
    wallet_address: str
    starting_balance: Optional[Balance]
    records: tuple[OutcomeRecord, ...]
    contract: Optional[str] = None

    @property
    def ok_count(self) -> int:
        return sum(1 for r in self.records if r.status is Status.OK)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.records if r.status is Status.FAILED)

    def to_dict(self) -> dict[str, Any]:
        balance = self.starting_balance
        return {
            "wallet_address": self.wallet_address,
            "contract": self.contract,
            "starting_balance": None
            if balance is None
            else {"amount": str(balance.amount), "unit": balance.unit, "nonce": balance.nonce},
            "summary": {
                "total": len(self.records),
                "ok": self.ok_count,
                "failed": self.failed_count,
            },
            "records": [r.to_dict() for r in self.records],
        }


def assemble(
    wallet_address: str,
    starting_balance: Optional[Balance],
    outcomes: Iterable[OutcomeRecord],
    schema: Optional[Schema] = None,
    contract: Optional[str] = None,
) -> Report:
    """
    Freeze pipeline outcomes into a Report.

    Raises:
        ReportError: If ``schema`` is given and the outcomes do not cover
                     its methods exactly once each, in declaration order
    """
    records = tuple(outcomes)
    if schema is not None:
        if len(records) != len(schema):
            raise ReportError(
                f"Outcome count {len(records)} does not match method count {len(schema)}"
            )
        for position, (record, method) in enumerate(zip(records, schema)):
            if record.method != method.name:
                raise ReportError(
                    f"Outcome {position} is for {record.method!r}, expected {method.name!r}"
                )
        if contract is None:
            contract = schema.contract
    return Report(
        wallet_address=wallet_address,
        starting_balance=starting_balance,
        records=records,
        contract=contract,
    )


def render_line(record: OutcomeRecord) -> str:
    if record.status is Status.FAILED:
        return f"{record.display_name}: Error - {record.error}"
    if record.mutability is Mutability.WRITE:
        return f"{record.display_name}: TX Hash {record.payload}"
    return f"{record.display_name}: {record.payload}"


def render_text(report: Report, generated_at: Optional[str] = None) -> str:
    generated_at = generated_at or utc_now_rfc3339()
    lines = [
        f"=== Run {generated_at} ===",
        f"Wallet: {report.wallet_address}",
    ]
    if report.starting_balance is not None:
        lines.append(f"Balance: {report.starting_balance}")
    if report.contract:
        lines.append(f"Contract: {report.contract}")
    lines.extend(render_line(r) for r in report.records)
    lines.append(
        f"Summary: {report.ok_count} ok, {report.failed_count} failed, {len(report.records)} total"
    )
    return "\n".join(lines) + "\n"


def write_report(report: Report, path: Path, fmt: str = "text") -> Path:
    """
    Persist a report.

    ``text`` appends a block to ``path`` so successive runs accumulate in one
    file; ``json`` overwrites ``path`` with a single document.
    """
    generated_at = utc_now_rfc3339()
    if fmt == "json":
        payload = report.to_dict()
        payload["generated_at"] = generated_at
        write_json(path, payload)
        return path
    if fmt == "text":
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(render_text(report, generated_at=generated_at))
        return path
    raise ValueError(f"Unsupported report format: {fmt!r}")
