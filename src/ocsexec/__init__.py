__all__ = [
    # Schema model
    "Mutability",
    "ParamType",
    "ParamSpec",
    "MethodSpec",
    "Schema",
    "load",
    # Engine
    "IntegerBounds",
    "ParameterSynthesizer",
    "synthesize",
    "CallResult",
    "InvocationDispatcher",
    "invoke",
    "ExecutionPipeline",
    "OutcomeRecord",
    "PipelineListener",
    "PipelineState",
    "Status",
    "run_pipeline",
    "Report",
    "assemble",
    "render_text",
    "write_report",
    # Errors
    "OcsexecError",
    "SchemaError",
    "SynthesisError",
    "InvocationError",
    "ReportError",
    "WalletError",
    # Chain clients
    "Balance",
    "ChainClient",
    "ChainError",
    "NonceCounter",
    "OctraClient",
    "EvmClient",
    "create_client",
    # Wallet / config
    "Wallet",
    "load_wallet",
    "RunConfig",
]

from .config import RunConfig
from .engine.dispatch import CallResult, InvocationDispatcher, invoke
from .engine.pipeline import (
    ExecutionPipeline,
    OutcomeRecord,
    PipelineListener,
    PipelineState,
    Status,
    run_pipeline,
)
from .engine.report import Report, assemble, render_text, write_report
from .engine.synth import IntegerBounds, ParameterSynthesizer, synthesize
from .errors import (
    InvocationError,
    OcsexecError,
    ReportError,
    SchemaError,
    SynthesisError,
    WalletError,
)
from .pneuma.client import Balance, ChainClient, ChainError
from .pneuma.evm import EvmClient
from .pneuma.factory import create_client
from .pneuma.nonce import NonceCounter
from .pneuma.octra import OctraClient
from .sigil.wallet import Wallet, load_wallet
from .spec.models import MethodSpec, Mutability, ParamSpec, ParamType, Schema, load
