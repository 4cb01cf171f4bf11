"""Tests for the execution pipeline."""

from __future__ import annotations

import pytest

from conftest import (
    WALLET_ADDRESS,
    FakeChainClient,
    FlakyChainClient,
    read_method,
    write_method,
)
from ocsexec.engine.pipeline import (
    ExecutionPipeline,
    PipelineListener,
    PipelineState,
    Status,
    run_pipeline,
)
from ocsexec.engine.report import assemble
from ocsexec.engine.synth import IntegerBounds, ParameterSynthesizer
from ocsexec.pneuma.client import ChainError
from ocsexec.spec.models import ParamSpec, Schema


class RecordingListener(PipelineListener):
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def method_started(self, index, method, args):  # type: ignore[override]
        self.events.append(("start", index, method.name))

    def attempt_failed(self, index, method, attempt, error):  # type: ignore[override]
        self.events.append(("retry", index, attempt))

    def method_recorded(self, index, method, record):  # type: ignore[override]
        self.events.append(("record", index, record.status.value))


class TestScenarios:
    def test_greeting_then_claim(self, greeting_claim_schema: Schema) -> None:
        client = FakeChainClient(query_results={"greeting": "Hello, oct1abc!"}, tx_prefix="0x")
        synth = ParameterSynthesizer.seeded(99, IntegerBounds(low=1, high=100))

        outcomes = run_pipeline(greeting_claim_schema, client, WALLET_ADDRESS, synthesizer=synth)
        report = assemble(WALLET_ADDRESS, client.get_balance(), outcomes, schema=greeting_claim_schema)

        assert len(report.records) == 2
        greeting, claim = report.records
        assert greeting.status is Status.OK
        assert greeting.payload == "Hello, oct1abc!"
        assert claim.status is Status.OK
        assert isinstance(claim.payload, str) and claim.payload

        kind, name, args = client.calls[1]
        assert (kind, name) == ("tx", "claim")
        assert isinstance(args["amount"], int)
        assert 1 <= args["amount"] <= 100

    def test_transport_error_is_isolated(self) -> None:
        schema = Schema(
            methods=(
                read_method("first"),
                write_method("second"),
                read_method("third"),
            )
        )
        client = FakeChainClient(
            query_results={"first": 1, "third": 3},
            failures={"second": ChainError("connection reset by peer", kind=ChainError.TRANSPORT)},
        )

        outcomes = run_pipeline(schema, client, WALLET_ADDRESS)

        assert [o.method for o in outcomes] == ["first", "second", "third"]
        assert [o.status for o in outcomes] == [Status.OK, Status.FAILED, Status.OK]
        assert "connection reset by peer" in (outcomes[1].error or "")
        assert outcomes[1].payload is None
        assert outcomes[0].payload == 1
        assert outcomes[2].payload == 3

    def test_unknown_param_type_does_not_abort(self) -> None:
        schema = Schema(
            methods=(
                write_method("weird", ParamSpec("blob", "bytes32")),
                read_method("after"),
            )
        )
        client = FakeChainClient(query_results={"after": "still here"})

        outcomes = run_pipeline(schema, client, WALLET_ADDRESS)

        assert outcomes[0].status is Status.FAILED
        assert outcomes[0].attempts == 0
        assert "bytes32" in (outcomes[0].error or "")
        assert outcomes[1].status is Status.OK
        assert [c[1] for c in client.calls] == ["after"]


class TestCoverage:
    @pytest.mark.parametrize("failing", [set(), {"m0"}, {"m2", "m4"}, {f"m{i}" for i in range(6)}])
    def test_one_record_per_method_in_order(self, failing: set[str]) -> None:
        methods = tuple(
            write_method(f"m{i}") if i % 2 else read_method(f"m{i}") for i in range(6)
        )
        schema = Schema(methods=methods)
        client = FakeChainClient(failures={name: ChainError("nope") for name in failing})

        outcomes = run_pipeline(schema, client, WALLET_ADDRESS)

        assert [o.method for o in outcomes] == schema.names
        assert {o.method for o in outcomes if o.status is Status.FAILED} == failing

    def test_address_params_get_wallet_address(self) -> None:
        schema = Schema(methods=(read_method("balanceOf", ParamSpec("who", "address")),))
        client = FakeChainClient()
        run_pipeline(schema, client, WALLET_ADDRESS)
        assert client.calls[0][2] == {"who": WALLET_ADDRESS}

    def test_state_complete_after_run(self, greeting_claim_schema: Schema) -> None:
        pipeline = ExecutionPipeline(greeting_claim_schema, FakeChainClient(), WALLET_ADDRESS)
        assert pipeline.state is PipelineState.PENDING
        pipeline.run()
        assert pipeline.state is PipelineState.COMPLETE
        assert len(pipeline.outcomes) == 2

    def test_empty_schema(self) -> None:
        assert run_pipeline(Schema(methods=()), FakeChainClient(), WALLET_ADDRESS) == []


class TestRetries:
    def test_write_retried_until_success(self) -> None:
        schema = Schema(methods=(write_method("claim"),))
        client = FlakyChainClient(fail_times=2)
        sleeps: list[float] = []
        listener = RecordingListener()

        outcomes = run_pipeline(
            schema,
            client,
            WALLET_ADDRESS,
            write_attempts=3,
            retry_delay=2.0,
            sleep=sleeps.append,
            listener=listener,
        )

        assert outcomes[0].status is Status.OK
        assert outcomes[0].payload == "0xflaky"
        assert outcomes[0].attempts == 3
        assert len(client.calls) == 3
        assert sleeps == [2.0, 2.0]
        assert ("retry", 0, 1) in listener.events and ("retry", 0, 2) in listener.events

    def test_write_gives_up_after_attempts(self) -> None:
        schema = Schema(methods=(write_method("claim"), read_method("after")))
        client = FlakyChainClient(fail_times=10)

        outcomes = run_pipeline(schema, client, WALLET_ADDRESS, write_attempts=3, sleep=lambda s: None)

        assert outcomes[0].status is Status.FAILED
        assert outcomes[0].attempts == 3
        assert outcomes[1].status is Status.OK
        assert [c[0] for c in client.calls] == ["tx", "tx", "tx", "query"]

    def test_reads_never_retried(self) -> None:
        schema = Schema(methods=(read_method("greeting"),))
        client = FakeChainClient(failures={"greeting": ChainError("down")})
        outcomes = run_pipeline(schema, client, WALLET_ADDRESS, write_attempts=5, sleep=lambda s: None)
        assert outcomes[0].status is Status.FAILED
        assert len(client.calls) == 1

    def test_invalid_attempts(self, greeting_claim_schema: Schema) -> None:
        with pytest.raises(ValueError):
            ExecutionPipeline(greeting_claim_schema, FakeChainClient(), WALLET_ADDRESS, write_attempts=0)


class TestPacing:
    def test_delay_between_methods_only(self) -> None:
        schema = Schema(methods=(read_method("a"), read_method("b"), read_method("c")))
        sleeps: list[float] = []
        run_pipeline(schema, FakeChainClient(), WALLET_ADDRESS, call_delay=2.0, sleep=sleeps.append)
        assert sleeps == [2.0, 2.0]

    def test_listener_sees_every_method(self, greeting_claim_schema: Schema) -> None:
        listener = RecordingListener()
        run_pipeline(greeting_claim_schema, FakeChainClient(), WALLET_ADDRESS, listener=listener)
        assert listener.events == [
            ("start", 0, "greeting"),
            ("record", 0, "ok"),
            ("start", 1, "claim"),
            ("record", 1, "ok"),
        ]


class TestBroadcastWrites:
    @pytest.mark.parametrize("kind", [ChainError.REVERTED, ChainError.TIMEOUT])
    def test_write_with_known_hash_is_not_resent(self, kind: str) -> None:
        schema = Schema(methods=(write_method("claim"), read_method("after")))
        client = FakeChainClient(
            failures={"claim": ChainError("transaction 0xdead failed", kind=kind, tx_id="0xdead")}
        )
        sleeps: list[float] = []

        outcomes = run_pipeline(
            schema, client, WALLET_ADDRESS, write_attempts=3, retry_delay=2.0, sleep=sleeps.append
        )

        assert [c[:2] for c in client.calls] == [("tx", "claim"), ("query", "after")]
        assert outcomes[0].status is Status.FAILED
        assert outcomes[0].attempts == 1
        assert outcomes[0].payload == "0xdead"
        assert "0xdead" in (outcomes[0].error or "")
        assert sleeps == []

    def test_rejected_submission_still_retried(self) -> None:
        schema = Schema(methods=(write_method("claim"),))
        client = FakeChainClient(
            failures={"claim": ChainError("api error (400): nonce too low", kind=ChainError.REJECTED)}
        )

        outcomes = run_pipeline(schema, client, WALLET_ADDRESS, write_attempts=3, sleep=lambda s: None)

        assert len(client.calls) == 3
        assert outcomes[0].attempts == 3
        assert outcomes[0].payload is None
