"""
Parameter Synthesizer - argument values for a method's declared parameters.

Policy per type:
- address: the caller's own wallet address
- integer: schema ``example`` if present, else uniform in the configured
  bounds (a parameter's ``max`` narrows the upper bound)
- string / boolean: schema ``example`` if present, else a fixed placeholder
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from ..errors import SynthesisError
from ..spec.models import MethodSpec, ParamSpec, ParamType

STRING_PLACEHOLDER = "test"
BOOLEAN_PLACEHOLDER = True

_TRUE_WORDS = {"true", "1", "yes"}
_FALSE_WORDS = {"false", "0", "no"}


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


@dataclass(frozen=True)
class IntegerBounds:
    low: int = 1
    high: int = 100

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(f"Empty integer range [{self.low}, {self.high}]")

    def for_param(self, param: ParamSpec) -> tuple[int, int]:
        high = self.high if param.max is None else min(self.high, param.max)
        return self.low, high


class ParameterSynthesizer:
    def __init__(
        self,
        bounds: Optional[IntegerBounds] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.bounds = bounds or IntegerBounds()
        self.rng: RandomSource = rng if rng is not None else random.Random()

    @classmethod
    def seeded(cls, seed: Optional[int], bounds: Optional[IntegerBounds] = None) -> "ParameterSynthesizer":
        return cls(bounds=bounds, rng=random.Random(seed))

    def synthesize(self, method: MethodSpec, known_address: str) -> dict[str, Any]:
        """
        Produce InvocationArgs for one method.

        Raises:
            SynthesisError: If a parameter's type is unrecognized or no
                            valid value can be produced for it
        """
        return {p.name: self._value_for(method, p, known_address) for p in method.params}

    def _value_for(self, method: MethodSpec, param: ParamSpec, known_address: str) -> Any:
        param_type = param.param_type

        if param_type is ParamType.ADDRESS:
            return known_address

        if param_type is ParamType.INTEGER:
            if param.example is not None:
                return _example_int(method, param)
            low, high = self.bounds.for_param(param)
            if low > high:
                raise SynthesisError(
                    f"{method.name}.{param.name}: max={param.max} is below the lower bound {low}"
                )
            return self.rng.randint(low, high)

        if param_type is ParamType.STRING:
            return STRING_PLACEHOLDER if param.example is None else str(param.example)

        if param_type is ParamType.BOOLEAN:
            if param.example is None:
                return BOOLEAN_PLACEHOLDER
            return _example_bool(method, param)

        raise SynthesisError(
            f"{method.name}.{param.name}: unrecognized parameter type {param.type_tag!r}"
        )


def synthesize(
    method: MethodSpec,
    known_address: str,
    rng: Optional[RandomSource] = None,
    bounds: Optional[IntegerBounds] = None,
) -> dict[str, Any]:
    return ParameterSynthesizer(bounds=bounds, rng=rng).synthesize(method, known_address)


def _example_int(method: MethodSpec, param: ParamSpec) -> int:
    example = param.example
    if isinstance(example, bool):
        raise SynthesisError(f"{method.name}.{param.name}: boolean example for integer parameter")
    try:
        return int(example)
    except (TypeError, ValueError) as exc:
        raise SynthesisError(
            f"{method.name}.{param.name}: example {example!r} is not an integer"
        ) from exc


def _example_bool(method: MethodSpec, param: ParamSpec) -> bool:
    example = param.example
    if isinstance(example, bool):
        return example
    word = str(example).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise SynthesisError(f"{method.name}.{param.name}: example {example!r} is not a boolean")
