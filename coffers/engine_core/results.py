"""
Result Stack - Ordered history of effect outcomes within one activation.

Later effects read the most recent result to chain off earlier ones
("draw as many cards as were just settled").
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..definitions.effect_dsl import EffectKind, kind_name


@dataclass(frozen=True)
class EffectResult:
    """Outcome of one executed effect."""
    kind: EffectKind | str
    success: bool
    count: int = 0  # Cards/units processed
    value: int = 0  # Gold or other magnitude produced

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": kind_name(self.kind),
            "success": self.success,
            "count": self.count,
            "value": self.value,
        }


@dataclass
class ResultStack:
    """
    Results of the current activation, in execution order.

    Top is the most recent result. Readers of an empty stack get 0.
    """
    results: list[EffectResult] = field(default_factory=list)

    def push(self, result: EffectResult) -> None:
        self.results.append(result)

    @property
    def top(self) -> EffectResult | None:
        return self.results[-1] if self.results else None

    @property
    def last_count(self) -> int:
        return self.results[-1].count if self.results else 0

    @property
    def last_value(self) -> int:
        return self.results[-1].value if self.results else 0

    @property
    def last_succeeded(self) -> bool:
        return bool(self.results) and self.results[-1].success

    def snapshot(self) -> list[EffectResult]:
        return list(self.results)

    def clear(self) -> None:
        self.results.clear()

    def __len__(self) -> int:
        return len(self.results)
