import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

# CTR tables cover page 1 only (positions 1..10); everything below is a flat tail
CTR_CUTOFF = 10
TAIL_CTR = 0.01
CUSTOM_MODEL = "Custom"

CTR_MODELS = {
    "Default": {1: 0.317, 2: 0.247, 3: 0.187, 4: 0.133, 5: 0.095, 6: 0.068, 7: 0.049, 8: 0.035, 9: 0.025, 10: 0.018},
    "E-commerce": {1: 0.25, 2: 0.20, 3: 0.15, 4: 0.10, 5: 0.08, 6: 0.06, 7: 0.04, 8: 0.03, 9: 0.02, 10: 0.015},
    "Informational": {1: 0.40, 2: 0.30, 3: 0.22, 4: 0.15, 5: 0.10, 6: 0.07, 7: 0.05, 8: 0.04, 9: 0.03, 10: 0.02},
}
CTR_MODEL_OPTIONS = list(CTR_MODELS.keys()) + [CUSTOM_MODEL]


@dataclass(frozen=True)
class CTRModel:
    """
    One of the built-in CTR curves, or the operator's Custom table.

    Build through `CTRModel.builtin()` / `CTRModel.custom()` rather than directly.
    """
    name: str
    rates: Mapping[int, float] = field(default_factory=dict)

    @property
    def is_custom(self) -> bool:
        return self.name == CUSTOM_MODEL

    @classmethod
    def builtin(cls, name: str) -> "CTRModel":
        if name not in CTR_MODELS:
            raise KeyError(f"Unknown CTR model: {name}")
        return cls(name, MappingProxyType(CTR_MODELS[name]))

    @classmethod
    def custom(cls, rates: Optional[Mapping[int, float]] = None) -> "CTRModel":
        table = {}
        for pos, rate in (rates or {}).items():
            p = int(pos)
            if 1 <= p <= CTR_CUTOFF:
                table[p] = max(0.0, min(1.0, float(rate)))
        return cls(CUSTOM_MODEL, MappingProxyType(table))


DEFAULT_CTR_MODEL = CTRModel.builtin("Default")


def resolve_ctr_model(name: str, custom_rates: Optional[Mapping[int, float]] = None) -> CTRModel:
    """Map a settings `ctr_model` name to a model; unknown names fall back to Default."""
    if name == CUSTOM_MODEL:
        return CTRModel.custom(custom_rates)
    if name in CTR_MODELS:
        return CTRModel.builtin(name)
    return DEFAULT_CTR_MODEL


def get_ctr(position: float, model: CTRModel) -> float:
    """
    Expected CTR at a (possibly fractional) position.

    Positions are rounded up: 7.4 is credited as rank 8 until it reaches rank 7.
    Ranks past the cutoff, and ranks the model has no (non-zero) rate for, get TAIL_CTR.
    """
    rank = math.ceil(position)
    if rank > CTR_CUTOFF:
        return TAIL_CTR
    return model.rates.get(rank) or TAIL_CTR
