"""Configuration of the exact kernel and of the validator/formatter defaults."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class KernelConfig:
    # digits of the Decimal context used by square-root predicates
    decimal_precision: int = 80
    # magnitudes below this (relative to the local scale) are treated as zero
    zero_tolerance: str = "1e-40"
    validate_strictness: int = 1
    output_precision: int = 10

    def __post_init__(self):
        if self.decimal_precision < 28:
            raise ValueError("decimal_precision must be at least 28")
        tol = Decimal(self.zero_tolerance)
        if not tol.is_finite() or tol <= 0:
            raise ValueError("zero_tolerance must be a positive finite number")
        if tol >= Decimal(1).scaleb(-(self.decimal_precision // 4)):
            raise ValueError("zero_tolerance is too coarse for the chosen precision")
        if self.validate_strictness not in (0, 1, 2):
            raise ValueError("validate_strictness must be 0, 1 or 2")
        if self.output_precision < 1:
            raise ValueError("output_precision must be positive")

    @property
    def tolerance(self) -> Decimal:
        return Decimal(self.zero_tolerance)


_KERNEL_CONFIG = KernelConfig()


def get_kernel_config() -> KernelConfig:
    return copy.deepcopy(_KERNEL_CONFIG)


def set_kernel_config(config: KernelConfig) -> None:
    global _KERNEL_CONFIG
    _KERNEL_CONFIG = copy.deepcopy(config)
