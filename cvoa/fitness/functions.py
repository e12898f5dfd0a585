"""
Reference fitness functions for CVOA.

All functions are minimized and reach 0.0 at their optimum. They are pure
and hold no mutable state, so a single instance can be shared by every
strain of a run.

Functions:
- OneMaxFitness: number of 1-bits (optimum: all zeros)
- HammingTargetFitness: Hamming distance to a target bit-vector
- PolynomialFitness: |p(x)| where x is the integer encoded by the bits
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Type, Union

import numpy as np

logger = logging.getLogger(__name__)


class FitnessFunction(ABC):
    """
    Base class for fitness functions.

    Attributes:
        target: Fitness value of an optimal individual
    """

    target: float = 0.0
    name: str = 'base'

    @abstractmethod
    def evaluate(self, bits: np.ndarray) -> float:
        """Evaluate a bit-vector given as a 1-D integer array."""

    def __call__(self, data: Sequence[int]) -> float:
        return float(self.evaluate(np.asarray(data, dtype=np.int64)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class OneMaxFitness(FitnessFunction):
    """Count of 1-bits."""

    name = 'onemax'

    def evaluate(self, bits: np.ndarray) -> float:
        return float(np.count_nonzero(bits))


class HammingTargetFitness(FitnessFunction):
    """Hamming distance to a fixed target bit-vector."""

    name = 'hamming'

    def __init__(self, target_bits: Union[str, Sequence[int]]):
        if isinstance(target_bits, str):
            target_bits = [int(c) for c in target_bits]
        self.target_bits = np.asarray(target_bits, dtype=np.int64)
        if not np.isin(self.target_bits, (0, 1)).all():
            raise ValueError("Target bit-vector must only contain 0 and 1")

    def evaluate(self, bits: np.ndarray) -> float:
        if bits.shape != self.target_bits.shape:
            raise ValueError(
                f"Bit-vector length {bits.shape[0]} does not match target length {self.target_bits.shape[0]}"
            )
        return float(np.count_nonzero(bits != self.target_bits))

    def __repr__(self) -> str:
        return f"HammingTargetFitness({''.join(str(b) for b in self.target_bits)})"


class PolynomialFitness(FitnessFunction):
    """
    Absolute value of a polynomial evaluated at the integer encoded by the bits.

    The most significant bit comes first. An optional offset shifts the decoded
    value, which allows negative roots to be searched for.

    Args:
        coefficients: Polynomial coefficients, highest degree first (numpy.polyval order)
        offset: Value added to the decoded integer before evaluation
    """

    name = 'polynomial'

    def __init__(self, coefficients: Sequence[float], offset: int = 0):
        if len(coefficients) == 0:
            raise ValueError("Polynomial needs at least one coefficient")
        self.coefficients = np.asarray(coefficients, dtype=np.float64)
        self.offset = int(offset)

    @staticmethod
    def decode(bits: np.ndarray) -> int:
        value = 0
        for b in bits:
            value = (value << 1) | int(b)
        return value

    def evaluate(self, bits: np.ndarray) -> float:
        x = self.decode(bits) + self.offset
        return float(abs(np.polyval(self.coefficients, float(x))))

    def __repr__(self) -> str:
        return f"PolynomialFitness({self.coefficients.tolist()}, offset={self.offset})"


FITNESS_FUNCTIONS: Dict[str, Type[FitnessFunction]] = {
    OneMaxFitness.name: OneMaxFitness,
    HammingTargetFitness.name: HammingTargetFitness,
    PolynomialFitness.name: PolynomialFitness,
}


def get_fitness_function(name: str, params: Optional[Dict[str, Any]] = None) -> FitnessFunction:
    """
    Instantiate a fitness function by registry name.

    Args:
        name: One of 'onemax', 'hamming', 'polynomial'
        params: Keyword arguments for the constructor

    Returns:
        FitnessFunction instance

    Raises:
        ValueError: If the name is unknown
    """
    key = str(name).lower()
    if key not in FITNESS_FUNCTIONS:
        raise ValueError(f"Unknown fitness function '{name}'. Available: {list_fitness_functions()}")
    fitness_function = FITNESS_FUNCTIONS[key](**(params or {}))
    logger.debug(f"Created fitness function {fitness_function!r}")
    return fitness_function


def list_fitness_functions() -> List[str]:
    return sorted(FITNESS_FUNCTIONS)
