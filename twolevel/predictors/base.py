"""
Base Predictor Interface

Abstract base class and shared value types for the two-level
branch predictors.
"""

import logging
from abc import abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from ..components.bits import Bit, BitVector, string_to_bits
from ..components.monitor import Monitorable

logger = logging.getLogger(__name__)


class BranchResult(Enum):
    """Direction of a conditional branch."""
    TAKEN = "taken"
    NOT_TAKEN = "not_taken"

    @classmethod
    def from_bool(cls, taken: bool) -> 'BranchResult':
        return cls.TAKEN if taken else cls.NOT_TAKEN

    @classmethod
    def from_bit(cls, bit: Bit) -> 'BranchResult':
        return cls.from_bool(bit.value)

    def to_bit(self) -> Bit:
        return Bit.ONE if self is BranchResult.TAKEN else Bit.ZERO

    @property
    def taken(self) -> bool:
        return self is BranchResult.TAKEN

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class BranchInstruction:
    """One branch occurrence. Only the address is used for prediction."""
    address: BitVector                       # Instruction address bits
    opcode: BitVector = field(default=())    # Opaque opcode bits
    target: BitVector = field(default=())    # Opaque jump target bits

    @classmethod
    def from_strings(cls, address: str, opcode: str = "",
                     target: str = "") -> 'BranchInstruction':
        """Create a BranchInstruction from '0'/'1' strings."""
        return cls(
            address=string_to_bits(address),
            opcode=string_to_bits(opcode),
            target=string_to_bits(target)
        )


class BasePredictor(Monitorable):
    """Abstract base class for branch predictors."""

    def __init__(self, name: str, config: dict):
        """
        Initialize the predictor.

        Args:
            name: Name identifier for this predictor
            config: Construction parameters
        """
        self.name = name
        self.config = config
        self.stats = PredictorStats()

    @abstractmethod
    def predict(self, instruction: BranchInstruction) -> BranchResult:
        """
        Predict whether the branch is taken.

        Args:
            instruction: The branch instruction

        Returns:
            Predicted direction
        """
        pass

    @abstractmethod
    def update(self, instruction: BranchInstruction,
               actual: BranchResult) -> None:
        """
        Fold the resolved outcome into the predictor state.

        Must be called after predict() with the same instruction.

        Args:
            instruction: The branch instruction passed to predict()
            actual: Actual branch outcome
        """
        pass

    @abstractmethod
    def get_hardware_cost(self) -> dict:
        """
        Estimate hardware implementation cost.

        Returns:
            Dictionary with storage (bits/bytes) and other metrics
        """
        pass

    def predict_and_update(self, instruction: BranchInstruction,
                           actual: BranchResult) -> BranchResult:
        """
        Predict, then update with the actual outcome.

        Returns:
            The prediction made before the update
        """
        prediction = self.predict(instruction)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s predicted %s, actual %s", self.name, prediction, actual)
            logger.debug("Before update:\n%s", self.monitor())

        self.update(instruction, actual)
        self.stats.record_prediction(prediction, actual)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("After update:\n%s", self.monitor())
        return prediction

    def reset(self) -> None:
        """Reset predictor state (optional override)."""
        self.reset_stats()

    def reset_stats(self) -> None:
        """Start a new tally window without touching predictor state."""
        self.stats = PredictorStats()

    def get_stats(self) -> 'PredictorStats':
        """Get current statistics."""
        return self.stats


class PredictorStats:
    """Statistics tracking for a predictor."""

    def __init__(self):
        self.predictions = 0
        self.correct = 0
        self.mispredictions = 0
        self.taken_predicted = 0
        self.taken_actual = 0

    def record_prediction(self, prediction: BranchResult,
                          actual: BranchResult) -> None:
        """Record a prediction result."""
        self.predictions += 1

        if prediction.taken:
            self.taken_predicted += 1
        if actual.taken:
            self.taken_actual += 1

        if prediction is actual:
            self.correct += 1
        else:
            self.mispredictions += 1

    @property
    def accuracy(self) -> float:
        """Overall prediction accuracy (hit rate)."""
        if self.predictions == 0:
            return 0.0
        return self.correct / self.predictions

    @property
    def misprediction_rate(self) -> float:
        if self.predictions == 0:
            return 0.0
        return self.mispredictions / self.predictions

    def __str__(self) -> str:
        return (f"Predictions: {self.predictions}, "
                f"Accuracy: {self.accuracy*100:.2f}%, "
                f"Mispredictions: {self.mispredictions}")

    def to_dict(self) -> dict:
        return {
            'total': self.predictions,
            'correct': self.correct,
            'mispredictions': self.mispredictions,
            'accuracy': self.accuracy,
            'misprediction_rate': self.misprediction_rate,
            'taken_actual': self.taken_actual,
            'taken_predicted': self.taken_predicted,
        }
