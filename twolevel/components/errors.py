"""
Predictor State Errors

Failures raised by registers and history tables when a caller
breaks their width or provisioning contracts.
"""


class PredictorStateError(Exception):
    """Base class for register/table contract violations."""


class BitWidthError(PredictorStateError, ValueError):
    """A vector's width disagrees with the component's fixed width."""

    def __init__(self, expected: int, actual: int, what: str = "value"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"invalid number of bits for {what}: expected {expected}, got {actual}"
        )


class PartitionNotProvisionedError(PredictorStateError, LookupError):
    """Write to a partition selector that was never read or defaulted."""

    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"no table is associated with selector {selector!r}")


class MissingDefaultError(PredictorStateError, ValueError):
    """A default-insert was requested without a default value."""

    def __init__(self):
        super().__init__("default block can not be None")
