from __future__ import annotations


class RewardEngineError(ValueError):
    """Base for precondition failures raised by the scoring functions."""


class InvalidInput(RewardEngineError):
    pass


class InvalidVehicleType(RewardEngineError):
    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown vehicle type: {value!r}")
