from __future__ import annotations


class CarrotResetError(Exception):
    """Base class for every failure that aborts a reset run."""


class ConfigurationError(CarrotResetError, ValueError):
    pass


class MissingConfiguration(ConfigurationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Missing required environment variable: {name}")
        self.name = name


class InvalidConfiguration(ConfigurationError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid value in environment variable {name}: {reason}")
        self.name = name
        self.reason = reason


class StoreOperationFailure(CarrotResetError, RuntimeError):
    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Firestore {operation} failed: {reason}")
        self.operation = operation
