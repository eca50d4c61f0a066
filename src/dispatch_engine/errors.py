from __future__ import annotations


class DispatchEngineError(Exception):
    """Base class for errors raised by the dispatch engine."""


class InvalidRecordError(DispatchEngineError, ValueError):
    """An input record is missing a required identifier or carries bad values."""


class AssetNotFoundError(DispatchEngineError, KeyError):
    def __init__(self, asset_id: str) -> None:
        super().__init__(asset_id)
        self.asset_id = asset_id

    def __str__(self) -> str:
        return f"Unknown asset: {self.asset_id}"


class InvalidTransitionError(DispatchEngineError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move incident from {current} to {target}")
        self.current = current
        self.target = target
