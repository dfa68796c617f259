"""Error taxonomy shared by the transform, geometry and CLI layers."""
from __future__ import annotations


class FanplotError(Exception):
    """Base class for all fanplot errors."""


class InvalidArgument(FanplotError, ValueError):
    """Malformed interval set, unparsable quantile label, bad n_samples, missing column."""


class EmptyInputError(FanplotError, ValueError):
    """No rows left to compute on (empty input or everything filtered out)."""


class DataQualityWarning(UserWarning):
    """Non-finite values or empty groups were dropped; computation continued."""
