"""Conversion of browser-native visit times to Unix epoch seconds."""

import math
import time
from enum import Enum
from typing import Any, Optional

from .exceptions import DataCorruptionError

# Offset between 1601-01-01 (Chromium/WebKit epoch) and 1970-01-01, in microseconds
CHROMIUM_EPOCH_OFFSET_US = 11644473600 * 1_000_000

# Offset between 1970-01-01 and 2001-01-01 (Core Data / Safari epoch), in seconds
COREDATA_EPOCH_OFFSET_S = 978307200

# Tolerance for clocks slightly ahead of ours
FUTURE_TOLERANCE_S = 86400

# Values beyond this magnitude cannot be real timestamps in any supported epoch
_MAX_RAW_MAGNITUDE = 2 ** 62


class VisitEpoch(Enum):
    """Native time representations used by browser history stores."""
    UNIX_SECONDS = "unix_seconds"
    UNIX_MICROSECONDS = "unix_microseconds"
    CHROMIUM = "chromium"
    COREDATA = "coredata"


def to_unix_seconds(value: Any, epoch: VisitEpoch, now: Optional[float] = None) -> float:
    """
    Convert a native visit time into Unix epoch seconds.

    Args:
        value: Raw value read from the history store
        epoch: Epoch and unit the value is expressed in
        now: Current Unix time (defaults to time.time())

    Returns:
        Seconds since 1970-01-01

    Raises:
        DataCorruptionError: If the value is not numeric, would overflow, or
            lands outside [1970-01-01, now + FUTURE_TOLERANCE_S]
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DataCorruptionError(f"Visit time is not numeric: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise DataCorruptionError(f"Visit time is not finite: {value!r}")
    if abs(value) > _MAX_RAW_MAGNITUDE:
        raise DataCorruptionError(f"Visit time out of range: {value!r}")

    if epoch is VisitEpoch.UNIX_SECONDS:
        seconds = float(value)
    elif epoch is VisitEpoch.UNIX_MICROSECONDS:
        seconds = value / 1_000_000
    elif epoch is VisitEpoch.CHROMIUM:
        # Integer arithmetic first so large microsecond values keep precision
        seconds = (int(value) - CHROMIUM_EPOCH_OFFSET_US) / 1_000_000
    elif epoch is VisitEpoch.COREDATA:
        seconds = float(value) + COREDATA_EPOCH_OFFSET_S
    else:
        raise TypeError(f"Unknown epoch: {epoch!r}")

    if now is None:
        now = time.time()
    if seconds < 0 or seconds > now + FUTURE_TOLERANCE_S:
        raise DataCorruptionError(f"Visit time {value!r} converts outside the sane range")
    return seconds


def from_unix_seconds(seconds: float, epoch: VisitEpoch) -> float:
    """
    Convert Unix epoch seconds into a native value (used for query cutoffs).

    Args:
        seconds: Seconds since 1970-01-01
        epoch: Target epoch

    Returns:
        The native value (int for microsecond epochs)
    """
    if epoch is VisitEpoch.UNIX_SECONDS:
        return seconds
    if epoch is VisitEpoch.UNIX_MICROSECONDS:
        return int(seconds * 1_000_000)
    if epoch is VisitEpoch.CHROMIUM:
        return int(seconds * 1_000_000) + CHROMIUM_EPOCH_OFFSET_US
    if epoch is VisitEpoch.COREDATA:
        return seconds - COREDATA_EPOCH_OFFSET_S
    raise TypeError(f"Unknown epoch: {epoch!r}")


def clamp_to_now(timestamp: float, now: Optional[float] = None) -> float:
    """Clamp a timestamp into [0, now]."""
    if now is None:
        now = time.time()
    return max(0.0, min(timestamp, now))
