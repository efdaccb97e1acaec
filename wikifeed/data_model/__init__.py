"""Shared model base classes and time helpers."""

from wikifeed.data_model.base import StrictBaseModel
from wikifeed.data_model.time import Clock, from_epoch_ms, to_epoch_ms, utc_now


__all__ = [
    "Clock",
    "StrictBaseModel",
    "from_epoch_ms",
    "to_epoch_ms",
    "utc_now",
]
