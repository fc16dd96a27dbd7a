"""Services package - signal pipeline entry points."""

from wyckoff_vpa.services.signal_service import (
    SignalService,
    derive_signal,
    get_signal_service,
    configure_signal_service,
)

__all__ = [
    "SignalService",
    "derive_signal",
    "get_signal_service",
    "configure_signal_service",
]
