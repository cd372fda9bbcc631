"""Domain-specific errors for leaksync."""


class LeaksyncError(Exception):
    """Base error for leaksync."""


class ProfileValidationError(LeaksyncError):
    """Raised when a device profile does not conform to schema or semantics."""


class ProfileLoadError(LeaksyncError):
    """Raised when loading profile sources fails."""


class ParameterRegistryError(LeaksyncError):
    """Raised when parameter descriptors are inconsistent."""


class WireCodecError(LeaksyncError):
    """Raised when a value cannot be represented at the requested wire width."""


class FrameDecodeError(LeaksyncError):
    """Raised when an inbound command frame is malformed."""


class SettingValidationError(LeaksyncError):
    """Raised when a user setting is unknown or out of range."""


class TransportError(LeaksyncError):
    """Base transport error."""


class TransportSendError(TransportError):
    """Raised when a command batch cannot be handed to the transport."""


class StateStoreError(LeaksyncError):
    """Raised when persisted device state cannot be read or written."""
