"""Domain-specific errors for hidpanel."""


class HidpanelError(Exception):
    """Base error for hidpanel."""


class ConfigError(HidpanelError):
    """Raised when the config file cannot be read or fails validation."""


class BackendError(HidpanelError):
    """Raised by a backend when a request cannot be completed."""


class ScanError(HidpanelError):
    """Raised when device enumeration fails; the prior catalog is kept."""


class SelectionMissingError(HidpanelError):
    """Raised when a send is attempted with no device selected."""


class InvalidCommandTextError(HidpanelError):
    """Raised when operator text does not encode to a command frame."""


class EmptyCommandError(InvalidCommandTextError):
    """Raised when operator text holds no hex tokens at all."""


class DispatchBusyError(HidpanelError):
    """Raised when a send is requested while another is still outstanding."""


class ListenerStartError(HidpanelError):
    """Raised when the backend could not start its read listener."""


class CommandDispatchError(HidpanelError):
    """Raised when the backend write/read for a command fails."""
