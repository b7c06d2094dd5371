class TrackerError(Exception):
    """Base exception for tracker errors"""

    pass


class SheetError(TrackerError):
    """Custom exception for sheet-related errors"""

    pass


class ConfigurationError(TrackerError):
    """Raised when a configured sheet or column cannot be found"""

    pass


class TableNotFoundError(ConfigurationError):
    pass


class ColumnNotFoundError(ConfigurationError):
    pass


class StateError(TrackerError):
    """Raised when the table is not in a state the engines can work from"""

    pass


class ValidationError(TrackerError):
    """Raised by the verification checks when a week block is malformed"""

    pass


class WeekExtensionError(TrackerError):
    """Raised after a failed week extension has been rolled back"""

    pass
