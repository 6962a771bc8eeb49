"""
Error types raised by the validation and record-keeping layers.

The forecasting components themselves never raise for degenerate input;
these are for callers that validate before invoking them.
"""


class ForecastError(Exception):
    """Base class for spend_forecast errors"""


class InvalidAmountError(ForecastError, ValueError):
    """Amount is negative or not a number"""


class UnrecognizedFrequencyError(ForecastError, ValueError):
    """Frequency tag is not in the frequency table"""


class InvalidCategoryError(ForecastError, ValueError):
    """Category is not one of the known expense categories"""


class MissingFieldError(ForecastError, ValueError):
    """Required field absent from a record payload"""


class RecordNotFoundError(ForecastError, LookupError):
    """Record does not exist for the given user"""


class ConfigError(ForecastError, ValueError):
    """Invalid configuration value"""


class InvalidDateError(ForecastError, ValueError):
    """Date is not an ISO YYYY-MM-DD value"""


class InvalidFlagError(ForecastError, ValueError):
    """Flag is not a recognizable true/false value"""
