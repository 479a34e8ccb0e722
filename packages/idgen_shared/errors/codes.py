"""Shared error code constants.

These constants are stable, machine-readable identifiers attached to
``ErrorDetail`` values. Callers branch on codes rather than on message text.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
INVALID_ENCODING = "INVALID_ENCODING"

# Unsupported representation
UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"

# Generator state / clock
CLOCK_REGRESSION = "CLOCK_REGRESSION"
CLOCK_STALLED = "CLOCK_STALLED"
TIMESTAMP_OVERFLOW = "TIMESTAMP_OVERFLOW"

# Dependency / platform primitive
DIGEST_UNAVAILABLE = "DIGEST_UNAVAILABLE"

# Internal
INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
