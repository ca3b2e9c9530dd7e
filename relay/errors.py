"""
Relay error taxonomy.

Caller errors map to 400, exhaustion maps to 500. Per-attempt failures
never surface as exceptions; they are absorbed into AttemptResult.
"""

from typing import Optional


class RelayError(Exception):
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.details = details


class InvalidInput(RelayError):
    status_code = 400
    public_message = "Message required"


class MessageTooLong(RelayError):
    status_code = 400
    public_message = "Message too long"


class UnknownModel(RelayError):
    status_code = 400
    public_message = "Invalid model"


class AllAttemptsExhausted(RelayError):
    status_code = 500
    public_message = "API failed after all fallbacks"


class StartupMisconfiguration(RelayError):
    public_message = "Invalid configuration"
