"""
Survivor errors - recoverable conditions reported to the caller.

Each error carries the HTTP status code the API answers with; the handler
registered in main.py renders them as {"detail": message}.
"""


class SurvivorError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(SurvivorError):
    """Pool, membership, match or pick missing."""

    status_code = 404


class AlreadyJoined(SurvivorError):
    status_code = 409


class AlreadySettled(SurvivorError):
    """Pool already simulated, or pick already settled."""

    status_code = 409


class NothingToSettle(SurvivorError):
    status_code = 409


class InvalidSelection(SurvivorError):
    """Team not part of the match, or a malformed outcome."""

    status_code = 400


class TooLate(SurvivorError):
    status_code = 400


class NotJoined(SurvivorError):
    status_code = 403


class ConcurrentUpdate(SurvivorError):
    """A membership kept changing underneath a settlement."""

    status_code = 409
