"""Error taxonomy shared by the stores, services and routes.

Every error carries the HTTP status the server should answer with, so the
route layer can render them without knowing where they came from.
Transport failures of a node run are not errors: they come back as a
NodeRunResult with ok=False.
"""


class StateFlowError(Exception):
    """Base class for expected, user-visible failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(StateFlowError):
    """Malformed id, missing required field, unusable payload."""

    status_code = 400


class NotFoundError(StateFlowError):
    """Flow, node or session does not exist (or was soft deleted)."""

    status_code = 404


class InvalidConfigError(StateFlowError):
    """The flow is not configured well enough to run a node (e.g. no base URL)."""

    status_code = 400


class PersistenceError(StateFlowError):
    """Store error; the surrounding transaction has been rolled back."""

    status_code = 500


class TransactionFailedError(PersistenceError):
    """Recording a completed node run failed.

    The outbound call already happened and is not retried.
    """
