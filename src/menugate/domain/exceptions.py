"""Error taxonomy for the menu and permission engine.

Every failure the engine reports to a caller is one of these types. Each
carries a stable ``code`` that the API layer exposes verbatim so clients can
tell "no such menu" apart from "you may not grant that".
"""


class MenuEngineError(Exception):
    """Base exception for menu and permission engine errors.

    Attributes:
        code: Stable machine-readable reason.
        message: Human-readable description.
    """

    code = "menu_engine_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(MenuEngineError):
    """A referenced record does not exist."""

    code = "not_found"


class CycleDetectedError(MenuEngineError):
    """A structural mutation would make a node its own ancestor."""

    code = "cycle_detected"

    def __init__(self, message: str, node_id: int | None = None, parent_id: int | None = None) -> None:
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(message)


class DelegationDeniedError(MenuEngineError):
    """The actor tried to grant something it does not hold itself."""

    code = "delegation_denied"


class ScopeViolationError(MenuEngineError):
    """A company-scoped identity reached across its company boundary."""

    code = "scope_violation"


class ValidationError(MenuEngineError):
    """Malformed input, such as an unknown role or a negative order."""

    code = "validation_error"
