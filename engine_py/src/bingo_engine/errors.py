# engine_py/src/bingo_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    status = 500

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


# Specific error codes
UNAUTHORIZED = "UNAUTHORIZED"
INVALID = "INVALID"
CONFLICT = "CONFLICT"
NOT_FOUND = "NOT_FOUND"
CAPACITY = "CAPACITY"
INTERNAL_ERROR = "INTERNAL_ERROR"


class UnauthorizedError(GameError):
    """Missing, invalid or expired board token (or wrong PIN/seed)."""
    status = 401

    def __init__(self, message: str = "board auth required"):
        super().__init__(UNAUTHORIZED, message)


class ValidationError(GameError):
    """Malformed input; the request is rejected without any state change."""
    status = 400

    def __init__(self, message: str = "invalid"):
        super().__init__(INVALID, message)


class ConflictError(GameError):
    """Operation is incompatible with the current game state."""
    status = 409

    def __init__(self, message: str = "conflict"):
        super().__init__(CONFLICT, message)


class NotFoundError(GameError):
    status = 404

    def __init__(self, message: str = "card not found"):
        super().__init__(NOT_FOUND, message)


class CapacityError(GameError):
    status = 503

    def __init__(self, message: str = "card capacity reached"):
        super().__init__(CAPACITY, message)


class InvalidNumberError(ValidationError):
    def __init__(self, message: str = "invalid number"):
        super().__init__(message)


class InvalidCellError(ValidationError):
    def __init__(self, message: str = "invalid cell"):
        super().__init__(message)


class WrongModeError(ConflictError):
    def __init__(self, message: str = "wrong calling style"):
        super().__init__(message)


class PoolEmptyError(ConflictError):
    def __init__(self, message: str = "pool empty"):
        super().__init__(message)


class AlreadyCalledError(ConflictError):
    def __init__(self, message: str = "already called"):
        super().__init__(message)


class NothingToUndoError(ConflictError):
    def __init__(self, message: str = "nothing to undo"):
        super().__init__(message)


class GameEstablishedError(ConflictError):
    def __init__(self, message: str = "game established"):
        super().__init__(message)


class InternalError(GameError):
    """Unexpected failure while running a command."""
    status = 500

    def __init__(self, message: str = "internal error"):
        super().__init__(INTERNAL_ERROR, message)
