class WorkoutError(Exception):
    """
    Basisklasse voor verwachte fouten van de workout-engine.

    Notities:
        - status_code bepaalt de HTTP-status in errors/handlers.py.
        - errors bevat optioneel veldfouten (veldnaam -> lijst meldingen).
    """
    status_code = 500

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(WorkoutError):
    status_code = 400


class NotFoundError(WorkoutError):
    status_code = 404


class InvalidStateError(WorkoutError):
    status_code = 400


class AlreadyCompletedError(InvalidStateError):
    pass


class ConflictError(WorkoutError):
    status_code = 409
