"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Requisição inválida."):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class MalformedDateException(BadRequestException):
    """Date string does not match the dd/mm/yyyy hh:mm pattern."""

    def __init__(
        self,
        message: str = "Formato de data inválido (esperado: dd/mm/aaaa hh:mm).",
    ):
        super().__init__(message)


class PastDateException(BadRequestException):
    """Date parses but is not strictly in the future."""

    def __init__(self, message: str = "Data deve ser futura."):
        super().__init__(message)


class ConflictException(AppException):
    """Doctor already has an appointment at the requested instant.

    Reported as 400, like the date rule violations.
    """

    def __init__(self, message: str = "Médico já está agendado neste horário."):
        super().__init__(message, status_code=400)


class NotFoundException(AppException):
    """Resource not found exception.

    ``kind`` names the missing entity (``doctor``, ``patient``,
    ``appointment`` or ``insurance_plan``).
    """

    MESSAGES = {
        "doctor": "Médico não encontrado ou não é um médico válido.",
        "patient": "Paciente não encontrado.",
        "appointment": "Consulta não encontrada.",
        "insurance_plan": "Plano de saúde não encontrado.",
    }

    def __init__(self, kind: str = "resource", message: str | None = None):
        """Initialize with 404 status code."""
        self.kind = kind
        super().__init__(
            message or self.MESSAGES.get(kind, "Recurso não encontrado."),
            status_code=404,
        )


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Token inválido."):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class DuplicateBookingError(Exception):
    """Raised by storage when the (doctor, instant) uniqueness constraint fails.

    Not an ``AppException``: the scheduler translates it into
    ``ConflictException`` before it reaches the HTTP layer.
    """
