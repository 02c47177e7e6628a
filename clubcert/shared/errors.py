class CertificateError(Exception):
    """Base class for certificate engine failures."""


class NotFound(CertificateError, LookupError):
    """A registration, competition or certificate lookup missed."""


class RegistrationNotFound(NotFound):
    pass


class CompetitionNotFound(NotFound):
    pass


class CertificateNotFound(NotFound):
    pass


class CertificateConflict(CertificateError):
    """Raised by the store when a uniqueness constraint rejects an insert."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class RenderingFailed(CertificateError, RuntimeError):
    """PDF composition or QR encoding failed."""


class ValidationError(CertificateError, ValueError):
    """Malformed input received at the HTTP boundary."""
