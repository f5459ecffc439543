from rest_framework import status
from rest_framework.response import Response

from hr_discipline.exceptions import ConfigurationError
from hr_discipline.exceptions import DisciplineError
from hr_discipline.exceptions import NotFoundError
from hr_discipline.exceptions import StateConflictError

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (StateConflictError, status.HTTP_409_CONFLICT),
    (ConfigurationError, status.HTTP_400_BAD_REQUEST),
)


def error_response(exc: DisciplineError) -> Response:
    """Map an engine error onto its HTTP response."""
    for error_type, http_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return Response({"detail": str(exc)}, status=http_status)
    return Response({"detail": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
