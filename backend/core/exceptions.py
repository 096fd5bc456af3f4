from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from . import errors

STATUS_BY_ERROR = {
    errors.NotFound: status.HTTP_404_NOT_FOUND,
    errors.ValidationError: status.HTTP_400_BAD_REQUEST,
    errors.Conflict: status.HTTP_409_CONFLICT,
    errors.Forbidden: status.HTTP_403_FORBIDDEN,
}


def workflow_exception_handler(exc, context):
    """Map workflow failures onto HTTP responses, deferring everything else to DRF."""
    if isinstance(exc, errors.WorkflowError):
        status_code = status.HTTP_400_BAD_REQUEST
        for error_class, mapped in STATUS_BY_ERROR.items():
            if isinstance(exc, error_class):
                status_code = mapped
                break
        return Response({"detail": exc.message, "code": exc.code}, status=status_code)
    return exception_handler(exc, context)
