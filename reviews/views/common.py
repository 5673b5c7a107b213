import logging

from rest_framework import status
from rest_framework.response import Response

from ..errors import ErrorKind, ReviewServiceError, ValidationFailed

logger = logging.getLogger(__name__)

ERROR_STATUSES = {
    ErrorKind.TEAM_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.PR_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.PR_MERGED: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_ASSIGNED: status.HTTP_409_CONFLICT,
    ErrorKind.NO_CANDIDATE: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHOR_TEAM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
}

ERROR_CODES = {
    ErrorKind.AUTHOR_TEAM_NOT_FOUND: 'NOT_FOUND',
    ErrorKind.VALIDATION_FAILED: 'VALIDATION_ERROR',
}


def error_response(code: str, message: str, http_status: int) -> Response:
    return Response({
        'error': {
            'code': code,
            'message': message
        }
    }, status=http_status)


def service_error_response(exc: ReviewServiceError) -> Response:
    code = ERROR_CODES.get(exc.kind, exc.kind.value)
    return error_response(code, exc.message, ERROR_STATUSES[exc.kind])


def server_error_response() -> Response:
    logger.exception("Unhandled error while processing request")
    return error_response('SERVER_ERROR', 'Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)


def validate(serializer_class, data) -> dict:
    """Проверяет входные данные, при ошибке бросает ValidationFailed"""
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        path, message = _first_error(serializer.errors)
        raise ValidationFailed(f"{'.'.join(path)}: {message}")
    return serializer.validated_data


def _first_error(errors, path=()):
    if isinstance(errors, dict):
        field, nested = next(iter(errors.items()))
        return _first_error(nested, path + (str(field),))
    if isinstance(errors, (list, tuple)):
        for item in errors:
            if item:
                return _first_error(item, path)
    return path, str(errors)
