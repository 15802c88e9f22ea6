import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from domain.shared.exceptions import DomainException

logger = logging.getLogger(__name__)

DOMAIN_STATUS = {
    'ENTITY_NOT_FOUND': status.HTTP_404_NOT_FOUND,
    'VALIDATION_ERROR': status.HTTP_400_BAD_REQUEST,
    'CYCLE_DETECTED': status.HTTP_422_UNPROCESSABLE_ENTITY,
    'INVALID_RECIPE_DETAIL': status.HTTP_422_UNPROCESSABLE_ENTITY,
    'UNKNOWN_FACET_FIELD': status.HTTP_400_BAD_REQUEST,
    'DEADLINE_EXCEEDED': status.HTTP_503_SERVICE_UNAVAILABLE,
    'SNAPSHOT_NOT_FOUND': status.HTTP_503_SERVICE_UNAVAILABLE,
}


def custom_exception_handler(exc, context):
    """
    Translate catalog engine errors into JSON responses.

    Everything else goes through the default DRF handler.
    """
    if isinstance(exc, DomainException):
        status_code = DOMAIN_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        body = {
            'detail': exc.message,
            'error': exc.code.lower(),
            'details': exc.details,
        }
        if exc.code == 'ENTITY_NOT_FOUND':
            body['found'] = False

        if status_code >= 500:
            logger.error(f"{exc.code} in {context['view'].__class__.__name__}: {exc.message}")
        else:
            logger.warning(f"{exc.code} in {context['view'].__class__.__name__}: {exc.message}")
        return Response(body, status=status_code)

    return exception_handler(exc, context)
