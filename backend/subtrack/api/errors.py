"""Bridge service-layer and auth-core exceptions to Problem Details responses.

Services raise domain errors (:mod:`subtrack.services._shared.errors`) and the
auth core raises :class:`~subtrack.auth.errors.AuthError` subclasses. Neither
knows about HTTP; this module maps them through
:meth:`BaseService.translate_exceptions` and renders the resulting
:class:`~subtrack.core.errors.APIError`.
"""

from __future__ import annotations

import logging

from flask import Flask, Response

from subtrack.auth.errors import AuthError
from subtrack.core.errors import APIError, InternalError, render_api_error
from subtrack.services._shared.base import BaseService
from subtrack.services._shared.errors import ServiceError

log = logging.getLogger(__name__)


def _translate(err: Exception) -> tuple[Response, int]:
    """Translate ``err`` and render it.

    :param err: Service or auth-core exception raised by a view.
    :type err: Exception
    :returns: Problem response and status code.
    :rtype: tuple[flask.Response, int]
    """
    translated = BaseService.translate_exceptions(err)
    if not isinstance(translated, APIError):
        log.error("Untranslated error type=%s", type(err).__name__, exc_info=err)
        translated = InternalError()
    translated.__cause__ = err
    return render_api_error(translated)


def register_service_error_handlers(app: Flask) -> None:
    """Attach handlers for :class:`ServiceError` and :class:`AuthError`.

    :param app: Application receiving the handlers.
    :type app: flask.Flask
    """

    @app.errorhandler(ServiceError)
    def _service_error_handler(err: ServiceError):
        return _translate(err)

    @app.errorhandler(AuthError)
    def _auth_error_handler(err: AuthError):
        return _translate(err)


__all__ = ["register_service_error_handlers"]
