# apps/core/middleware.py

import logging

from django.contrib import messages
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect
from django.utils.http import url_has_allowed_host_and_scheme
from django_htmx.http import trigger_client_event

from .exceptions import TaskboardError

logger = logging.getLogger(__name__)


class StoreFailureMiddleware:
    """
    Converte falhas do store que escapam das views em notificação

    - AJAX (drag & drop): JSON com success=False e o status da falha
    - HTMX: status da falha e evento "toast" para o front
    - Demais: mensagem e redirect para a página anterior
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not isinstance(exception, TaskboardError):
            return None  # Deixar o Django tratar

        logger.warning(
            f"⚠️ {exception.__class__.__name__} em {request.path}: {exception}"
        )

        if self._is_ajax(request):
            return JsonResponse(
                {'success': False, 'error': exception.message, 'step': exception.step},
                status=exception.status_code
            )

        if getattr(request, 'htmx', False):
            response = HttpResponse(status=exception.status_code)
            return trigger_client_event(
                response, 'toast', {'level': 'error', 'message': exception.message}
            )

        messages.error(request, exception.message)
        return redirect(self._voltar_para(request))

    def _is_ajax(self, request) -> bool:
        return (
            request.headers.get('x-requested-with') == 'XMLHttpRequest'
            or request.content_type == 'application/json'
        )

    def _voltar_para(self, request) -> str:
        referer = request.headers.get('referer')
        if referer and url_has_allowed_host_and_scheme(
            referer, allowed_hosts={request.get_host()}, require_https=request.is_secure()
        ):
            return referer
        return 'core:dashboard'
