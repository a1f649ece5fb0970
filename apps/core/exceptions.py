# apps/core/exceptions.py

"""
Falhas do Taskboard

Toda operação de escrita ou leitura do serviço levanta uma destas
exceções. O middleware transforma as que escapam das views em
notificações para o usuário.
"""

from contextlib import contextmanager

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, IntegrityError


class TaskboardError(Exception):
    """Base das falhas do sistema"""

    status_code = 500
    default_message = 'Erro inesperado.'

    def __init__(self, message=None, step=None):
        self.message = message or self.default_message
        self.step = step
        super().__init__(self.message)

    def __str__(self):
        if self.step:
            return f"{self.message} (etapa: {self.step})"
        return self.message


class ValidationFailure(TaskboardError):
    """Campo obrigatório vazio ou valor inválido"""

    status_code = 400
    default_message = 'Dados inválidos.'


class AuthorizationFailure(TaskboardError):
    """Usuário sem permissão para a operação"""

    status_code = 403
    default_message = 'Você não tem permissão para esta ação.'


class NotFoundFailure(TaskboardError):
    """Registro referenciado não existe (ex: tarefa já apagada)"""

    status_code = 404
    default_message = 'Registro não encontrado.'


class ConflictFailure(TaskboardError):
    """Violação de unicidade (atribuição ou participação duplicada)"""

    status_code = 409
    default_message = 'Registro duplicado.'


class TransportFailure(TaskboardError):
    """Banco indisponível ou erro de comunicação"""

    status_code = 503
    default_message = 'Serviço indisponível. Tente novamente.'


@contextmanager
def store_errors(step=None):
    """
    Traduz erros do ORM para a taxonomia do Taskboard

    IntegrityError precisa vir antes de DatabaseError (é subclasse).
    """
    try:
        yield
    except TaskboardError:
        raise
    except ObjectDoesNotExist as exc:
        raise NotFoundFailure(step=step) from exc
    except IntegrityError as exc:
        raise ConflictFailure(step=step) from exc
    except DatabaseError as exc:
        raise TransportFailure(step=step) from exc
