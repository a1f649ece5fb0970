# apps/core/permissions.py

from functools import wraps
from django.shortcuts import redirect
from django.contrib import messages

from .consistency import can_assign, can_view


class TaskboardPermissions:
    """
    Regras de acesso do Taskboard sobre o ORM

    As decisões ficam nas funções puras de consistency; aqui só
    buscamos as participações relevantes no banco.
    """

    @staticmethod
    def has_project_access(user, project):
        """Dono ou membro do projeto"""
        if not user.is_authenticated:
            return False

        memberships = project.memberships.filter(user_id=user.pk)
        return can_view(user.pk, project, memberships)

    @staticmethod
    def is_owner(user, project):
        """Apenas o dono atualiza, apaga e gerencia membros do projeto"""
        return user.is_authenticated and project.owner_id == user.pk

    @staticmethod
    def is_task_member(user, task):
        """Membro do projeto da tarefa: pode ser atribuído e comentar"""
        from .models import Membership

        memberships = Membership.objects.filter(
            project_id=task.project_id,
            user_id=user.pk
        )
        return can_assign(user.pk, task, memberships)

    @staticmethod
    def can_edit_comment(user, comment):
        """Apenas o autor edita ou apaga o comentário"""
        return user.is_authenticated and comment.author_id == user.pk


# Decoradores para views

def requires_project_access(view_func):
    """
    Decorador que verifica acesso ao projeto
    Espera que a view receba project_id como parâmetro
    """

    @wraps(view_func)
    def wrapped_view(request, project_id, *args, **kwargs):
        from .models import Project

        try:
            project = Project.objects.get(id=project_id)
        except Project.DoesNotExist:
            messages.error(request, 'Projeto não encontrado.')
            return redirect('core:dashboard')

        if not TaskboardPermissions.has_project_access(request.user, project):
            messages.error(request, 'Você não tem acesso a este projeto.')
            return redirect('core:dashboard')

        # Adiciona o projeto ao request para uso na view
        request.project = project
        return view_func(request, project_id, *args, **kwargs)

    return wrapped_view
