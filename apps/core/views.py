# apps/core/views.py

import logging

from django.shortcuts import render, redirect
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.http import JsonResponse
from django.urls import reverse
from django.views.decorators.http import require_http_methods, require_POST
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme

import apps
from .models import User
from .exceptions import TaskboardError, ValidationFailure
from .forms import LoginForm, SignupForm, ProjectForm, MemberForm
from .auth_service import auth_service
from .permissions import requires_project_access, TaskboardPermissions
from .services import store
from .utils import primeiro_erro_form, redirecionar

logger = logging.getLogger(__name__)


def login_view(request):
    """
    View de login usando serviço encapsulado

    O encapsulamento aqui separa a lógica HTTP (view) da lógica de autenticação (service)
    """
    if request.user.is_authenticated:
        return redirect('core:dashboard')

    form = LoginForm()

    if request.method == 'POST':
        form = LoginForm(request.POST)

        if form.is_valid():
            sucesso, mensagem = auth_service.login(
                request,
                form.cleaned_data['username'],
                form.cleaned_data['password'],
                form.cleaned_data['remember_me']
            )

            if sucesso:
                messages.success(request, mensagem)
                return redirect(_destino_seguro(request))

            messages.error(request, mensagem)

    context = {
        'title': 'Login - Taskboard',
        'form': form,
    }

    return render(request, 'core/login.html', context)


def _destino_seguro(request):
    """Parâmetro next apenas se apontar para este host"""
    destino = request.GET.get('next')
    if destino and url_has_allowed_host_and_scheme(
        destino, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return destino
    return 'core:dashboard'


def signup_view(request):
    """View de cadastro de nova conta"""
    if request.user.is_authenticated:
        return redirect('core:dashboard')

    form = SignupForm()

    if request.method == 'POST':
        form = SignupForm(request.POST)

        if form.is_valid():
            sucesso, mensagem, _ = auth_service.create_user(form.cleaned_data)

            if sucesso:
                messages.success(request, mensagem)
                messages.info(request, 'Você pode fazer login agora e começar a criar seus projetos!')
                return redirect('core:login')

            messages.error(request, mensagem)

    context = {
        'title': 'Cadastro - Taskboard',
        'form': form
    }

    return render(request, 'core/signup.html', context)


def logout_view(request):
    auth_service.logout(request)
    messages.info(request, 'Você foi desconectado com sucesso.')
    return redirect('core:login')


@login_required
def dashboard(request):
    """
    Painel principal: projetos em que o usuário é dono ou membro

    Falha de leitura não derruba a página: lista vazia e aviso.
    """
    try:
        projects_page = store.list_projects_visible_to(request.user, page=request.GET.get('page', 1))
        projects = projects_page.object_list
    except TaskboardError as e:
        logger.error(f"❌ Erro ao listar projetos de {request.user.username}: {e}")
        messages.error(request, f'Não foi possível carregar os projetos. {e.message}')
        projects_page = None
        projects = []

    context = {
        'title': 'Painel Principal',
        'projects': projects,
        'page_obj': projects_page,
        'form': ProjectForm(),
    }

    return render(request, 'core/dashboard.html', context)


@login_required
@require_POST
def create_project(request):
    """
    Cria projeto, participação do dono e board padrão
    Redireciona para o board recém-criado
    """
    form = ProjectForm(request.POST)
    if not form.is_valid():
        raise ValidationFailure(primeiro_erro_form(form), step='criar projeto')

    project, _ = store.create_project(
        request.user,
        form.cleaned_data['name'],
        form.cleaned_data['description']
    )

    return redirecionar(
        request,
        reverse('board:kanban', kwargs={'project_id': project.id}),
        f'Projeto "{project.name}" criado com sucesso!'
    )


@login_required
@require_POST
def update_project(request, project_id):
    form = ProjectForm(request.POST)
    if not form.is_valid():
        raise ValidationFailure(primeiro_erro_form(form), step='editar projeto')

    project = store.update_project(
        request.user,
        project_id,
        form.cleaned_data['name'],
        form.cleaned_data['description']
    )

    return redirecionar(
        request,
        reverse('board:kanban', kwargs={'project_id': project.id}),
        'Projeto atualizado.'
    )


@login_required
@require_POST
def delete_project(request, project_id):
    store.delete_project(request.user, project_id)
    return redirecionar(request, reverse('core:dashboard'), 'Projeto apagado.')


@login_required
@requires_project_access
@require_http_methods(['GET', 'POST'])
def project_members(request, project_id):
    """
    Lista membros do projeto
    POST adiciona um membro (apenas o dono)
    """
    project = request.project  # Injetado pelo decorator
    form = MemberForm()

    if request.method == 'POST':
        form = MemberForm(request.POST)
        if not form.is_valid():
            raise ValidationFailure(primeiro_erro_form(form), step='adicionar membro')

        membership = store.add_member(
            request.user,
            project_id,
            form.cleaned_data['username'],
            form.cleaned_data['role']
        )

        return redirecionar(
            request,
            reverse('core:project_members', kwargs={'project_id': project_id}),
            f'{membership.user.get_display_name()} adicionado ao projeto.'
        )

    context = {
        'title': f'Membros - {project.name}',
        'project': project,
        'memberships': store.list_members(request.user, project_id),
        'form': form,
        'is_owner': TaskboardPermissions.is_owner(request.user, project),
    }

    return render(request, 'core/members.html', context)


@login_required
@require_POST
def remove_member(request, project_id, user_id):
    store.remove_member(request.user, project_id, user_id)
    return redirecionar(
        request,
        reverse('core:project_members', kwargs={'project_id': project_id}),
        'Membro removido do projeto.'
    )


@login_required
def health_check(request):
    """
    Health check para monitoramento
    """
    try:
        # Verificar conexão com banco
        User.objects.count()

        # Verificar cache
        from django.core.cache import cache
        cache.set('health_check', 'ok', 60)
        cache.get('health_check')

        status = {
            'status': 'healthy',
            'database': 'ok',
            'cache': 'ok',
            'timestamp': timezone.now().isoformat(),
            'version': apps.__version__
        }

        return JsonResponse(status)

    except Exception as e:
        logger.error(f"❌ Health check falhou: {e}")
        status = {
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': timezone.now().isoformat(),
            'version': apps.__version__
        }

        return JsonResponse(status, status=500)
