# apps/core/services.py

"""
Serviço de dados do Taskboard

Toda leitura e escrita de projetos, boards, tarefas, atribuições e
comentários passa por aqui. Cada método recebe explicitamente o usuário
que executa a ação e verifica a permissão antes de tocar no banco.

Princípios aplicados:
- Uma única fonte de verdade: o banco. Nada é guardado entre chamadas
- Falhas sempre viram exceções de apps.core.exceptions
- Criação de projeto é atômica: projeto, participação e board juntos
"""

import logging
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.core.paginator import Page, Paginator
from django.db import transaction
from django.db.models import Count, Q

from .consistency import STATUSES, compute_insert_position, compute_move
from .exceptions import (
    AuthorizationFailure,
    ConflictFailure,
    NotFoundFailure,
    TaskboardError,
    ValidationFailure,
    store_errors,
)
from .models import Assignment, Board, Comment, Membership, Project, Task, User
from .permissions import TaskboardPermissions
from .utils import resumir_texto

logger = logging.getLogger(__name__)

# Campos que o modal de tarefa pode alterar
TASK_EDITABLE_FIELDS = ('title', 'description', 'status', 'due_date')


class TaskboardStore:
    """
    Contrato de armazenamento do Taskboard

    Leituras devolvem listas já avaliadas: erros de banco acontecem
    dentro do serviço e saem traduzidos.
    """

    # =================== LEITURAS ===================

    def list_projects_visible_to(self, user: User, page=1, per_page: Optional[int] = None) -> Page:
        """
        Projetos do usuário (dono ou membro), mais recentes primeiro

        Retorna uma página com member_count anotado em cada projeto.
        """
        per_page = per_page or settings.TASKBOARD_DASHBOARD_PAGE_SIZE

        with store_errors('listar projetos'):
            projects = (
                user.get_visible_projects()
                .select_related('owner')
                .annotate(member_count=Count('memberships'))
                .order_by('-created_at', '-id')
            )
            pagina = Paginator(projects, per_page).get_page(page)
            pagina.object_list = list(pagina.object_list)

        return pagina

    def get_project(self, user: User, project_id: int) -> Project:
        with store_errors('buscar projeto'):
            project = Project.objects.select_related('owner').get(id=project_id)

        self._require_access(user, project, 'ver projeto')
        return project

    def get_board(self, user: User, project_id: int) -> Board:
        """Primeiro board do projeto (menor position)"""
        project = self.get_project(user, project_id)

        with store_errors('buscar board'):
            board = project.boards.order_by('position', 'id').first()

        if board is None:
            raise NotFoundFailure('Projeto sem board.', step='buscar board')
        return board

    def list_tasks(self, user: User, board_id: int) -> List[Task]:
        """Tarefas do board com responsáveis e contagem de comentários"""
        board = self._get_board(board_id)
        self._require_access(user, board.project, 'listar tarefas')

        with store_errors('listar tarefas'):
            return list(
                board.tasks
                .select_related('created_by')
                .prefetch_related('assignees')
                .annotate(comments_count=Count('comments'))
                .order_by('position', 'id')
            )

    def get_task(self, user: User, task_id: int) -> Task:
        task = self._get_task(task_id)
        self._require_access(user, task.board.project, 'ver tarefa')
        return task

    def list_comments(self, user: User, task_id: int) -> List[Comment]:
        task = self._get_task(task_id)
        self._require_access(user, task.board.project, 'listar comentários')

        with store_errors('listar comentários'):
            return list(task.comments.select_related('author').order_by('created_at', 'id'))

    def list_members(self, user: User, project_id: int) -> List[Membership]:
        project = self.get_project(user, project_id)

        with store_errors('listar membros'):
            return list(project.memberships.select_related('user').order_by('joined_at', 'id'))

    # =================== ESCRITAS SIMPLES ===================

    def insert_project(self, user: User, name: str, description: str = '') -> Project:
        name = self._required(name, 'Nome do projeto')

        with store_errors('inserir projeto'), transaction.atomic():
            project = Project.objects.create(
                name=name,
                description=(description or '').strip(),
                owner=user
            )

        logger.info(f"📁 Projeto '{project.name}' ({project.id}) inserido por {user.username}")
        return project

    def insert_membership(self, user: User, project: Project, member: User,
                          role: str = Membership.Role.MEMBER) -> Membership:
        """Apenas o dono gerencia membros do projeto"""
        if not TaskboardPermissions.is_owner(user, project):
            self._reject(user, 'inserir participação', project)

        if role not in Membership.Role.values:
            raise ValidationFailure(f'Papel inválido: {role}', step='inserir participação')

        with store_errors('inserir participação'), transaction.atomic():
            if Membership.objects.filter(project=project, user=member).exists():
                raise ConflictFailure('Usuário já é membro do projeto.', step='inserir participação')

            membership = Membership.objects.create(project=project, user=member, role=role)

        return membership

    def insert_board(self, user: User, project: Project, name: str,
                     description: str = '', position: Optional[int] = None) -> Board:
        name = self._required(name, 'Nome do board')
        self._require_access(user, project, 'inserir board')

        with store_errors('inserir board'), transaction.atomic():
            if position is None:
                position = compute_insert_position(project.boards.only('position'))

            board = Board.objects.create(
                project=project,
                name=name,
                description=description,
                position=position
            )

        return board

    def insert_task(self, user: User, board: Board, title: str, description: str = '',
                    status: str = Task.Status.TODO, position: int = 0, due_date=None) -> Task:
        title = self._required(title, 'Título')
        self._validate_status(status)
        self._require_access(user, board.project, 'inserir tarefa')

        with store_errors('inserir tarefa'), transaction.atomic():
            task = Task.objects.create(
                board=board,
                title=title,
                description=(description or '').strip(),
                status=status,
                position=position,
                due_date=due_date,
                created_by=user
            )

        logger.info(f"📝 Tarefa '{task.title}' criada em {status}/{position} por {user.username}")
        return task

    def update_task(self, user: User, task_id: int, fields: Dict) -> Task:
        """
        Atualiza campos da tarefa

        O último a gravar vence, campo a campo do que foi enviado. Se o
        status muda, a tarefa vai para o fim da coluna de destino.
        """
        desconhecidos = set(fields) - set(TASK_EDITABLE_FIELDS)
        if desconhecidos:
            raise ValidationFailure(
                f"Campos não editáveis: {', '.join(sorted(desconhecidos))}",
                step='atualizar tarefa'
            )

        fields = dict(fields)
        if 'title' in fields:
            fields['title'] = self._required(fields['title'], 'Título')
        if 'description' in fields:
            fields['description'] = (fields['description'] or '').strip()
        if 'status' in fields:
            self._validate_status(fields['status'])

        with store_errors('atualizar tarefa'), transaction.atomic():
            task = Task.objects.select_for_update().get(id=task_id)
            self._require_access(user, task.board.project, 'atualizar tarefa')

            if fields.get('status', task.status) != task.status:
                fields['position'] = compute_insert_position(
                    task.board.tasks.filter(status=fields['status']).only('position')
                )

            for campo, valor in fields.items():
                setattr(task, campo, valor)
            task.save(update_fields=list(fields) + ['updated_at'])

        logger.info(f"✏️ Tarefa {task.id} atualizada por {user.username}: {sorted(fields)}")
        return task

    def delete_task(self, user: User, task_id: int) -> None:
        task = self._get_task(task_id)
        self._require_access(user, task.board.project, 'apagar tarefa')

        with store_errors('apagar tarefa'), transaction.atomic():
            task.delete()

        logger.info(f"🗑️ Tarefa {task_id} apagada por {user.username}")

    def insert_assignment(self, user: User, task: Task, member: User) -> Assignment:
        self._require_access(user, task.board.project, 'atribuir tarefa')

        if not TaskboardPermissions.is_task_member(member, task):
            logger.warning(
                f"⛔ {member.username} não é membro do projeto {task.project_id}; atribuição recusada"
            )
            raise AuthorizationFailure('Usuário não é membro do projeto.', step='inserir atribuição')

        with store_errors('inserir atribuição'), transaction.atomic():
            if Assignment.objects.filter(task=task, user=member).exists():
                raise ConflictFailure('Usuário já atribuído à tarefa.', step='inserir atribuição')

            assignment = Assignment.objects.create(task=task, user=member)

        return assignment

    def delete_assignment(self, user: User, task: Task, member: User) -> None:
        self._require_access(user, task.board.project, 'remover atribuição')

        with store_errors('remover atribuição'), transaction.atomic():
            apagados, _ = Assignment.objects.filter(task=task, user=member).delete()

        if not apagados:
            raise NotFoundFailure('Usuário não está atribuído à tarefa.', step='remover atribuição')

    def insert_comment(self, user: User, task_id: int, content: str) -> Comment:
        """O autor precisa ser membro do projeto no momento da criação"""
        content = self._required(content, 'Comentário')
        task = self._get_task(task_id)

        if not TaskboardPermissions.is_task_member(user, task):
            self._reject(user, 'comentar', task.board.project)

        with store_errors('inserir comentário'), transaction.atomic():
            comment = Comment.objects.create(task=task, author=user, content=content)

        logger.info(f"💬 Comentário em '{task.title}' por {user.username}: {resumir_texto(content)}")
        return comment

    def update_comment(self, user: User, comment_id: int, content: str) -> Comment:
        content = self._required(content, 'Comentário')

        with store_errors('buscar comentário'):
            comment = Comment.objects.select_related('task').get(id=comment_id)

        if not TaskboardPermissions.can_edit_comment(user, comment):
            self._reject(user, 'editar comentário', comment.task.board.project)

        with store_errors('editar comentário'), transaction.atomic():
            comment.content = content
            comment.save(update_fields=['content', 'updated_at'])

        return comment

    def delete_comment(self, user: User, comment_id: int) -> None:
        with store_errors('buscar comentário'):
            comment = Comment.objects.select_related('task').get(id=comment_id)

        if not TaskboardPermissions.can_edit_comment(user, comment):
            self._reject(user, 'apagar comentário', comment.task.board.project)

        with store_errors('apagar comentário'), transaction.atomic():
            comment.delete()

    def update_project(self, user: User, project_id: int, name: str, description: str = '') -> Project:
        project = self.get_project(user, project_id)
        if not TaskboardPermissions.is_owner(user, project):
            self._reject(user, 'editar projeto', project)

        project.name = self._required(name, 'Nome do projeto')
        project.description = (description or '').strip()

        with store_errors('editar projeto'), transaction.atomic():
            project.save(update_fields=['name', 'description', 'updated_at'])

        return project

    def delete_project(self, user: User, project_id: int) -> None:
        """Apaga o projeto e, em cascata, boards, tarefas, atribuições, comentários e membros"""
        project = self.get_project(user, project_id)
        if not TaskboardPermissions.is_owner(user, project):
            self._reject(user, 'apagar projeto', project)

        with store_errors('apagar projeto'), transaction.atomic():
            _, apagados = project.delete()

        logger.info(f"🗑️ Projeto {project_id} apagado por {user.username}: {apagados}")

    # =================== FLUXOS COMPOSTOS ===================

    def create_project(self, user: User, name: str, description: str = '') -> Tuple[Project, Board]:
        """
        Cria projeto, participação do dono e board padrão

        As três inserções acontecem na mesma transação: se qualquer etapa
        falhar nada fica gravado e a exceção informa a etapa.
        """
        try:
            with store_errors('criar projeto'), transaction.atomic():
                project = self.insert_project(user, name, description)
                self.insert_membership(user, project, user, role=Membership.Role.OWNER)
                board = self.insert_board(
                    user,
                    project,
                    settings.TASKBOARD_DEFAULT_BOARD_NAME,
                    settings.TASKBOARD_DEFAULT_BOARD_DESCRIPTION
                )
        except TaskboardError as exc:
            logger.error(f"❌ Falha ao criar projeto '{name}' para {user.username}: {exc}")
            raise

        logger.info(f"✅ Projeto '{project.name}' criado com board {board.id}")
        return project, board

    def create_task(self, user: User, board_id: int, title: str, description: str = '',
                    status: str = Task.Status.TODO, due_date=None) -> Task:
        """Cria a tarefa no fim da coluna do status"""
        self._validate_status(status)
        board = self._get_board(board_id)
        self._require_access(user, board.project, 'criar tarefa')

        with store_errors('criar tarefa'), transaction.atomic():
            position = compute_insert_position(board.tasks.filter(status=status).only('position'))
            return self.insert_task(user, board, title, description, status, position, due_date)

    def move_task(self, user: User, task_id: int, dest_status: str, dest_index: int,
                  source_index: Optional[int] = None) -> Tuple[Task, bool]:
        """
        Aplica um drag-and-drop

        A linha da tarefa fica travada durante a operação, então dois
        movimentos da mesma tarefa são serializados. Soltar no mesmo
        lugar não grava nada. Retorna (tarefa, houve_mudanca).
        """
        self._validate_status(dest_status)
        if isinstance(dest_index, bool) or not isinstance(dest_index, int) or dest_index < 0:
            raise ValidationFailure('Índice de destino inválido.', step='mover tarefa')

        with store_errors('mover tarefa'), transaction.atomic():
            task = Task.objects.select_for_update().get(id=task_id)
            self._require_access(user, task.board.project, 'mover tarefa')

            campos = compute_move(task, task.status, dest_status, dest_index, source_index)
            if campos is None:
                return task, False

            origem = task.status
            for campo, valor in campos.items():
                setattr(task, campo, valor)
            task.save(update_fields=['status', 'position', 'updated_at'])

        logger.info(
            f"🔀 Tarefa {task.id} movida de {origem} para {task.status}/{task.position} por {user.username}"
        )
        return task, True

    def toggle_assignment(self, user: User, task_id: int, member_id: int) -> bool:
        """
        Atribui ou remove a atribuição do usuário na tarefa

        Retorna True quando o usuário ficou atribuído.
        """
        task = self._get_task(task_id)
        self._require_access(user, task.board.project, 'atribuir tarefa')

        with store_errors('buscar usuário'):
            member = User.objects.get(id=member_id)

        if Assignment.objects.filter(task=task, user=member).exists():
            self.delete_assignment(user, task, member)
            return False

        self.insert_assignment(user, task, member)
        return True

    def add_member(self, user: User, project_id: int, username: str,
                   role: str = Membership.Role.MEMBER) -> Membership:
        project = self.get_project(user, project_id)
        username = self._required(username, 'Usuário')

        if role == Membership.Role.OWNER:
            raise ValidationFailure('O projeto já tem um proprietário.', step='adicionar membro')

        with store_errors('buscar usuário'):
            member = User.objects.filter(Q(username=username) | Q(email__iexact=username)).first()

        if member is None:
            raise NotFoundFailure('Usuário não encontrado.', step='adicionar membro')

        membership = self.insert_membership(user, project, member, role)
        logger.info(f"👥 {member.username} adicionado ao projeto {project.id} como {role}")
        return membership

    def remove_member(self, user: User, project_id: int, member_id: int) -> None:
        """Remove o membro e as atribuições dele nas tarefas do projeto"""
        project = self.get_project(user, project_id)
        if not TaskboardPermissions.is_owner(user, project):
            self._reject(user, 'remover membro', project)

        if member_id == project.owner_id:
            raise ValidationFailure('O proprietário não pode sair do projeto.', step='remover membro')

        with store_errors('remover membro'), transaction.atomic():
            apagados, _ = Membership.objects.filter(project=project, user_id=member_id).delete()
            if not apagados:
                raise NotFoundFailure('Usuário não é membro do projeto.', step='remover membro')

            Assignment.objects.filter(task__board__project=project, user_id=member_id).delete()

    # =================== MÉTODOS PRIVADOS ===================

    def _get_board(self, board_id: int) -> Board:
        with store_errors('buscar board'):
            return Board.objects.select_related('project').get(id=board_id)

    def _get_task(self, task_id: int) -> Task:
        with store_errors('buscar tarefa'):
            return Task.objects.select_related('board__project').get(id=task_id)

    def _require_access(self, user: User, project: Project, acao: str):
        if not TaskboardPermissions.has_project_access(user, project):
            self._reject(user, acao, project)

    def _reject(self, user: User, acao: str, project: Project):
        logger.warning(f"⛔ {getattr(user, 'username', 'anônimo')} sem permissão para {acao} no projeto {project.id}")
        raise AuthorizationFailure(step=acao)

    def _required(self, valor, campo: str) -> str:
        valor = (valor or '').strip()
        if not valor:
            raise ValidationFailure(f'{campo} é obrigatório.')
        return valor

    def _validate_status(self, status: str):
        if status not in STATUSES:
            raise ValidationFailure(f'Status inválido: {status}')


# Instância global do serviço
store = TaskboardStore()
