# apps/core/models.py

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .utils import gerar_cor_usuario, gerar_iniciais


class User(AbstractUser):
    """
    Usuário do Taskboard

    Guarda também os dados de perfil exibidos nos cards e comentários
    (nome de exibição e avatar).
    """

    display_name = models.CharField(max_length=150, blank=True)
    avatar_url = models.URLField(blank=True)

    # === METADADOS ===
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    def get_display_name(self):
        """Nome de exibição, com fallback para nome completo e username"""
        return self.display_name or self.get_full_name() or self.username

    @property
    def initials(self):
        return gerar_iniciais(self.get_display_name())

    @property
    def avatar_color(self):
        return gerar_cor_usuario(self.username)

    def get_visible_projects(self):
        """
        Retorna projetos que o usuário pode ver

        Dono ou membro. Subquery para não contaminar anotações
        feitas depois sobre memberships.
        """
        participacoes = Membership.objects.filter(user=self).values('project_id')
        return Project.objects.filter(Q(owner=self) | Q(id__in=participacoes))

    def __str__(self):
        return self.get_display_name()


class Project(models.Model):
    """Projeto - agregador de boards e membros"""

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='owned_projects'
    )
    members = models.ManyToManyField(
        User,
        through='Membership',
        related_name='member_projects'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'project'
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class Membership(models.Model):
    """Participação de um usuário em um projeto"""

    class Role(models.TextChoices):
        OWNER = 'owner', 'Proprietário'
        ADMIN = 'admin', 'Administrador'
        MEMBER = 'member', 'Membro'

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'project_member'
        ordering = ['joined_at']
        constraints = [
            models.UniqueConstraint(fields=['project', 'user'], name='unique_project_member'),
        ]

    def __str__(self):
        return f"{self.user} em {self.project} ({self.get_role_display()})"


class Board(models.Model):
    """Quadro Kanban do projeto"""

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='boards'
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    position = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['position', 'id']

    def __str__(self):
        return f"{self.name} ({self.project.name})"


class Task(models.Model):
    """Tarefa de um board, posicionada dentro da coluna do seu status"""

    class Status(models.TextChoices):
        TODO = 'todo', 'A Fazer'
        IN_PROGRESS = 'in_progress', 'Em Progresso'
        REVIEW = 'review', 'Em Revisão'
        DONE = 'done', 'Concluído'

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.TODO)
    # Posição única por (board, status) em regime normal; ver DESIGN.md
    position = models.IntegerField(default=0)
    due_date = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='created_tasks'
    )
    assignees = models.ManyToManyField(
        User,
        through='Assignment',
        related_name='assigned_tasks'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['position', 'id']
        indexes = [
            models.Index(fields=['board', 'status', 'position'], name='task_board_status_pos_idx'),
        ]

    @property
    def project_id(self):
        return self.board.project_id

    def is_overdue(self):
        """Verifica se a tarefa está atrasada"""
        if self.due_date and self.status != self.Status.DONE:
            return timezone.now() > self.due_date
        return False

    def __str__(self):
        return self.title


class Assignment(models.Model):
    """Atribuição de um usuário a uma tarefa"""

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'task_assignment'
        constraints = [
            models.UniqueConstraint(fields=['task', 'user'], name='unique_task_assignment'),
        ]

    def __str__(self):
        return f"{self.user} -> {self.task}"


class Comment(models.Model):
    """Comentário em uma tarefa"""

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    author = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'comment'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"Comentário de {self.author.username} em {self.created_at:%d/%m/%Y}"
