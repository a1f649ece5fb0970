# apps/core/management/commands/check_board_integrity.py

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.consistency import find_position_conflicts, partition, renumber
from apps.core.models import Assignment, Board, Membership, Project


class Command(BaseCommand):
    help = 'Verifica a consistência dos boards - NÃO altera dados sem --fix'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Cria participações de dono ausentes e renumera colunas com conflito'
        )

    def handle(self, *args, **options):
        corrigir = options['fix']

        self.stdout.write('🔍 Executando verificação de integridade dos boards...')

        problemas = 0
        problemas += self._verificar_participacao_dono(corrigir)
        problemas += self._verificar_posicoes(corrigir)
        problemas += self._verificar_atribuicoes()

        if problemas == 0:
            self.stdout.write(self.style.SUCCESS('\n✅ Nenhum problema encontrado.'))
        elif corrigir:
            self.stdout.write(self.style.SUCCESS(f'\n🔧 {problemas} problema(s) tratados.'))
        else:
            self.stdout.write(
                self.style.WARNING(
                    f'\n⚠️ {problemas} problema(s) encontrados. '
                    'Execute com --fix para corrigir.'
                )
            )

    def _verificar_participacao_dono(self, corrigir):
        """Todo projeto precisa da participação do dono com papel owner"""
        self.stdout.write('  👑 Verificando participação dos donos...')

        sem_dono = Project.objects.exclude(
            memberships__role=Membership.Role.OWNER
        ).select_related('owner')

        total = 0
        for project in sem_dono:
            total += 1
            self.stdout.write(f'    ❌ Projeto "{project.name}" ({project.id}) sem participação do dono')

            if corrigir:
                Membership.objects.update_or_create(
                    project=project,
                    user=project.owner,
                    defaults={'role': Membership.Role.OWNER}
                )
                self.stdout.write('      🔧 Participação do dono criada')

        return total

    def _verificar_posicoes(self, corrigir):
        """Posições repetidas dentro de uma mesma coluna"""
        self.stdout.write('  📐 Verificando posições das tarefas...')

        total = 0
        for board in Board.objects.select_related('project'):
            tasks = list(board.tasks.all())
            conflitos = find_position_conflicts(tasks)
            if not conflitos:
                continue

            total += len(conflitos)
            for status, position in conflitos:
                self.stdout.write(
                    f'    ❌ Board "{board.name}" ({board.id}): posição {position} repetida em {status}'
                )

            if corrigir:
                self._renumerar_board(tasks)
                self.stdout.write(f'      🔧 Board "{board.name}" renumerado')

        return total

    @transaction.atomic
    def _renumerar_board(self, tasks):
        for column in partition(tasks).values():
            for task, position in renumber(column):
                task.position = position
                task.save(update_fields=['position', 'updated_at'])

    def _verificar_atribuicoes(self):
        """Atribuições de usuários que não participam do projeto"""
        self.stdout.write('  👥 Verificando atribuições...')

        total = 0
        atribuicoes = Assignment.objects.select_related('task__board__project', 'user')
        for assignment in atribuicoes:
            project = assignment.task.board.project
            membro = project.memberships.filter(user_id=assignment.user_id).exists()
            if not membro:
                total += 1
                self.stdout.write(
                    f'    ❌ {assignment.user.username} atribuído a "{assignment.task.title}" '
                    f'sem participar de "{project.name}"'
                )

        return total
