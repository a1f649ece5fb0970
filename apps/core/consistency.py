# apps/core/consistency.py

"""
Modelo de consistência do board

Regras puras de ordenação de tarefas, movimentação entre colunas e
visibilidade por participação em projeto. Nada aqui acessa o banco:
as views e o serviço buscam os dados, chamam estas funções e gravam
o resultado.
"""

from collections import defaultdict
from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

STATUSES = ('todo', 'in_progress', 'review', 'done')


def _campo(obj, nome):
    """Lê um campo de um objeto ou de um dict"""
    if isinstance(obj, Mapping):
        return obj[nome]
    return getattr(obj, nome)


def partition(tasks: Iterable, statuses: Sequence[str] = STATUSES) -> Dict[str, List]:
    """
    Agrupa as tarefas por status, cada coluna ordenada por position

    Toda coluna de `statuses` aparece no resultado, mesmo vazia.
    Empates de position mantêm a ordem de entrada.
    """
    colunas = {status: [] for status in statuses}

    for task in tasks:
        status = _campo(task, 'status')
        if status not in colunas:
            raise ValueError(f"Status desconhecido: {status!r}")
        colunas[status].append(task)

    for status in colunas:
        colunas[status].sort(key=lambda t: _campo(t, 'position'))

    return colunas


def compute_insert_position(tasks_in_status: Iterable) -> int:
    """Posição para uma nova tarefa no fim da coluna"""
    posicoes = [_campo(t, 'position') for t in tasks_in_status]
    if not posicoes:
        return 0
    return max(posicoes) + 1


def compute_move(task, source_status: str, dest_status: str, dest_index: int,
                 source_index: Optional[int] = None) -> Optional[Dict]:
    """
    Calcula os campos a gravar quando uma tarefa é arrastada

    Retorna None quando a tarefa foi solta no mesmo lugar: nesse caso
    nada deve ser gravado. As irmãs da coluna de destino não são
    renumeradas, a tarefa recebe o índice de destino como está.
    """
    if source_index is None:
        source_index = _campo(task, 'position')

    if source_status == dest_status and source_index == dest_index:
        return None

    return {'status': dest_status, 'position': dest_index}


def can_view(identity, project, memberships: Iterable) -> bool:
    """Dono do projeto ou qualquer usuário com participação"""
    if identity is None:
        return False

    if identity == _campo(project, 'owner_id'):
        return True

    project_id = _campo(project, 'id')
    return any(
        _campo(m, 'project_id') == project_id and _campo(m, 'user_id') == identity
        for m in memberships
    )


def can_assign(identity, task, memberships: Iterable) -> bool:
    """Só membros do projeto da tarefa podem ser atribuídos a ela"""
    if identity is None:
        return False

    project_id = _campo(task, 'project_id')
    return any(
        _campo(m, 'project_id') == project_id and _campo(m, 'user_id') == identity
        for m in memberships
    )


def find_position_conflicts(tasks: Iterable) -> List[Tuple[str, int]]:
    """Pares (status, position) ocupados por mais de uma tarefa"""
    contagem = defaultdict(int)
    for task in tasks:
        contagem[(_campo(task, 'status'), _campo(task, 'position'))] += 1

    return sorted(chave for chave, total in contagem.items() if total > 1)


def renumber(column: Sequence) -> List[Tuple[object, int]]:
    """
    Renumera uma coluna já ordenada de 0 em diante

    Retorna apenas as tarefas cuja posição muda.
    """
    return [
        (task, indice)
        for indice, task in enumerate(column)
        if _campo(task, 'position') != indice
    ]
