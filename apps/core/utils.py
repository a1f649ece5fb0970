# apps/core/utils.py

import hashlib
from django.contrib import messages
from django.shortcuts import redirect
from django_htmx.http import HttpResponseClientRedirect
from typing import Dict, List


def gerar_cor_usuario(username: str) -> str:
    """
    Gera uma cor consistente baseada no username
    Útil para avatares quando não há foto
    """
    # Gerar hash do username
    hash_obj = hashlib.md5(username.encode())
    hash_hex = hash_obj.hexdigest()

    # Usar primeiros 6 caracteres como cor hex
    return f"#{hash_hex[:6]}"


def gerar_iniciais(nome: str) -> str:
    """
    Iniciais para o avatar
    Ex: "Ana Maria Souza" -> "AS", "ana" -> "A"
    """
    partes = nome.split()
    if not partes:
        return "?"
    if len(partes) == 1:
        return partes[0][0].upper()
    return (partes[0][0] + partes[-1][0]).upper()


def resumir_texto(texto: str, limite: int = 50) -> str:
    """Corta o texto para notificações e logs"""
    if len(texto) <= limite:
        return texto
    return texto[:limite] + '...'


def montar_colunas(colunas_por_status: Dict[str, List], rotulos: Dict[str, str]) -> List[Dict]:
    """
    Converte o resultado de partition() na lista usada pelo template

    Mantém a ordem dos status recebidos.
    """
    return [
        {
            'status': status,
            'titulo': rotulos.get(status, status),
            'tasks': tasks,
            'total': len(tasks),
        }
        for status, tasks in colunas_por_status.items()
    ]


def primeiro_erro_form(form) -> str:
    """Primeira mensagem de erro de um form inválido"""
    for erros in form.errors.values():
        if erros:
            return erros[0]
    return 'Dados inválidos.'


def redirecionar(request, url: str, mensagem: str = None, nivel: int = messages.SUCCESS):
    """
    Redireciona registrando a notificação para a próxima página

    Requests HTMX recebem HX-Redirect em vez de 302.
    """
    if mensagem:
        messages.add_message(request, nivel, mensagem)

    if request.htmx:
        return HttpResponseClientRedirect(url)
    return redirect(url)
