# apps/core/auth_service.py

"""
Serviço de Autenticação - Encapsula a lógica de login e cadastro

A identidade em si é do django.contrib.auth; este serviço só adapta
login por username ou email, bloqueio por tentativas e criação de conta
com nome de exibição.
"""

import logging
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.contrib.auth import authenticate, login, logout
from django.core.cache import cache
from django.db.models import Q

from .models import User

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Serviço encapsulado para gerenciar autenticação

    Princípios aplicados:
    - Encapsulamento: Métodos privados protegem lógica interna
    - Responsabilidade única: Cada método tem uma função específica
    """

    def __init__(self):
        self._session_remember_seconds = 86400 * 30

    def create_user(self, dados: Dict) -> Tuple[bool, str, Optional[User]]:
        """
        Cria novo usuário

        Args:
            dados: Dict com username, email, password e display_name

        Returns:
            Tuple[sucesso, mensagem, usuario_criado]
        """
        validacao_ok, erro_validacao = self._validar_dados(dados)
        if not validacao_ok:
            return False, erro_validacao, None

        if self._usuario_existe(dados['username'], dados['email']):
            return False, "Usuário ou email já cadastrado no sistema", None

        usuario = User.objects.create_user(
            username=dados['username'],
            email=dados['email'],
            password=dados['password'],  # Django já faz hash automaticamente
            display_name=dados.get('display_name', '').strip(),
        )

        logger.info(f"👤 Usuário {usuario.username} cadastrado")
        return True, "Conta criada com sucesso!", usuario

    def login(self, request, username: str, password: str, remember_me: bool = False) -> Tuple[bool, str]:
        """
        Realiza login com bloqueio após tentativas incorretas

        Returns:
            Tuple[sucesso, mensagem]
        """
        if self._conta_esta_bloqueada(username):
            return False, "Conta temporariamente bloqueada por muitas tentativas incorretas"

        usuario = self._autenticar_usuario(username, password)

        if usuario is None:
            self._registrar_tentativa_falha(username)
            return False, "Credenciais inválidas"

        login(request, usuario)

        if remember_me:
            request.session.set_expiry(self._session_remember_seconds)

        self._resetar_tentativas_login(username)
        return True, f"Bem-vindo, {usuario.get_display_name()}!"

    def logout(self, request) -> None:
        logout(request)

    # =================== MÉTODOS PRIVADOS (ENCAPSULADOS) ===================

    def _validar_dados(self, dados: Dict) -> Tuple[bool, str]:
        """Valida dados de entrada para criação de conta"""
        for campo in ('username', 'email', 'password'):
            if not dados.get(campo, '').strip():
                return False, f"Campo {campo} é obrigatório"

        if len(dados['password']) < 8:
            return False, "Senha deve ter pelo menos 8 caracteres"

        username = dados['username']
        if ' ' in username or len(username) < 3:
            return False, "Nome de usuário deve ter pelo menos 3 caracteres e não conter espaços"

        return True, ""

    def _usuario_existe(self, username: str, email: str) -> bool:
        return User.objects.filter(Q(username=username) | Q(email__iexact=email)).exists()

    def _autenticar_usuario(self, username: str, password: str) -> Optional[User]:
        """Autentica usuário (username ou email)"""
        usuario = authenticate(username=username, password=password)

        if usuario is None:
            user_obj = User.objects.filter(email__iexact=username, is_active=True).first()
            if user_obj is not None:
                usuario = authenticate(username=user_obj.username, password=password)

        return usuario

    def _chave_tentativas(self, username: str) -> str:
        return f"login_tentativas:{username.lower()}"

    def _conta_esta_bloqueada(self, username: str) -> bool:
        tentativas = cache.get(self._chave_tentativas(username), 0)
        return tentativas >= settings.TASKBOARD_MAX_LOGIN_ATTEMPTS

    def _registrar_tentativa_falha(self, username: str):
        chave = self._chave_tentativas(username)
        tentativas = cache.get(chave, 0) + 1
        cache.set(chave, tentativas, settings.TASKBOARD_LOCKOUT_MINUTES * 60)
        logger.warning(f"⚠️ Tentativa de login falhada para {username} ({tentativas})")

    def _resetar_tentativas_login(self, username: str):
        cache.delete(self._chave_tentativas(username))


# Instância global do serviço (Singleton pattern)
auth_service = AuthenticationService()
