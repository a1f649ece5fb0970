import pytest
from django.conf import settings
from django.urls import reverse

from apps.core.auth_service import auth_service
from apps.core.models import User


@pytest.mark.django_db
class TestSignup:
    def test_signup_creates_user(self, client):
        response = client.post(reverse('core:signup'), {
            'username': 'diana',
            'email': 'diana@example.com',
            'display_name': 'Diana Prado',
            'password': 'senha-forte-123',
            'confirm_password': 'senha-forte-123',
        })

        assert response.status_code == 302
        user = User.objects.get(username='diana')
        assert user.get_display_name() == 'Diana Prado'
        assert user.initials == 'DP'

    def test_duplicate_email_rejected(self, owner):
        ok, mensagem, user = auth_service.create_user({
            'username': 'outra', 'email': 'ANA@example.com', 'password': 'senha-forte-123'
        })
        assert ok is False
        assert user is None

    def test_username_with_space_rejected(self, db):
        ok, _, _ = auth_service.create_user({
            'username': 'com espaco', 'email': 'x@example.com', 'password': 'senha-forte-123'
        })
        assert ok is False


@pytest.mark.django_db
class TestLogin:
    def _login(self, client, username, password):
        return client.post(reverse('core:login'), {'username': username, 'password': password})

    def test_login_with_username(self, client, owner):
        response = self._login(client, 'ana', 'senha-forte-123')
        assert response.status_code == 302
        assert response['Location'] == reverse('core:dashboard')

    def test_login_follows_local_next(self, client, owner):
        destino = reverse('core:health')
        response = client.post(
            f"{reverse('core:login')}?next={destino}",
            {'username': 'ana', 'password': 'senha-forte-123'}
        )
        assert response['Location'] == destino

    def test_login_ignores_external_next(self, client, owner):
        response = client.post(
            f"{reverse('core:login')}?next=https://evil.example/phish",
            {'username': 'ana', 'password': 'senha-forte-123'}
        )
        assert response.status_code == 302
        assert response['Location'] == reverse('core:dashboard')
        assert '_auth_user_id' in client.session

    def test_login_with_email(self, client, owner):
        response = self._login(client, 'ana@example.com', 'senha-forte-123')
        assert response.status_code == 302

    def test_wrong_password(self, client, owner):
        response = self._login(client, 'ana', 'errada')
        assert response.status_code == 200
        assert '_auth_user_id' not in client.session

    def test_lockout_after_max_attempts(self, client, owner):
        for _ in range(settings.TASKBOARD_MAX_LOGIN_ATTEMPTS):
            self._login(client, 'ana', 'errada')

        response = self._login(client, 'ana', 'senha-forte-123')

        assert response.status_code == 200
        mensagens = [str(m) for m in response.context['messages']]
        assert any('bloqueada' in m for m in mensagens)

    def test_logout(self, owner_client):
        response = owner_client.get(reverse('core:logout'))
        assert response.status_code == 302
        assert '_auth_user_id' not in owner_client.session
