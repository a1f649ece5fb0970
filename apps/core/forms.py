# apps/core/forms.py

from django import forms
from django.core.exceptions import ValidationError

from .models import Membership, Task

INPUT_CLASS = 'form-input w-full px-4 py-2 border rounded-lg'


class LoginForm(forms.Form):
    """Formulário de login customizado"""

    username = forms.CharField(
        label='Usuário ou Email',
        max_length=150,
        widget=forms.TextInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'Seu usuário ou email',
            'autofocus': True
        })
    )

    password = forms.CharField(
        label='Senha',
        widget=forms.PasswordInput(attrs={
            'class': INPUT_CLASS,
            'placeholder': 'Sua senha'
        })
    )

    remember_me = forms.BooleanField(
        label='Lembrar-me',
        required=False,
        widget=forms.CheckboxInput(attrs={
            'class': 'form-checkbox h-4 w-4 text-blue-600'
        })
    )


class SignupForm(forms.Form):
    """Formulário de cadastro"""

    username = forms.CharField(
        label='Usuário',
        max_length=150,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Nome de usuário único'})
    )

    email = forms.EmailField(
        label='Email',
        widget=forms.EmailInput(attrs={'class': INPUT_CLASS, 'placeholder': 'email@empresa.com'})
    )

    display_name = forms.CharField(
        label='Nome de exibição',
        max_length=150,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Como você aparece nos cards'})
    )

    password = forms.CharField(
        label='Senha',
        min_length=8,
        widget=forms.PasswordInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Mínimo 8 caracteres'})
    )

    confirm_password = forms.CharField(
        label='Confirmar Senha',
        widget=forms.PasswordInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Digite a senha novamente'})
    )

    def clean_confirm_password(self):
        """Valida se senhas coincidem"""
        password = self.cleaned_data.get('password')
        confirm_password = self.cleaned_data.get('confirm_password')

        if password and confirm_password and password != confirm_password:
            raise ValidationError("As senhas não coincidem")

        return confirm_password


class ProjectForm(forms.Form):
    """Formulário para criar/editar projetos"""

    name = forms.CharField(
        label='Nome',
        max_length=200,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Nome do projeto'})
    )

    description = forms.CharField(
        label='Descrição',
        required=False,
        widget=forms.Textarea(attrs={
            'class': 'form-textarea w-full px-4 py-2 border rounded-lg',
            'rows': 4,
            'placeholder': 'Descrição do projeto...'
        })
    )


class MemberForm(forms.Form):
    """Adicionar membro ao projeto por username ou email"""

    ROLE_CHOICES = [
        (Membership.Role.MEMBER, Membership.Role.MEMBER.label),
        (Membership.Role.ADMIN, Membership.Role.ADMIN.label),
    ]

    username = forms.CharField(
        label='Usuário ou Email',
        max_length=150,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS})
    )

    role = forms.ChoiceField(
        label='Papel',
        choices=ROLE_CHOICES,
        initial=Membership.Role.MEMBER,
        widget=forms.Select(attrs={'class': 'form-select w-full px-4 py-2 border rounded-lg'})
    )


class TaskForm(forms.Form):
    """Campos editáveis da tarefa no modal"""

    title = forms.CharField(
        label='Título',
        max_length=200,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS})
    )

    description = forms.CharField(
        label='Descrição',
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-textarea w-full px-4 py-2 border rounded-lg', 'rows': 4})
    )

    status = forms.ChoiceField(
        label='Status',
        choices=Task.Status.choices,
        initial=Task.Status.TODO,
        widget=forms.Select(attrs={'class': 'form-select w-full px-4 py-2 border rounded-lg'})
    )

    due_date = forms.DateTimeField(
        label='Prazo',
        required=False,
        input_formats=['%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M', '%Y-%m-%d'],
        widget=forms.DateTimeInput(attrs={'class': INPUT_CLASS, 'type': 'datetime-local'})
    )


class CommentForm(forms.Form):
    content = forms.CharField(
        label='Comentário',
        widget=forms.Textarea(attrs={
            'class': 'form-textarea w-full px-4 py-2 border rounded-lg',
            'rows': 2,
            'placeholder': 'Escreva um comentário...'
        })
    )
