import pytest

from loteamentos.auth.session import SessionStore
from loteamentos.auth.users import UserDirectory
from loteamentos.core.models import Role
from loteamentos.services import auth_service


@pytest.fixture()
def directory(store):
    d = UserDirectory(store)
    d.seed_defaults(password="Seed@Pass1")
    return d


@pytest.fixture()
def sessions(store, clock):
    return SessionStore(store, clock=clock)


def test_login_success_opens_session(directory, sessions):
    result = auth_service.login(directory, sessions, "jorgepereira@expandhurbanismo.com.br", "Seed@Pass1")
    assert result.ok
    assert result.user.role is Role.ADMIN
    assert sessions.current_user() == result.user


def test_login_failure_uses_one_message(directory, sessions):
    wrong_pw = auth_service.login(directory, sessions, "ti@expandhurbanismo.com.br", "Errada123")
    unknown = auth_service.login(directory, sessions, "ninguem@example.com", "Errada123")
    assert wrong_pw.errors == unknown.errors == [auth_service.MSG_BAD_CREDENTIALS]
    assert sessions.current_user() is None


def test_login_validates_inputs(directory, sessions):
    result = auth_service.login(directory, sessions, "invalido", "")
    assert not result.ok
    assert result.errors == ["Formato de e-mail inválido", "Senha é obrigatória"]


def test_logout(directory, sessions):
    auth_service.login(directory, sessions, "ti@expandhurbanismo.com.br", "Seed@Pass1")
    auth_service.logout(sessions)
    assert sessions.current_user() is None


def test_register_accumulates_errors(directory):
    result = auth_service.register(directory, "", "x@", "abc", "abd")
    assert not result.ok
    assert "Nome completo é obrigatório" in result.errors
    assert "Formato de e-mail inválido" in result.errors
    assert "As senhas não coincidem" in result.errors
    assert len(result.errors) == 6


def test_register_creates_regular_user(directory):
    result = auth_service.register(directory, " Ana Lima ", "Ana@Example.com", "Segura123", "Segura123")
    assert result.ok
    assert result.user.role is Role.USER
    stored = directory.find_by_email("ana@example.com")
    assert stored.email == "ana@example.com"
    assert stored.name == "Ana Lima"
    assert directory.authenticate("ana@example.com", "Segura123") is not None


def test_register_rejects_taken_email(directory):
    result = auth_service.register(directory, "Outro", "TI@expandhurbanismo.com.br", "Segura123", "Segura123")
    assert result.errors == [auth_service.MSG_EMAIL_TAKEN]


def test_change_password(directory):
    uid = directory.find_by_email("ti@expandhurbanismo.com.br").id
    result = auth_service.change_password(directory, uid, "Seed@Pass1", "Nova@Senha2", "Nova@Senha2")
    assert result.ok
    assert directory.authenticate("ti@expandhurbanismo.com.br", "Nova@Senha2") is not None


def test_change_password_wrong_current(directory):
    uid = directory.find_by_email("ti@expandhurbanismo.com.br").id
    result = auth_service.change_password(directory, uid, "Errada123", "Nova@Senha2", "Nova@Senha2")
    assert result.errors == ["Senha atual incorreta"]


def test_change_password_same_as_current(directory):
    uid = directory.find_by_email("ti@expandhurbanismo.com.br").id
    result = auth_service.change_password(directory, uid, "Seed@Pass1", "Seed@Pass1", "Seed@Pass1")
    assert result.errors == ["A nova senha deve ser diferente da senha atual"]


def test_forgot_password(directory):
    assert auth_service.forgot_password(directory, "mpuntel@expandhurbanismo.com.br").ok
    missing = auth_service.forgot_password(directory, "ninguem@example.com")
    assert missing.errors == ["E-mail não encontrado em nossa base de dados"]
