from loteamentos.auth.credentials import (
    generate_id,
    hash_password,
    validate_email,
    validate_password,
    verify_password,
)


def test_hash_and_verify():
    h = hash_password("Segura123")
    assert h != "Segura123"
    assert verify_password(h, "Segura123")
    assert not verify_password(h, "segura123")


def test_verify_rejects_garbage_hash():
    assert not verify_password("not-a-hash", "Segura123")
    assert not verify_password("", "Segura123")


def test_short_lowercase_password_reports_three_rules():
    check = validate_password("abc")
    assert not check.valid
    assert len(check.errors) == 3
    assert "A senha deve ter no mínimo 8 caracteres" in check.errors


def test_empty_password_reports_every_rule():
    assert len(validate_password("").errors) == 4


def test_valid_password():
    check = validate_password("Abcdefg1")
    assert check.valid
    assert check.errors == []


def test_validate_email():
    assert validate_email("user@example.com")
    assert not validate_email("user@example")
    assert not validate_email("user example@x.com")
    assert not validate_email("user@example.com\n")
    assert not validate_email("")


def test_generate_id_shape():
    ids = {generate_id() for _ in range(50)}
    assert len(ids) == 50
    for i in ids:
        assert i[:13].isdigit()
        assert len(i) == 22
