import hashlib
from datetime import timedelta

from jose import jwt

from core.config import settings
from core.security import (
    create_access_token,
    decode_token,
    generate_invite_code,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    validate_password_strength,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("senha-forte-123")
        assert hashed != "senha-forte-123"
        assert verify_password("senha-forte-123", hashed)
        assert not verify_password("outra-senha", hashed)


class TestBearerToken:
    def test_payload_fields(self):
        token = create_access_token(user_id="u-1", email="a@x.com", user_type="personal")
        payload = decode_token(token)
        assert payload["id"] == "u-1"
        assert payload["email"] == "a@x.com"
        assert payload["userType"] == "personal"
        assert payload["exp"] - payload["iat"] == settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def test_expired_token_is_rejected(self):
        token = create_access_token("u-1", "a@x.com", "aluno", expires_delta=timedelta(seconds=-10))
        assert decode_token(token) is None

    def test_wrong_signature_is_rejected(self):
        token = jwt.encode({"id": "u-1"}, "outro-segredo", algorithm="HS256")
        assert decode_token(token) is None

    def test_garbage_is_rejected(self):
        assert decode_token("nao-e-um-jwt") is None


class TestResetToken:
    def test_only_hash_is_returned_for_storage(self):
        token, token_hash = generate_reset_token()
        assert token != token_hash
        assert token_hash == hashlib.sha256(token.encode()).hexdigest()
        assert hash_reset_token(token) == token_hash
        assert len(token_hash) == 64

    def test_tokens_are_unique(self):
        assert generate_reset_token()[0] != generate_reset_token()[0]


class TestPasswordStrength:
    def test_min_length(self):
        ok, msg = validate_password_strength("curta")
        assert not ok
        assert str(settings.PASSWORD_MIN_LENGTH) in msg

    def test_valid_password(self):
        assert validate_password_strength("treino-pesado-9") == (True, "")

    def test_common_password(self):
        ok, _ = validate_password_strength("password123")
        assert not ok

    def test_rejects_email_part(self):
        ok, msg = validate_password_strength("mariana2024!", email="mariana@gymsync.com")
        assert not ok
        assert "email" in msg

    def test_rejects_name(self):
        ok, msg = validate_password_strength("xx-carlos-xx", first_name="Carlos")
        assert not ok
        assert "nome" in msg


def test_invite_code_format():
    code = generate_invite_code()
    assert len(code) == 6
    assert all(c in "ABCDEFGHJKLMNPQRSTUVWXYZ23456789" for c in code)
