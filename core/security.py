from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import hmac
import secrets

from jose import jwt, JWTError
from passlib.context import CryptContext

from .config import settings

# Contexto de hash para senhas (bcrypt)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

COMMON_PASSWORDS = [
    "password", "senha", "123456", "12345678", "qwerty", "abc123",
    "password123", "admin", "letmein", "welcome", "monkey", "1234567890",
]


def hash_password(password: str) -> str:
    """Gera hash da senha usando bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica se a senha corresponde ao hash."""
    return pwd_context.verify(plain_password, hashed_password)


def validate_password_strength(
    password: str,
    email: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> tuple[bool, str]:
    """
    Valida a força da senha conforme política definida.
    Retorna (válido, mensagem_erro).

    Apenas o tamanho mínimo é obrigatório por padrão; as demais regras
    dependem das flags PASSWORD_REQUIRE_* das configurações.
    """
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        return False, f"Senha deve ter no mínimo {settings.PASSWORD_MIN_LENGTH} caracteres"

    if settings.PASSWORD_REQUIRE_UPPERCASE and not any(c.isupper() for c in password):
        return False, "Senha deve conter pelo menos uma letra maiúscula"

    if settings.PASSWORD_REQUIRE_LOWERCASE and not any(c.islower() for c in password):
        return False, "Senha deve conter pelo menos uma letra minúscula"

    if settings.PASSWORD_REQUIRE_DIGIT and not any(c.isdigit() for c in password):
        return False, "Senha deve conter pelo menos um número"

    if settings.PASSWORD_REQUIRE_SPECIAL and all(c.isalnum() for c in password):
        return False, "Senha deve conter pelo menos um caractere especial"

    if password.lower() in COMMON_PASSWORDS:
        return False, "Senha muito comum, escolha outra"

    if settings.PASSWORD_REJECT_PERSONAL_INFO:
        lower = password.lower()
        if email:
            for part in email.lower().split("@")[0].split("."):
                if len(part) > 3 and part in lower:
                    return False, "A senha não pode conter partes do seu email"
        for nome in (first_name, last_name):
            if nome and len(nome) > 3 and nome.lower() in lower:
                return False, "A senha não pode conter seu nome"

    return True, ""


def create_access_token(
    user_id: str,
    email: Optional[str],
    user_type: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Cria o bearer token JWT (stateless, não fica guardado no servidor).

    Args:
        user_id: ID do usuário
        email: Email do usuário (pode ser None para contas OAuth)
        user_type: aluno, personal, academia ou admin
        expires_delta: Tempo de expiração customizado

    Returns:
        Token JWT codificado
    """
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    payload = {
        "id": user_id,
        "email": email,
        "userType": user_type,
        "exp": expire,
        "iat": now,
    }

    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decodifica e valida um token JWT.

    Returns:
        Payload do token ou None se inválido ou expirado
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None


def hash_reset_token(token: str) -> str:
    """Hash determinístico do token de senha (é o que fica no banco)."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token() -> tuple[str, str]:
    """
    Gera token de definição/reset de senha e seu hash.

    Returns:
        Tupla (token_plain, token_hash)
        - token_plain: Enviado por email
        - token_hash: Armazenado no banco
    """
    token = secrets.token_hex(32)
    return token, hash_reset_token(token)


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def generate_session_id() -> str:
    """Gera ID único para sessão."""
    return secrets.token_urlsafe(32)


def generate_invite_code(length: int = 6) -> str:
    alphabet = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
    return "".join(secrets.choice(alphabet) for _ in range(length))
