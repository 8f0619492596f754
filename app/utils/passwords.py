# app/utils/passwords.py
from passlib.context import CryptContext

# Соль у каждого хеша своя, bcrypt хранит ее внутри строки хеша
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _truncate_password(password: str) -> str:
    # bcrypt учитывает только первые 72 байта
    return password.encode("utf-8")[:72].decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
    """Хеширует пароль через bcrypt."""
    return pwd_context.hash(_truncate_password(password))


def verify_password(password: str, password_hash: str) -> bool:
    """
    Проверяет пароль против хеша.
    Сравнение регистрозависимое и точное.
    """
    return pwd_context.verify(_truncate_password(password), password_hash)


# Хеш-пустышка: проверяется для несуществующих email, чтобы время ответа не выдавало наличие аккаунта
DUMMY_PASSWORD_HASH = hash_password("not-a-real-password")
