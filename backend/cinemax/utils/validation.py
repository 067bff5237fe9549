"""
入力バリデーション
HTTP層に依存しない純粋関数。結果は ValidationResult で返す
"""

import re
from dataclasses import dataclass
from typing import Optional

from cinemax.config import USER_TYPES

USERNAME_RE = re.compile(r"[a-zA-Z]+")
PASSWORD_RE = re.compile(r"[a-zA-Z0-9@#$%^&+=!?._-]+")
NOMBRE_RE = re.compile(r"[a-zA-ZÀ-ÿñÑ\s]+")
CORREO_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
TELEFONO_RE = re.compile(r"[0-9\s\-()+]+")

MAX_LOGIN_USERNAME = 50
MAX_LOGIN_PASSWORD = 100

MIN_USERNAME = 4
MIN_PASSWORD = 9
MIN_NOMBRE = 5
MIN_CORREO = 9
MIN_TELEFONO = 9


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    message: str
    field: Optional[str] = None


VALID = ValidationResult(True, "Datos válidos")


def _invalid(message: str, field: Optional[str] = None) -> ValidationResult:
    return ValidationResult(False, message, field)


def validate_login(username, password, user_type) -> ValidationResult:
    """ログイン入力の形式チェック（保存済み認証情報とは無関係）"""
    if not username or not password or not user_type:
        return _invalid("Username, password y userType son requeridos")

    if user_type not in USER_TYPES:
        return _invalid('userType debe ser "cliente" o "trabajador"', "userType")

    if not USERNAME_RE.fullmatch(username):
        return _invalid("Usuario solo puede contener letras", "username")

    if len(username) > MAX_LOGIN_USERNAME or len(password) > MAX_LOGIN_PASSWORD:
        return _invalid("Datos demasiado largos")

    return VALID


def validate_registration(username, password, nombre, correo, telefono=None) -> ValidationResult:
    """登録データの検証。最初に失敗したチェックの理由を返す"""
    if not username or not password or not nombre or not correo:
        return _invalid("Todos los campos son requeridos")

    # 最小文字数
    if len(username) < MIN_USERNAME:
        return _invalid("El usuario debe tener al menos 4 caracteres", "username")
    if len(password) < MIN_PASSWORD:
        return _invalid("La contraseña debe tener al menos 9 caracteres", "password")
    if len(nombre) < MIN_NOMBRE:
        return _invalid("El nombre debe tener al menos 5 caracteres", "nombre")
    if len(correo) < MIN_CORREO:
        return _invalid("El correo debe tener al menos 9 caracteres", "correo")
    if telefono and len(telefono) < MIN_TELEFONO:
        return _invalid("El teléfono debe tener al menos 9 caracteres", "telefono")

    # 文字種
    if not PASSWORD_RE.fullmatch(password):
        return _invalid("La contraseña contiene caracteres no permitidos", "password")
    if any(c.isspace() for c in password):
        return _invalid("La contraseña no puede contener espacios", "password")
    if not NOMBRE_RE.fullmatch(nombre):
        return _invalid("El nombre solo puede contener letras y espacios", "nombre")
    if not USERNAME_RE.fullmatch(username):
        return _invalid("El usuario solo puede contener letras", "username")
    if not CORREO_RE.fullmatch(correo):
        return _invalid("El formato del correo electrónico no es válido", "correo")
    if telefono and not TELEFONO_RE.fullmatch(telefono):
        return _invalid("El teléfono contiene caracteres no permitidos", "telefono")

    return VALID
