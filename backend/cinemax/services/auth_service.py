"""
認証フロー
ログイン・登録・トークン検証・プロフィール取得をまとめる。
データベースへのアクセスは CredentialStore 経由のみ
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends

from cinemax.config import DEFAULT_STAFF_ROLE, USER_TYPE_CLIENTE, USER_TYPE_TRABAJADOR, USER_TYPES
from cinemax.errors import AuthenticationError, InternalError, NotFoundError, ValidationError
from cinemax.services.credential_store import CredentialStore, StoreResult, get_credential_store
from cinemax.utils.jwt_auth import create_access_token, decode_access_token
from cinemax.utils.security import hash_password, verify_password
from cinemax.utils.validation import validate_login, validate_registration

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGES = {
    USER_TYPE_CLIENTE: "Cliente no encontrado o inactivo",
    USER_TYPE_TRABAJADOR: "Trabajador no encontrado o inactivo",
}

REGISTERED_MESSAGES = {
    USER_TYPE_CLIENTE: "Cliente registrado exitosamente",
    USER_TYPE_TRABAJADOR: "Trabajador registrado exitosamente",
}

USERNAME_TAKEN = "El username ya está en uso"
CORREO_TAKEN = "El correo ya está registrado"


def _require(result: StoreResult, message: str = "Error interno del servidor") -> StoreResult:
    if not result.success:
        raise InternalError(message, detail=result.message)
    return result


class AuthService:
    """認証サービス"""

    def __init__(self, store: CredentialStore):
        self.store = store

    def login(self, username: Optional[str], password: Optional[str], user_type: Optional[str]) -> Dict[str, Any]:
        """ユーザーログイン。成功時はトークンと公開ユーザー情報を返す"""
        validation = validate_login(username, password, user_type)
        if not validation.is_valid:
            raise ValidationError(validation.message, validation.field)

        user = _require(self.store.find_active_by_username(user_type, username)).first
        if user is None:
            logger.info("login failed: unknown %s %s", user_type, username)
            raise AuthenticationError(NOT_FOUND_MESSAGES[user_type])

        if not verify_password(password, user["password_hash"]):
            logger.info("login failed: wrong password for %s %s", user_type, username)
            raise AuthenticationError("Contraseña incorrecta")

        # 最終ログイン日時の更新に失敗してもログイン自体は成功させる
        touched = self.store.touch_last_login(user_type, user["id"])
        if not touched.success:
            logger.warning("could not update last login for %s %s: %s", user_type, user["id"], touched.message)

        claims = {
            "id": user["id"],
            "username": user["username"],
            "name": user["nombre"],
            "email": user["correo"],
            "userType": user_type,
        }
        if user_type == USER_TYPE_TRABAJADOR:
            claims["rol"] = user["rol"]
        token = create_access_token(claims)

        public_user = {
            "id": user["id"],
            "username": user["username"],
            "name": user["nombre"],
            "email": user["correo"],
            "telefono": user["telefono"],
            "userType": user_type,
        }
        if user_type == USER_TYPE_TRABAJADOR:
            public_user["rol"] = user["rol"]

        logger.info("login success: %s %s", user_type, username)
        return {
            "message": f"¡Bienvenido {user['nombre']}!",
            "user": public_user,
            "token": token,
        }

    def register(self, user_type: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """新規アカウント登録。従業員のロールは常に最低権限"""
        username = fields.get("username")
        password = fields.get("password")
        nombre = fields.get("nombre")
        correo = fields.get("correo")
        telefono = fields.get("telefono") or None

        validation = validate_registration(username, password, nombre, correo, telefono)
        if not validation.is_valid:
            raise ValidationError(validation.message, validation.field)

        existing = _require(
            self.store.find_conflicts(user_type, username, correo),
            "Error verificando datos existentes",
        ).data
        if any(row["username"] == username for row in existing):
            raise ValidationError(USERNAME_TAKEN, "username")
        if any(row["correo"] == correo for row in existing):
            raise ValidationError(CORREO_TAKEN, "correo")

        rol = DEFAULT_STAFF_ROLE if user_type == USER_TYPE_TRABAJADOR else None
        result = self.store.insert(
            user_type,
            username=username,
            password_hash=hash_password(password),
            nombre=nombre,
            correo=correo,
            telefono=telefono,
            rol=rol,
        )
        if result.conflict:
            # 事前チェック後に同時登録された場合
            self._raise_conflict(user_type, username, correo)
        _require(result, "Error creando la cuenta")

        new_user = dict(result.first)
        new_user["userType"] = user_type
        logger.info("registered %s %s (id=%s)", user_type, username, new_user["id"])
        return {"message": REGISTERED_MESSAGES[user_type], "user": new_user}

    def _raise_conflict(self, user_type: str, username: str, correo: str):
        existing = self.store.find_conflicts(user_type, username, correo)
        if existing.success and not any(row["username"] == username for row in existing.data):
            raise ValidationError(CORREO_TAKEN, "correo")
        raise ValidationError(USERNAME_TAKEN, "username")

    def verify_token(self, token: str) -> Dict[str, Any]:
        """トークンを検証してクレームを返す"""
        return decode_access_token(token)

    def get_profile(self, claims: Dict[str, Any]) -> Dict[str, Any]:
        """トークンのクレームから現在のユーザー情報を取得"""
        user_type = claims.get("userType")
        user_id = claims.get("id")
        if user_type not in USER_TYPES or user_id is None:
            raise AuthenticationError("Token inválido")

        found = _require(self.store.find_active_by_id(user_type, user_id)).first
        if found is None:
            raise NotFoundError("Usuario no encontrado")

        user = dict(found)
        user["userType"] = user_type
        return user


def get_auth_service(store: CredentialStore = Depends(get_credential_store)) -> AuthService:
    return AuthService(store)
