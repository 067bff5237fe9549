from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from cinemax.config import USER_TYPE_CLIENTE, USER_TYPE_TRABAJADOR
from cinemax.services.auth_service import AuthService, get_auth_service
from cinemax.utils.jwt_auth import get_bearer_token, get_token_claims

router = APIRouter(prefix="/api/auth", tags=["auth"])

# スキーマ（必須チェックは AuthService 側で行い 400 を返す。ボディ省略時は空のモデル）
class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    userType: Optional[str] = None

class RegisterRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    nombre: Optional[str] = None
    correo: Optional[str] = None
    telefono: Optional[str] = None

@router.post("/login")
def login(data: LoginRequest = LoginRequest(), service: AuthService = Depends(get_auth_service)):
    """ユーザーログイン（cliente / trabajador）"""
    result = service.login(data.username, data.password, data.userType)
    return {
        "success": True,
        "message": result["message"],
        "user": result["user"],
        "token": result["token"],
    }

@router.post("/register/cliente", status_code=201)
def register_cliente(data: RegisterRequest = RegisterRequest(), service: AuthService = Depends(get_auth_service)):
    """顧客の新規登録"""
    result = service.register(USER_TYPE_CLIENTE, data.model_dump())
    return {"success": True, "message": result["message"], "user": result["user"]}

@router.post("/register/trabajador", status_code=201)
def register_trabajador(data: RegisterRequest = RegisterRequest(), service: AuthService = Depends(get_auth_service)):
    """従業員の新規登録（ロールは常に 'empleado'）"""
    result = service.register(USER_TYPE_TRABAJADOR, data.model_dump())
    return {"success": True, "message": result["message"], "user": result["user"]}

@router.get("/verify")
def verify(token: str = Depends(get_bearer_token), service: AuthService = Depends(get_auth_service)):
    """トークンを検証し、クレームを返す"""
    return {"success": True, "user": service.verify_token(token)}

@router.get("/profile")
def profile(claims: dict = Depends(get_token_claims), service: AuthService = Depends(get_auth_service)):
    """認証済みユーザーのプロフィール"""
    return {"success": True, "user": service.get_profile(claims)}
