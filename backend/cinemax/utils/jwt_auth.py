"""
JWT認証ユーティリティ
トークンの署名・検証と、Bearer Token を読み取る依存関係を提供する
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from cinemax.config import JWT_SECRET, ALGORITHM, ACCESS_TOKEN_EXPIRE_HOURS
from cinemax.errors import AuthenticationError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

INVALID_TOKEN_MESSAGE = "Token inválido o expirado"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """JWTアクセストークンを生成する"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS))
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    署名と有効期限を検証してクレームを返す。
    期限切れ・改ざん・形式不正はすべて同じ AuthenticationError になる（ログのみ区別）。
    """
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.info("rejected expired token")
    except JWTError as e:
        logger.info("rejected invalid token: %s", e)
    raise AuthenticationError(INVALID_TOKEN_MESSAGE)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Authorization: Bearer <token> ヘッダーからトークンを取り出す"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Token no proporcionado")
    return credentials.credentials


async def get_token_claims(token: str = Depends(get_bearer_token)) -> dict:
    """トークンを検証し、クレームを返す。無効・期限切れの場合は 401"""
    return decode_access_token(token)
