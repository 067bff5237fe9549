"""
エラー分類
サービス層はこれらを送出し、main.py のハンドラーが JSON レスポンスに変換する
"""

from typing import Optional


class CinemaxError(Exception):
    status_code = 500

    def __init__(self, message: str, headers: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers


class ValidationError(CinemaxError):
    """入力不備・形式不正・ユーザー名/メールの重複"""
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AuthenticationError(CinemaxError):
    status_code = 401

    def __init__(self, message: str):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(CinemaxError):
    status_code = 404


class InternalError(CinemaxError):
    status_code = 500

    def __init__(self, message: str = "Error interno del servidor", detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail
