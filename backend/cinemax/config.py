import os
import sys
from dotenv import load_dotenv

load_dotenv()

# アプリケーションバージョン
VERSION = "1.0.0"

# 実行環境（development / production）
ENVIRONMENT = os.getenv("ENVIRONMENT", "").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
# エラー詳細は ENVIRONMENT=development を明示した場合のみレスポンスに含める
SHOW_ERROR_DETAIL = ENVIRONMENT == "development"

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cinemax.db")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "3001"))

# 本番環境では環境変数 CORS_ORIGINS にドメインをカンマ区切りで指定すること
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip()]

# JWT認証設定
# デフォルト値はローカル開発専用。本番環境では必ず環境変数 JWT_SECRET を設定すること
_DEFAULT_JWT_SECRET = "cinemax_secret_key"
JWT_SECRET = os.getenv("JWT_SECRET", _DEFAULT_JWT_SECRET)

if IS_PRODUCTION and JWT_SECRET == _DEFAULT_JWT_SECRET:
    print(
        "[SECURITY ERROR] 本番環境 (ENVIRONMENT=production) でデフォルトの JWT_SECRET が使用されています。"
        "環境変数 JWT_SECRET に安全なランダム文字列を設定してください。",
        file=sys.stderr,
    )
    sys.exit(1)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 24

BCRYPT_ROUNDS = 10

USER_TYPE_CLIENTE = "cliente"
USER_TYPE_TRABAJADOR = "trabajador"
USER_TYPES = (USER_TYPE_CLIENTE, USER_TYPE_TRABAJADOR)

# 従業員ロール（権限の高い順）
STAFF_ROLES = ("admin", "gerente", "empleado")
DEFAULT_STAFF_ROLE = "empleado"
