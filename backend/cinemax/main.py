import logging
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from cinemax.config import DEBUG, CORS_ORIGINS, VERSION, SHOW_ERROR_DETAIL, LOG_LEVEL, PORT
from cinemax.database import init_db
from cinemax.errors import CinemaxError, InternalError, ValidationError
from cinemax.routes import auth, diagnostics, health

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# テーブル作成
init_db()


# HTTPセキュリティヘッダーミドルウェア
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not DEBUG:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# DEBUGモード時のみドキュメントエンドポイントを公開
app = FastAPI(
    title="CineMax API",
    description="Autenticación de clientes y trabajadores de CineMax",
    version=VERSION,
    docs_url="/docs" if DEBUG else None,
    redoc_url="/redoc" if DEBUG else None,
    openapi_url="/openapi.json" if DEBUG else None,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """リクエストと結果をログに記録"""
    logger.info("request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("error handling %s %s", request.method, request.url.path)
        raise
    logger.info("response %s %s status %s", request.method, request.url.path, response.status_code)
    return response


app.add_middleware(SecurityHeadersMiddleware)

# CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


# エラーハンドラー
def _error_body(message: str, **extra) -> dict:
    body = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


@app.exception_handler(CinemaxError)
async def cinemax_error_handler(request: Request, exc: CinemaxError):
    extra = {}
    if isinstance(exc, ValidationError):
        extra["field"] = exc.field
    if isinstance(exc, InternalError):
        logger.error("internal error on %s %s: %s (%s)", request.method, request.url.path, exc.message, exc.detail)
        if SHOW_ERROR_DETAIL:
            extra["error"] = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, **extra),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # 型不正などのリクエストボディエラーも 400 で返す
    return JSONResponse(status_code=400, content=_error_body("Datos de entrada inválidos"))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = f"Ruta no encontrada: {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    extra = {"error": str(exc)} if SHOW_ERROR_DETAIL else {}
    return JSONResponse(status_code=500, content=_error_body("Error interno del servidor", **extra))


# ルート登録
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(diagnostics.router)


@app.get("/")
def root():
    """APIの概要"""
    return {
        "message": "API CineMax Backend",
        "version": VERSION,
        "endpoints": {
            "health": "/api/health",
            "login": "POST /api/auth/login",
            "register": "POST /api/auth/register/cliente",
            "registerTrabajador": "POST /api/auth/register/trabajador",
            "verify": "GET /api/auth/verify",
            "profile": "GET /api/auth/profile",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("cinemax.main:app", host="0.0.0.0", port=PORT, reload=DEBUG)
