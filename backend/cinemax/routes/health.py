from datetime import datetime, timezone
from fastapi import APIRouter
from cinemax.config import VERSION
from cinemax.database import engine

router = APIRouter(prefix="/api", tags=["health"])

@router.get("/health")
def health_check():
    """ヘルスチェック"""
    return {
        "success": True,
        "message": "Servidor CineMax funcionando correctamente",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": VERSION,
        "database": engine.dialect.name,
    }
