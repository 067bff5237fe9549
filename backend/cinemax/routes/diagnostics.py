import logging
from fastapi import APIRouter, Depends
from cinemax.errors import InternalError
from cinemax.services.credential_store import CredentialStore, get_credential_store
from cinemax.utils.jwt_auth import get_token_claims

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["diagnostics"])

@router.get("/listar-tablas")
def list_tables(claims: dict = Depends(get_token_claims), store: CredentialStore = Depends(get_credential_store)):
    """データベース内のテーブル一覧（要認証）"""
    result = store.list_tables()
    if not result.success:
        raise InternalError("Error listando tablas", detail=result.message)

    logger.info("listed %d tables for %s", len(result.data), claims.get("username"))
    return {
        "success": True,
        "tables": result.data,
        "message": f"Se encontraron {len(result.data)} tablas",
    }

@router.get("/verificar-tabla")
def check_data_tables(claims: dict = Depends(get_token_claims), store: CredentialStore = Depends(get_credential_store)):
    """名前に 'datos' または 'excel' を含むテーブルと件数（要認証）"""
    result = store.find_tables("datos", "excel")
    if not result.success:
        raise InternalError("Error interno verificando tabla", detail=result.message)

    if not result.data:
        return {
            "success": True,
            "tableExists": False,
            "recordCount": 0,
            "possibleTables": [],
            "message": 'No se encontraron tablas relacionadas con "datos" o "excel"',
        }

    return {
        "success": True,
        "tableExists": True,
        "possibleTables": result.data,
        "message": f"Se encontraron {len(result.data)} tablas relacionadas",
    }

DATOS_EXCEL_COLUMNS = [
    "id", "nrocto", "contratista", "identificacion", "objeto",
    "cdp", "tiempo", "vrcto", "unidad", "rubro",
]

@router.get("/datos-excel")
def datos_excel(claims: dict = Depends(get_token_claims), store: CredentialStore = Depends(get_credential_store)):
    """datosexcel テーブルのデータを取得（要認証）"""
    result = store.fetch_rows("datosexcel", DATOS_EXCEL_COLUMNS)
    if not result.success:
        raise InternalError("Error consultando los datos", detail=result.message)

    if not result.data:
        return {
            "success": True,
            "message": "Consulta exitosa pero sin datos",
            "data": [],
            "count": 0,
        }

    logger.info("returned %d datosexcel rows to %s", len(result.data), claims.get("username"))
    return {
        "success": True,
        "message": "Datos obtenidos exitosamente",
        "data": result.data,
        "count": len(result.data),
    }
