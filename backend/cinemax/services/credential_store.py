"""
認証情報ストア
clientes / trabajadores テーブルへのパラメータ化クエリを実行し、
例外を送出せずに StoreResult（成功フラグ + データ or メッセージ）を返す
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import column, func, inspect, or_, select, table, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cinemax.config import USER_TYPE_CLIENTE, USER_TYPE_TRABAJADOR
from cinemax.models.cliente import Cliente
from cinemax.models.trabajador import Trabajador

logger = logging.getLogger(__name__)


@dataclass
class StoreResult:
    success: bool
    data: List[Dict[str, Any]] = field(default_factory=list)
    message: str = ""
    conflict: bool = False  # 一意制約違反

    @property
    def first(self) -> Optional[Dict[str, Any]]:
        return self.data[0] if self.data else None


class CredentialStore:
    """認証情報へのアクセサ。セッションは呼び出しごとに取得・解放する"""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    @staticmethod
    def _model(user_type: str):
        if user_type == USER_TYPE_CLIENTE:
            return Cliente, Cliente.id_cliente
        if user_type == USER_TYPE_TRABAJADOR:
            return Trabajador, Trabajador.id_trabajador
        return None, None

    def _run(self, operation: str, fn: Callable[[Session], List[Dict[str, Any]]]) -> StoreResult:
        session = self._session_factory()
        try:
            return StoreResult(success=True, data=fn(session))
        except IntegrityError as e:
            session.rollback()
            logger.warning("integrity error in %s: %s", operation, e.orig)
            return StoreResult(success=False, message=str(e.orig), conflict=True)
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("datastore error in %s", operation)
            return StoreResult(success=False, message=str(e))
        finally:
            session.close()

    @staticmethod
    def _unknown(user_type: str) -> StoreResult:
        return StoreResult(success=False, message=f"Tipo de usuario desconocido: {user_type}")

    def find_active_by_username(self, user_type: str, username: str) -> StoreResult:
        """ユーザー名で有効なアカウントを検索（パスワードハッシュを含む）"""
        model, pk = self._model(user_type)
        if model is None:
            return self._unknown(user_type)

        columns = [
            pk.label("id"), model.username, model.password_hash, model.nombre,
            model.correo, model.telefono,
        ]
        if model is Trabajador:
            columns.append(Trabajador.rol)
        columns += [model.activo, model.fecha_ultimo_login]

        stmt = select(*columns).where(model.username == username, model.activo.is_(True))
        return self._run(
            "find_active_by_username",
            lambda s: [dict(row) for row in s.execute(stmt).mappings().all()],
        )

    def find_active_by_id(self, user_type: str, user_id: int) -> StoreResult:
        """IDで有効なアカウントを検索（プロフィール用、パスワードハッシュなし）"""
        model, pk = self._model(user_type)
        if model is None:
            return self._unknown(user_type)

        columns = [pk.label("id"), model.username, model.nombre, model.correo, model.telefono]
        if model is Trabajador:
            columns += [Trabajador.rol, Trabajador.fecha_creacion]
        else:
            columns.append(Cliente.fecha_registro)
        columns.append(model.fecha_ultimo_login)

        stmt = select(*columns).where(pk == user_id, model.activo.is_(True))
        return self._run(
            "find_active_by_id",
            lambda s: [dict(row) for row in s.execute(stmt).mappings().all()],
        )

    def find_conflicts(self, user_type: str, username: str, correo: str) -> StoreResult:
        """ユーザー名またはメールが一致する既存行を返す（有効/無効を問わない）"""
        model, _ = self._model(user_type)
        if model is None:
            return self._unknown(user_type)

        stmt = select(model.username, model.correo).where(
            or_(model.username == username, model.correo == correo)
        )
        return self._run(
            "find_conflicts",
            lambda s: [dict(row) for row in s.execute(stmt).mappings().all()],
        )

    def insert(
        self,
        user_type: str,
        *,
        username: str,
        password_hash: str,
        nombre: str,
        correo: str,
        telefono: Optional[str] = None,
        rol: Optional[str] = None,
    ) -> StoreResult:
        """新規アカウントを作成し、生成されたIDと公開フィールドを返す"""
        model, pk = self._model(user_type)
        if model is None:
            return self._unknown(user_type)

        values = dict(
            username=username,
            password_hash=password_hash,
            nombre=nombre,
            correo=correo,
            telefono=telefono,
        )
        if model is Trabajador and rol is not None:
            values["rol"] = rol

        def _insert(session: Session):
            row = model(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            created = {
                "id": getattr(row, pk.key),
                "username": row.username,
                "nombre": row.nombre,
                "correo": row.correo,
                "telefono": row.telefono,
            }
            if model is Trabajador:
                created["rol"] = row.rol
            return [created]

        return self._run("insert", _insert)

    def touch_last_login(self, user_type: str, user_id: int) -> StoreResult:
        """最終ログイン日時を現在時刻に更新"""
        model, pk = self._model(user_type)
        if model is None:
            return self._unknown(user_type)

        stmt = update(model).where(pk == user_id).values(fecha_ultimo_login=func.now())

        def _touch(session: Session):
            session.execute(stmt)
            session.commit()
            return []

        return self._run("touch_last_login", _touch)

    def list_tables(self) -> StoreResult:
        """データベース内のテーブル一覧"""
        def _list(session: Session):
            inspector = inspect(session.get_bind())
            schema = inspector.default_schema_name
            return [
                {"table_name": name, "table_schema": schema}
                for name in sorted(inspector.get_table_names())
            ]

        return self._run("list_tables", _list)

    def find_tables(self, *keywords: str) -> StoreResult:
        """名前にキーワードを含むテーブルと件数を返す"""
        lowered = [k.lower() for k in keywords]

        def _find(session: Session):
            inspector = inspect(session.get_bind())
            schema = inspector.default_schema_name
            found = []
            for name in sorted(inspector.get_table_names()):
                if not any(k in name.lower() for k in lowered):
                    continue
                try:
                    count = session.execute(select(func.count()).select_from(table(name))).scalar_one()
                except SQLAlchemyError:
                    logger.warning("could not count rows of %s", name)
                    session.rollback()
                    count = "Error acceso"
                found.append({"name": name, "schema": schema, "count": count})
            return found

        return self._run("find_tables", _find)

    def fetch_rows(self, table_name: str, columns: List[str], order_by: str = "id") -> StoreResult:
        """指定テーブルの行を取得（テーブルが存在しない場合は失敗を返す）"""
        target = table(table_name, *[column(name) for name in columns])
        stmt = select(target).order_by(target.c[order_by])

        def _fetch(session: Session):
            if not inspect(session.get_bind()).has_table(table_name):
                return None
            return [dict(row) for row in session.execute(stmt).mappings().all()]

        result = self._run("fetch_rows", _fetch)
        if result.success and result.data is None:
            return StoreResult(success=False, message=f"La tabla {table_name} no existe")
        return result


def get_credential_store() -> CredentialStore:
    """FastAPI 依存関係: アプリケーションのセッションファクトリに束縛したストア"""
    from cinemax.database import SessionLocal

    return CredentialStore(SessionLocal)
