from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from cinemax.config import DATABASE_URL, DEBUG


def build_engine(url: str):
    """エンジンを生成する（インメモリSQLiteは単一コネクションを共有）"""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": DEBUG}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, echo=DEBUG, pool_pre_ping=True)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db():
    # モデルをインポート（テーブル作成のため）
    from cinemax.models import cliente, trabajador  # noqa: F401

    Base.metadata.create_all(bind=engine)
