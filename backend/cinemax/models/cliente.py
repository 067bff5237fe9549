from sqlalchemy import Column, Integer, String, DateTime, Boolean, func
from cinemax.database import Base

class Cliente(Base):
    """顧客テーブル"""
    __tablename__ = "clientes"

    id_cliente = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)  # ログインID
    password_hash = Column(String, nullable=False)  # パスワードハッシュ
    nombre = Column(String, nullable=False)
    correo = Column(String, unique=True, index=True, nullable=False)
    telefono = Column(String, nullable=True)
    activo = Column(Boolean, default=True, nullable=False)
    fecha_ultimo_login = Column(DateTime, nullable=True)
    fecha_registro = Column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Cliente {self.id_cliente}: {self.username}>"
