from sqlalchemy import Column, Integer, String, DateTime, Boolean, CheckConstraint, func
from cinemax.database import Base
from cinemax.config import DEFAULT_STAFF_ROLE

class Trabajador(Base):
    """従業員テーブル"""
    __tablename__ = "trabajadores"
    __table_args__ = (
        CheckConstraint("rol IN ('admin', 'gerente', 'empleado')", name="ck_trabajadores_rol"),
    )

    id_trabajador = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)  # ログインID
    password_hash = Column(String, nullable=False)  # パスワードハッシュ
    nombre = Column(String, nullable=False)
    correo = Column(String, unique=True, index=True, nullable=False)
    telefono = Column(String, nullable=True)
    rol = Column(String, default=DEFAULT_STAFF_ROLE, nullable=False)  # 'admin', 'gerente' または 'empleado'
    activo = Column(Boolean, default=True, nullable=False)
    fecha_ultimo_login = Column(DateTime, nullable=True)
    fecha_creacion = Column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Trabajador {self.id_trabajador}: {self.username} ({self.rol})>"
