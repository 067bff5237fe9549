#!/usr/bin/env python
"""データベースをリセットし、テスト用の顧客・従業員を登録するスクリプト"""
from cinemax.database import engine, Base, SessionLocal
from cinemax.models.cliente import Cliente
from cinemax.models.trabajador import Trabajador
from cinemax.utils.security import hash_password

CLIENTES = [
    {"username": "juanperez", "password": "cliente123", "nombre": "Juan Pérez",
     "correo": "juan.perez@email.com", "telefono": "123-456-7890"},
    {"username": "anag", "password": "cliente123", "nombre": "Ana García",
     "correo": "ana.garcia@email.com", "telefono": "098-765-4321"},
    {"username": "carlosl", "password": "cliente123", "nombre": "Carlos López",
     "correo": "carlos.lopez@email.com", "telefono": "555-123-4567"},
]

# ログイン時のユーザー名は英字のみ
TRABAJADORES = [
    {"username": "admin", "password": "admin123", "nombre": "Administrador Principal",
     "correo": "admin@cinemax.com", "telefono": "555-000-0001", "rol": "admin"},
    {"username": "mariagerente", "password": "gerente123", "nombre": "María González",
     "correo": "maria.gonzalez@cinemax.com", "telefono": "555-000-0002", "rol": "gerente"},
    {"username": "pedroempleado", "password": "empleado123", "nombre": "Pedro Rodríguez",
     "correo": "pedro.rodriguez@cinemax.com", "telefono": "555-000-0003", "rol": "empleado"},
]


def seed():
    db = SessionLocal()
    try:
        for data in CLIENTES:
            fields = {k: v for k, v in data.items() if k != "password"}
            db.add(Cliente(password_hash=hash_password(data["password"]), **fields))
        for data in TRABAJADORES:
            fields = {k: v for k, v in data.items() if k != "password"}
            db.add(Trabajador(password_hash=hash_password(data["password"]), **fields))
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    # テーブルをすべて削除
    print("既存のテーブルを削除しています...")
    Base.metadata.drop_all(bind=engine)

    # 新しいテーブルを作成
    print("新しいテーブルを作成しています...")
    Base.metadata.create_all(bind=engine)

    print("テストデータを登録しています...")
    seed()
    for data in CLIENTES + TRABAJADORES:
        print(f"  - {data['username']} / {data['password']}")

    print("データベースをリセットしました")
