"""
Modelos de base de datos (ORM).
"""
from sqlalchemy import Column, String, Integer, BigInteger, DateTime, Text, JSON
from sqlalchemy.sql import func

from realm_indexer.infrastructure.database.session import Base


class RealmModel(Base):
    """
    Modelo de base de datos para realms resueltos.

    La clave de negocio es `name` (unica). Los campos de identidad
    (atomical_id, atomical_number, mint_time, mint_address) se escriben
    solo en el insert; owner_address y profile_pointer cambian con
    transferencias.
    """

    __tablename__ = "realms"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    atomical_id = Column(String(100), nullable=False, index=True)
    atomical_number = Column(BigInteger, nullable=False, index=True)
    mint_time = Column(BigInteger, nullable=True)  # segundos unix
    mint_address = Column(String(100), nullable=True)
    owner_address = Column(String(100), nullable=True, index=True)
    profile_pointer = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Realm(name={self.name}, atomical_id={self.atomical_id}, number={self.atomical_number})>"


class SyncCheckpointModel(Base):
    """
    Documento de checkpoint por modo de escaneo.

    `value` guarda el documento completo { pageCursor, highWaterMark?, errorCount? }
    y se lee/escribe entero en cada tick.
    """

    __tablename__ = "sync_checkpoints"

    key = Column(String(255), primary_key=True, index=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<SyncCheckpoint(key={self.key}, value={self.value})>"
