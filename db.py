import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from core.config import settings

logger = logging.getLogger(__name__)

# ============================================================
# CONFIGURAÇÃO DO SQLAlchemy
# ============================================================

DATABASE_URL = settings.DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    # SQLite é aceito em desenvolvimento e testes
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,  # Verifica conexão antes de usar
        pool_size=10,        # Pool de conexões
        max_overflow=20,     # Conexões extras quando necessário
        echo=False,          # Mude para True para ver queries SQL
    )

# Cria a sessão
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base para os modelos
Base = declarative_base()

# ============================================================
# DEPENDENCY INJECTION para FastAPI
# ============================================================

def get_db():
    """
    Cria uma sessão do banco de dados para cada requisição.
    Fecha automaticamente após o uso.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_connection() -> bool:
    """Testa se a conexão com o banco está funcionando"""
    try:
        with engine.connect():
            logger.info("Conexão com o banco de dados OK")
            return True
    except Exception as e:
        logger.error("Erro ao conectar no banco: %s", e)
        return False


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    test_connection()
