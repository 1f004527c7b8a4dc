import os
import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Chemin de la base de données
DEFAULT_DATABASE_URL = "sqlite:///./transactions.db"

Base = declarative_base()


class Database:
    """Connexion à la base: engine + fabrique de sessions, créée au démarrage et fermée à l'arrêt"""

    def __init__(self, url: str = None):
        self.url = url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

        engine_options = {}
        if self.url.startswith("sqlite"):
            engine_options["connect_args"] = {"check_same_thread": False}
            # Base en mémoire: une seule connexion partagée sinon chaque session voit une base vide
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                engine_options["poolclass"] = StaticPool

        self.engine = create_engine(self.url, **engine_options)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self):
        """Initialise la base de données"""
        from database.models import UserModel, TransactionModel
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Base de données initialisée ({self.engine.url.render_as_string(hide_password=True)})")

    def session(self):
        return self.SessionLocal()

    def close(self):
        self.engine.dispose()
        logger.info("Connexion à la base de données fermée")


def get_db(request: Request):
    """Dependency pour obtenir une session de base de données"""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
