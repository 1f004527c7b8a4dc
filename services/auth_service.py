"""
Service d'authentification: hachage des mots de passe et jetons JWT
"""
import os
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "your-secret-key-change-this-in-production"


class AuthService:
    """Hache/vérifie les mots de passe et émet/vérifie les jetons d'accès"""

    def __init__(self, secret_key: str = None, algorithm: str = None, expire_hours: int = None):
        self.secret_key = secret_key or os.getenv('JWT_SECRET', DEFAULT_SECRET_KEY)
        self.algorithm = algorithm or os.getenv('JWT_ALGORITHM', 'HS256')
        self.expire_hours = expire_hours or int(os.getenv('ACCESS_TOKEN_EXPIRE_HOURS', '24'))
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

        if self.secret_key == DEFAULT_SECRET_KEY:
            logger.warning("JWT_SECRET non configuré, utilisation de la clé de développement")

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, password: str, hashed: str) -> bool:
        return self.pwd_context.verify(password, hashed)

    def create_access_token(self, user_id: int, email: str) -> str:
        payload = {
            "id": user_id,
            "email": email,
            "exp": datetime.now(timezone.utc) + timedelta(hours=self.expire_hours),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> Optional[Dict]:
        """
        Décode un jeton d'accès

        Returns:
            {'id': ..., 'email': ...} ou None si le jeton est invalide ou expiré
        """
        try:
            payload = jwt.decode(
                token, self.secret_key, algorithms=[self.algorithm], options={"require_exp": True}
            )
        except JWTError as e:
            logger.info(f"Jeton refusé: {e}")
            return None
        if "id" not in payload or "email" not in payload:
            return None
        return {"id": payload["id"], "email": payload["email"]}
