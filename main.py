from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from contextlib import asynccontextmanager
from typing import Dict, Optional
import uvicorn
import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

from services.auth_service import AuthService
from services.analysis_service import AnalysisService
from services.query_service import (
    DEFAULT_LIMIT, DEFAULT_PAGE, MAX_PAGE, InvalidQueryError, TransactionQueryService
)
from database.database import Database, get_db
from database.crud import create_user, get_user_by_email, get_user_by_id
from models.user import AuthResponse, LoginRequest, ProfileResponse, SignupRequest, User
from models.transaction import TransactionsResponse
from models.analytics import AnalyticsResponse

DEFAULT_CORS_ORIGINS = [
    'http://localhost:5173',
    'https://loopr-frontend-theta.vercel.app',
    'https://loopr.harshwardhan.tech',
]

MIN_PASSWORD_LENGTH = 6
# Au-delà, passlib refuse de hacher le mot de passe (en octets)
MAX_PASSWORD_LENGTH = 4096
INTERNAL_ERROR = "Internal server error"

# Initialize services
auth_service = AuthService()
query_service = TransactionQueryService()
analysis_service = AnalysisService()

router = APIRouter()


def get_current_user(authorization: Optional[str] = Header(None)) -> Dict:
    """
    Vérifie le jeton de l'en-tête Authorization (second mot, ex: "Bearer <jeton>")

    Absent -> 401, invalide ou expiré -> 403
    """
    parts = authorization.split() if authorization else []
    if len(parts) < 2:
        raise HTTPException(status_code=401, detail="Access token required")
    user = auth_service.decode_access_token(parts[1])
    if user is None:
        raise HTTPException(status_code=403, detail="Invalid token")
    return user


def _auth_response(message: str, user) -> Dict:
    return {
        "message": message,
        "token": auth_service.create_access_token(user.id, user.email),
        "user": User.model_validate(user),
    }


@router.get("/")
def root(request: Request):
    return {
        "message": "Transaction Dashboard API is running",
        "database": request.app.state.database.engine.dialect.name,
        "endpoints": {
            "auth": ["POST /signup", "POST /login"],
            "protected": ["GET /profile", "GET /transactions", "GET /analytics"],
        },
    }


@router.post("/signup", status_code=201, response_model=AuthResponse)
def signup(credentials: SignupRequest, db: Session = Depends(get_db)):
    """
    Crée un compte et renvoie un jeton d'accès
    """
    email = (credentials.email or "").strip().lower()
    password = credentials.password or ""

    if not email or not password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at most {MAX_PASSWORD_LENGTH} bytes long"
        )

    try:
        if get_user_by_email(db, email):
            raise HTTPException(status_code=409, detail="User with this email already exists")
        user = create_user(db, email, auth_service.hash_password(password))
    except HTTPException:
        raise
    except IntegrityError:
        # Inscription concurrente avec le même email
        db.rollback()
        raise HTTPException(status_code=409, detail="User with this email already exists")
    except Exception:
        logger.exception("Erreur lors de l'inscription")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

    logger.info(f"Nouvel utilisateur créé: {user.id}")
    return _auth_response("User created successfully", user)


@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    email = (credentials.email or "").strip().lower()
    password = credentials.password or ""

    if not email or not password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    if len(password.encode("utf-8")) > MAX_PASSWORD_LENGTH:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    try:
        user = get_user_by_email(db, email)
        valid = user is not None and auth_service.verify_password(password, user.password)
    except Exception:
        logger.exception("Erreur lors de la connexion")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

    if not valid:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return _auth_response("Login successful", user)


@router.get("/profile", response_model=ProfileResponse)
def profile(current_user: Dict = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        user = get_user_by_id(db, current_user["id"])
    except Exception:
        logger.exception("Erreur lors de la lecture du profil")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)

    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": User.model_validate(user)}


@router.get("/transactions", response_model=TransactionsResponse)
def get_transactions(
    page: int = Query(DEFAULT_PAGE, le=MAX_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    category: Optional[str] = None,
    status: Optional[str] = None,
    user_id: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    current_user: Dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Transactions filtrées, triées et paginées
    """
    try:
        return query_service.search(
            db,
            page=page,
            limit=limit,
            category=category,
            status=status,
            user_id=user_id,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Erreur lors de la récupération des transactions")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(current_user: Dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Synthèses pour les graphiques: revenus/dépenses, tendances mensuelles, statuts, top utilisateurs
    """
    try:
        return analysis_service.analyze(db)
    except Exception:
        logger.exception("Erreur lors du calcul des analyses")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part not in ("body", "query"))
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return JSONResponse({"error": "; ".join(messages) or "Invalid request"}, status_code=400)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Erreur non gérée sur {request.method} {request.url.path}")
    return JSONResponse({"error": INTERNAL_ERROR}, status_code=500)


def create_app(database_url: str = None) -> FastAPI:
    """Construit l'application; la base est ouverte au démarrage et fermée à l'arrêt"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(database_url)
        database.init_db()
        app.state.database = database
        yield
        database.close()

    app = FastAPI(title="Transaction Dashboard API", version="1.0.0", lifespan=lifespan)

    origins = os.getenv("CORS_ORIGINS")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in origins.split(",")] if origins else DEFAULT_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
