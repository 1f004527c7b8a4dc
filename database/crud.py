from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from database.models import TransactionModel, UserModel
from models.transaction import TransactionCreate


# User CRUD functions
def create_user(db: Session, email: str, password_hash: str):
    """Crée un utilisateur (le mot de passe doit déjà être haché)"""
    db_user = UserModel(email=email, password=password_hash)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def get_user_by_email(db: Session, email: str):
    return db.query(UserModel).filter(UserModel.email == email).first()

def get_user_by_id(db: Session, user_id: int):
    return db.query(UserModel).filter(UserModel.id == user_id).first()

def delete_all_users(db: Session):
    count = db.query(UserModel).delete()
    db.commit()
    return count


# Transaction CRUD functions
def create_transaction(db: Session, transaction: TransactionCreate):
    """Crée une nouvelle transaction"""
    db_transaction = TransactionModel(**transaction.model_dump(exclude_none=True))
    db.add(db_transaction)
    db.commit()
    db.refresh(db_transaction)
    return db_transaction

def create_transactions(db: Session, transactions: Iterable[TransactionCreate]):
    """Insère un lot de transactions en une seule validation"""
    db_transactions = [
        TransactionModel(**t.model_dump(exclude_none=True)) for t in transactions
    ]
    db.add_all(db_transactions)
    db.commit()
    return len(db_transactions)

def find_transactions(db: Session, predicate, order_by: List, skip: int, limit: int):
    """Récupère une fenêtre de transactions correspondant au prédicat, dans l'ordre demandé"""
    stmt = (
        select(TransactionModel)
        .where(predicate)
        .order_by(*order_by)
        .offset(skip)
        .limit(limit)
    )
    return db.scalars(stmt).all()

def count_transactions(db: Session, predicate=None):
    """Compte les transactions correspondant au prédicat (toutes si None)"""
    stmt = select(func.count()).select_from(TransactionModel)
    if predicate is not None:
        stmt = stmt.where(predicate)
    return db.scalar(stmt)

def count_distinct_users(db: Session):
    return db.scalar(select(func.count(func.distinct(TransactionModel.user_id))))

def aggregate(db: Session, stmt):
    """Exécute une requête d'agrégation et renvoie les lignes sous forme de mappings"""
    return db.execute(stmt).mappings().all()

def delete_all_transactions(db: Session):
    """Supprime toutes les transactions"""
    count = db.query(TransactionModel).delete()
    db.commit()
    return count

def sum_amount(db: Session, category: Optional[str] = None, status: Optional[str] = None):
    """Somme des montants, optionnellement filtrée par catégorie/statut"""
    stmt = select(func.coalesce(func.sum(TransactionModel.amount), 0.0))
    if category:
        stmt = stmt.where(TransactionModel.category == category)
    if status:
        stmt = stmt.where(TransactionModel.status == status)
    return db.scalar(stmt)
