"""
Service de construction des requêtes sur les transactions
Traduit les paramètres de filtre, de recherche, de tri et de pagination en requête SQLAlchemy
"""
import math
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, or_, true
from sqlalchemy.orm import Session

from database.crud import count_transactions, find_transactions
from database.models import TransactionModel
from models.transaction import Pagination, Transaction

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_PAGE_LIMIT = 1000
# Borne le décalage (page - 1) * limit sous la limite des entiers SQL 64 bits
MAX_PAGE = 1_000_000


class InvalidQueryError(ValueError):
    """Paramètre de requête refusé (ex: champ de tri inconnu)"""


class TransactionQueryService:
    """Filtre, recherche, tri et pagination des transactions"""

    def __init__(self, max_limit: int = MAX_PAGE_LIMIT):
        self.max_limit = max_limit
        # Champs triables exposés au client -> colonnes
        self.sortable_fields = {
            'id': TransactionModel.id,
            'date': TransactionModel.date,
            'amount': TransactionModel.amount,
            'description': TransactionModel.description,
            'category': TransactionModel.category,
            'status': TransactionModel.status,
            'user_id': TransactionModel.user_id,
            'user_name': TransactionModel.user_name,
            'createdAt': TransactionModel.created_at,
        }

    @staticmethod
    def parse_amount_search(search: Optional[str]) -> Optional[float]:
        """
        Interprète le terme de recherche comme un montant

        Returns:
            Le montant si le terme (sans '$' ni ',') est un nombre positif fini, sinon None
        """
        if not search:
            return None
        cleaned = search.strip().replace('$', '').replace(',', '')
        try:
            amount = float(cleaned)
        except ValueError:
            return None
        if not math.isfinite(amount) or amount <= 0:
            return None
        return amount

    def build_filter(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        search: Optional[str] = None,
    ):
        """
        Construit le prédicat appliqué à la table des transactions

        Les valeurs de catégorie/statut inconnues sont comparées telles quelles
        et ne renvoient simplement aucun résultat.
        """
        clauses = []
        if category:
            clauses.append(TransactionModel.category == category)
        if status:
            clauses.append(TransactionModel.status == status)
        if user_id:
            clauses.append(TransactionModel.user_id == user_id)

        term = search.strip() if search else ''
        if term:
            alternatives = [
                TransactionModel.description.icontains(term, autoescape=True),
                TransactionModel.user_name.icontains(term, autoescape=True),
                TransactionModel.user_id.icontains(term, autoescape=True),
            ]
            amount = self.parse_amount_search(term)
            if amount is not None:
                alternatives.append(TransactionModel.amount == amount)
            clauses.append(or_(*alternatives))

        return and_(true(), *clauses)

    def build_sort(self, sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> List:
        """Ordre de tri: date décroissante par défaut, puis id pour départager les égalités"""
        if not sort_by:
            return [TransactionModel.date.desc(), TransactionModel.id.asc()]

        column = self.sortable_fields.get(sort_by)
        if column is None:
            raise InvalidQueryError(
                f"Invalid sortBy field '{sort_by}'. Allowed fields: {', '.join(self.sortable_fields)}"
            )

        direction = column.asc() if sort_order == 'asc' else column.desc()
        if column is TransactionModel.id:
            return [direction]
        return [direction, TransactionModel.id.asc()]

    def resolve_window(self, page: Optional[int] = None, limit: Optional[int] = None) -> Tuple[int, int, int]:
        """Borne page/limit et calcule le décalage: (page, limit, skip)"""
        page = min(max(1, page if page is not None else DEFAULT_PAGE), MAX_PAGE)
        limit = max(1, min(limit if limit is not None else DEFAULT_LIMIT, self.max_limit))
        skip = (page - 1) * limit
        return page, limit, skip

    @staticmethod
    def build_pagination(page: int, limit: int, total: int, returned_count: int) -> Pagination:
        skip = (page - 1) * limit
        return Pagination(
            page=page,
            limit=limit,
            total=total,
            totalPages=math.ceil(total / limit),
            currentPage=page,
            totalTransactions=total,
            hasNext=skip + returned_count < total,
            hasPrev=page > 1,
        )

    def search(
        self,
        db: Session,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Dict:
        """
        Exécute la requête paginée et le comptage total sur le même prédicat

        Returns:
            {'transactions': [...], 'pagination': {...}}
        """
        order_by = self.build_sort(sort_by, sort_order)
        predicate = self.build_filter(category=category, status=status, user_id=user_id, search=search)
        page, limit, skip = self.resolve_window(page, limit)

        rows = find_transactions(db, predicate, order_by, skip, limit)
        total = count_transactions(db, predicate)
        logger.debug(f"Transactions: page={page} limit={limit} total={total} returned={len(rows)}")

        return {
            'transactions': [Transaction.model_validate(row) for row in rows],
            'pagination': self.build_pagination(page, limit, total, len(rows)),
        }
