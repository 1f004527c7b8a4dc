import logging
from typing import Dict, List

from sqlalchemy import case, extract, func, select
from sqlalchemy.orm import Session

from database.crud import aggregate, count_distinct_users, count_transactions
from database.models import TransactionModel

logger = logging.getLogger(__name__)


class AnalysisService:
    def __init__(self, top_users_limit: int = 10):
        self.top_users_limit = top_users_limit

    @staticmethod
    def _sum_when(column, value):
        """Somme des montants des lignes où column == value"""
        return func.coalesce(
            func.sum(case((column == value, TransactionModel.amount), else_=0.0)), 0.0
        )

    def category_summary(self, db: Session) -> List[Dict]:
        """
        Revenus vs dépenses: total, nombre, payé et en attente par catégorie
        """
        stmt = (
            select(
                TransactionModel.category.label('category'),
                func.sum(TransactionModel.amount).label('total'),
                func.count().label('count'),
                self._sum_when(TransactionModel.status, 'Paid').label('paid'),
                self._sum_when(TransactionModel.status, 'Pending').label('pending'),
            )
            .group_by(TransactionModel.category)
            .order_by(TransactionModel.category)
        )
        return [{
            '_id': row['category'],
            'total': row['total'],
            'count': row['count'],
            'paid': row['paid'],
            'pending': row['pending'],
        } for row in aggregate(db, stmt)]

    def monthly_trends(self, db: Session) -> List[Dict]:
        """
        Tendance mensuelle par (année, mois, catégorie), triée chronologiquement
        """
        year = extract('year', TransactionModel.date)
        month = extract('month', TransactionModel.date)
        stmt = (
            select(
                year.label('year'),
                month.label('month'),
                TransactionModel.category.label('category'),
                func.sum(TransactionModel.amount).label('total'),
                func.count().label('count'),
            )
            .group_by(year, month, TransactionModel.category)
            .order_by(year, month, TransactionModel.category)
        )
        return [{
            '_id': {
                'year': int(row['year']),
                'month': int(row['month']),
                'category': row['category'],
            },
            'total': row['total'],
            'count': row['count'],
        } for row in aggregate(db, stmt)]

    def status_distribution(self, db: Session) -> List[Dict]:
        stmt = (
            select(
                TransactionModel.status.label('status'),
                func.sum(TransactionModel.amount).label('total'),
                func.count().label('count'),
            )
            .group_by(TransactionModel.status)
            .order_by(TransactionModel.status)
        )
        return [{
            '_id': row['status'],
            'total': row['total'],
            'count': row['count'],
        } for row in aggregate(db, stmt)]

    def top_users(self, db: Session) -> List[Dict]:
        """
        Utilisateurs classés par volume total, limités aux premiers
        """
        total_amount = func.sum(TransactionModel.amount)
        stmt = (
            select(
                TransactionModel.user_id.label('user_id'),
                total_amount.label('totalAmount'),
                func.count().label('transactionCount'),
                self._sum_when(TransactionModel.category, 'Revenue').label('revenue'),
                self._sum_when(TransactionModel.category, 'Expense').label('expenses'),
            )
            .group_by(TransactionModel.user_id)
            .order_by(total_amount.desc(), TransactionModel.user_id)
            .limit(self.top_users_limit)
        )
        return [{
            '_id': row['user_id'],
            'totalAmount': row['totalAmount'],
            'transactionCount': row['transactionCount'],
            'revenue': row['revenue'],
            'expenses': row['expenses'],
        } for row in aggregate(db, stmt)]

    def analyze(self, db: Session) -> Dict:
        """
        Calcule l'ensemble des analyses sur toutes les transactions (sans filtre)

        Les quatre agrégations sont indépendantes; si l'une échoue, l'exception
        remonte et aucune analyse partielle n'est renvoyée.
        """
        revenue_vs_expenses = self.category_summary(db)
        monthly = self.monthly_trends(db)
        status_distribution = self.status_distribution(db)
        top_users = self.top_users(db)

        total_transactions = count_transactions(db)
        total_users = count_distinct_users(db)
        logger.debug(f"Analyse: {total_transactions} transactions, {total_users} utilisateurs")

        return {
            'summary': {
                'revenueVsExpenses': revenue_vs_expenses,
                'statusDistribution': status_distribution,
                'totalTransactions': total_transactions,
                'totalUsers': total_users,
            },
            'trends': {
                'monthly': monthly,
            },
            'topUsers': top_users,
        }
