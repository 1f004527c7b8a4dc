"""
Génère des données de démonstration: utilisateurs et historique de transactions
Usage: python seed.py
"""
import logging
import random
from datetime import datetime
from typing import Dict, List

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from database.crud import (
    count_transactions, create_transactions, create_user,
    delete_all_transactions, delete_all_users, sum_amount
)
from database.database import Database
from database.models import TransactionModel
from models.transaction import TransactionCreate
from services.auth_service import AuthService

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {'email': 'user001@example.com', 'password': 'password123'},
    {'email': 'user002@example.com', 'password': 'password123'},
    {'email': 'user003@example.com', 'password': 'password123'},
    {'email': 'user004@example.com', 'password': 'password123'},
    {'email': 'admin@loopr.com', 'password': 'admin123'},
]

REVENUE_DESCRIPTIONS = [
    'Website Development Project', 'Mobile App Development', 'Consulting Services', 'Software License Sale',
    'Design Services', 'Digital Marketing Campaign', 'E-commerce Platform', 'API Integration',
    'Data Analysis Project', 'Cloud Migration Service', 'SEO Optimization', 'Content Management System',
    'Custom Software Development', 'Technical Support Services', 'Database Optimization',
    'Security Audit', 'Performance Tuning', 'Training Services', 'Project Management',
    'UI/UX Design', 'Brand Identity Design', 'Social Media Marketing', 'Email Marketing Campaign',
]

EXPENSE_DESCRIPTIONS = [
    'Office Rent Payment', 'Equipment Purchase', 'Software Subscription', 'Marketing Expenses',
    'Travel Expenses', 'Utility Bills', 'Internet Service', 'Phone Service',
    'Insurance Premium', 'Legal Fees', 'Accounting Services', 'Office Supplies',
    'Computer Hardware', 'Server Hosting', 'Domain Registration', 'SSL Certificate',
    'Professional Development', 'Conference Tickets', 'Training Materials', 'Software Tools',
    'Advertising Costs', 'Freelancer Payment', 'Contractor Fees',
]

USER_NAMES = ['John Smith', 'Sarah Johnson', 'Mike Davis', 'Lisa Wilson', 'Admin User']

PROFILE_URLS = [
    'https://thispersondoesnotexist.com/',
    'https://randomuser.me/api/portraits/men/1.jpg',
    'https://randomuser.me/api/portraits/women/1.jpg',
    'https://randomuser.me/api/portraits/men/2.jpg',
    'https://randomuser.me/api/portraits/women/2.jpg',
]

# Historique: juillet 2022 -> décembre 2023
START_MONTH = (2022, 7)
MONTH_COUNT = 18


def _random_amount(rng: random.Random, is_revenue: bool) -> float:
    if is_revenue:
        # Revenus: 500 - 5000, avec quelques gros contrats
        amount = 500 + rng.random() * 4500 if rng.random() > 0.1 else 5000 + rng.random() * 10000
    else:
        # Dépenses: 100 - 3000, avec quelques gros achats
        amount = 100 + rng.random() * 2900 if rng.random() > 0.15 else 3000 + rng.random() * 7000
    return round(amount, 2)


def generate_transactions(rng: random.Random, start_id: int = 1) -> List[TransactionCreate]:
    """
    Génère 15 à 24 transactions par mois sur la période historique
    """
    transactions = []
    current_id = start_id
    year, month = START_MONTH

    for _ in range(MONTH_COUNT):
        for _ in range(15 + rng.randrange(10)):
            # Jours 1-28 pour rester dans le mois
            date = datetime(
                year, month, 1 + rng.randrange(28),
                rng.randrange(24), rng.randrange(60), rng.randrange(60)
            )
            is_revenue = rng.random() > 0.45
            user_index = rng.randrange(len(USER_NAMES))

            transactions.append(TransactionCreate(
                id=current_id,
                date=date,
                amount=_random_amount(rng, is_revenue),
                description=rng.choice(REVENUE_DESCRIPTIONS if is_revenue else EXPENSE_DESCRIPTIONS),
                category='Revenue' if is_revenue else 'Expense',
                status='Paid' if rng.random() > 0.2 else 'Pending',
                user_id=f"user_00{(user_index % 4) + 1}",
                user_profile=PROFILE_URLS[user_index],
                user_name=USER_NAMES[user_index],
            ))
            current_id += 1

        month += 1
        if month > 12:
            year, month = year + 1, 1

    return transactions


def seed_database(db: Session, rng: random.Random = None, auth_service: AuthService = None) -> Dict:
    """
    Vide la base puis insère les utilisateurs d'exemple et les transactions

    Returns:
        Résumé des données insérées
    """
    rng = rng or random.Random()
    auth_service = auth_service or AuthService()

    logger.info("Suppression des données existantes...")
    delete_all_transactions(db)
    delete_all_users(db)

    logger.info("Création des utilisateurs d'exemple...")
    for user in SAMPLE_USERS:
        create_user(db, user['email'], auth_service.hash_password(user['password']))

    logger.info("Insertion des transactions...")
    inserted = create_transactions(db, generate_transactions(rng))

    summary = {
        'users': len(SAMPLE_USERS),
        'transactions': inserted,
        'paid_revenue': round(sum_amount(db, category='Revenue', status='Paid'), 2),
        'paid_expenses': round(sum_amount(db, category='Expense', status='Paid'), 2),
        'pending_transactions': count_transactions(db, TransactionModel.status == 'Pending'),
    }
    logger.info(f"Revenus payés: ${summary['paid_revenue']:,.2f}")
    logger.info(f"Dépenses payées: ${summary['paid_expenses']:,.2f}")
    logger.info(f"Transactions en attente: {summary['pending_transactions']}")
    logger.info(f"Total: {summary['transactions']} transactions, {summary['users']} utilisateurs")
    return summary


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    load_dotenv()

    database = Database()
    database.init_db()
    db = database.session()
    try:
        seed_database(db)
        for index, user in enumerate(SAMPLE_USERS, start=1):
            logger.info(f"{index}. Email: {user['email']} | Password: {user['password']}")
    finally:
        db.close()
        database.close()
