from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import List, Literal, Optional

Category = Literal["Revenue", "Expense"]
Status = Literal["Paid", "Pending"]


class TransactionBase(BaseModel):
    date: datetime
    amount: float = Field(ge=0)
    description: str
    category: Category
    status: Status
    user_id: str
    user_name: str
    user_profile: Optional[str] = None


class TransactionCreate(TransactionBase):
    id: Optional[int] = None


class Transaction(TransactionBase):
    id: int
    createdAt: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    currentPage: int
    totalTransactions: int
    hasNext: bool
    hasPrev: bool


class TransactionsResponse(BaseModel):
    transactions: List[Transaction]
    pagination: Pagination
