from pydantic import BaseModel, Field
from typing import List


class CategorySummary(BaseModel):
    id: str = Field(alias="_id")
    total: float
    count: int
    paid: float
    pending: float


class MonthKey(BaseModel):
    year: int
    month: int
    category: str


class MonthlyTrend(BaseModel):
    id: MonthKey = Field(alias="_id")
    total: float
    count: int


class StatusSummary(BaseModel):
    id: str = Field(alias="_id")
    total: float
    count: int


class TopUser(BaseModel):
    id: str = Field(alias="_id")
    totalAmount: float
    transactionCount: int
    revenue: float
    expenses: float


class AnalyticsSummary(BaseModel):
    revenueVsExpenses: List[CategorySummary]
    statusDistribution: List[StatusSummary]
    totalTransactions: int
    totalUsers: int


class Trends(BaseModel):
    monthly: List[MonthlyTrend]


class AnalyticsResponse(BaseModel):
    summary: AnalyticsSummary
    trends: Trends
    topUsers: List[TopUser]
