"""Core resource management package for the finance dashboard."""

from .config import Settings
from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .gateways import ExpenseGateway, GoalGateway, IncomeGateway, UserGateway
from .models import Expense, Goal, Income, User
from .services import (
    ExpenseResourceService,
    GoalResourceService,
    IncomeResourceService,
    ResourceServices,
    UserResourceService,
    build_services,
)
from .storage import Database

__all__ = [
    "Database",
    "Expense",
    "ExpenseGateway",
    "ExpenseResourceService",
    "Goal",
    "GoalGateway",
    "GoalResourceService",
    "Income",
    "IncomeGateway",
    "IncomeResourceService",
    "PersistenceError",
    "RecordNotFoundError",
    "ResourceServices",
    "Settings",
    "User",
    "UserGateway",
    "UserResourceService",
    "ValidationError",
    "build_services",
]
