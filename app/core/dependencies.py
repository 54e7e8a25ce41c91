import logging
from fastapi import Depends
from app.core.config import Settings, settings
from app.repositories.expense_repository import ExpenseRepository, InMemoryExpenseRepository
from app.repositories.mock_data import build_mock_repository

logger = logging.getLogger(__name__)

_repository: ExpenseRepository | None = None

def get_settings() -> Settings:
    return settings

def get_expense_repository(config: Settings = Depends(get_settings)) -> ExpenseRepository:
    global _repository
    if _repository:
        return _repository

    if config.USE_MOCK_DATA:
        logger.info("Using mock expense data")
        _repository = build_mock_repository()
    else:
        _repository = InMemoryExpenseRepository()

    return _repository
