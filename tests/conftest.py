import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from app.core.config import Settings
from app.core.dependencies import get_expense_repository, get_settings
from app.main import app
from app.models.category import Category
from app.models.expense import Expense, SplitDetail
from app.models.expense_list import ExpenseList
from app.models.user import User
from app.repositories.expense_repository import InMemoryExpenseRepository
from app.repositories.mock_data import build_mock_repository


def make_expense(price, paid_by, *shares, **kwargs):
    """Build an Expense from ``(user, amount)`` pairs."""
    return Expense(
        price=Decimal(str(price)),
        paid_by=paid_by,
        split_details=tuple(SplitDetail(user=u, amount=Decimal(str(a))) for u, a in shares),
        **kwargs,
    )


@pytest.fixture
def alice():
    return User(user_id="alice", name="Alice", profile_image="alice")


@pytest.fixture
def bob():
    return User(user_id="bob", name="Bob", profile_image="bob")


@pytest.fixture
def carol():
    return User(user_id="carol", name="Carol", profile_image="carol")


@pytest.fixture
def groceries():
    return Category(category_id="groceries", name="Groceries", icon="ShoppingCart", color="#4CAF50")


@pytest.fixture
def rent():
    return Category(category_id="rent", name="Rent", icon="Home", color="#2196F3")


@pytest.fixture
def trip_list(alice, bob, carol, groceries, rent):
    return ExpenseList(
        list_id="trip",
        name="Trip",
        created_by=alice.user_id,
        members=(alice, bob, carol),
        categories=(groceries, rent),
        share_code="TRIP42",
    )


@pytest.fixture
def repo(trip_list):
    """Empty repository holding a single three-member list."""
    return InMemoryExpenseRepository(lists=[trip_list])


@pytest.fixture
def mock_repo():
    return build_mock_repository()


@pytest.fixture
def test_settings():
    return Settings(USE_MOCK_DATA=False, SETTLEMENT_EPSILON=Decimal("0.005"), CURRENCY_SYMBOL="$")


@pytest.fixture
def client(repo, test_settings):
    """API client wired to the ``repo`` fixture."""
    app.dependency_overrides[get_expense_repository] = lambda: repo
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_client(mock_repo, test_settings):
    app.dependency_overrides[get_expense_repository] = lambda: mock_repo
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()
