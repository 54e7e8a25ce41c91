from decimal import Decimal
from app.models.category import Category
from app.models.expense import Expense, SplitDetail
from app.models.expense_list import ExpenseList
from app.models.user import User
from app.repositories.expense_repository import InMemoryExpenseRepository

user_sarah = User(user_id="yblRlB470XiMuiJhbxSZ", name="Sarah", profile_image="sarah")
user_alex = User(user_id="5KaHBQhJUv6NdU9WuXSm", name="Alex", profile_image="alex")

category_rent = Category(category_id="category_rent_001", name="Rent", icon="Home", color="#2196F3")
category_groceries = Category(category_id="category_groceries_001", name="Groceries", icon="ShoppingCart", color="#4CAF50")
category_pet = Category(category_id="category_pet_001", name="Zorro", icon="Pets", color="#FF9800")

MOCK_LIST_ID = "mock_household"

mock_list = ExpenseList(
    list_id=MOCK_LIST_ID,
    name="Household",
    created_by=user_sarah.user_id,
    members=(user_sarah, user_alex),
    categories=(category_rent, category_groceries, category_pet),
    created_at="2024-01-01T00:00:00Z",
    share_code="ZORRO7",
)

def _split(*shares):
    return tuple(SplitDetail(user=u, amount=Decimal(a)) for u, a in shares)

# Alex ends up owing Sarah 98.23 across these
mock_expenses = [
    Expense(
        expense_id="mock_exp_001",
        name="Rent January",
        description="Monthly rent",
        price=Decimal("1250.00"),
        date="2024-01-01T09:00:00Z",
        category=category_rent,
        paid_by=user_sarah,
        split_details=_split((user_sarah, "625.00"), (user_alex, "625.00")),
    ),
    Expense(
        expense_id="mock_exp_002",
        name="Groceries IGA",
        description="Weekly groceries",
        price=Decimal("89.95"),
        date="2024-01-15T14:30:00Z",
        category=category_groceries,
        paid_by=user_sarah,
        split_details=_split((user_sarah, "44.98"), (user_alex, "44.97")),
    ),
    Expense(
        expense_id="mock_exp_003",
        name="Groceries Metro",
        description="Bread, milk, eggs",
        price=Decimal("32.48"),
        date="2024-01-14T11:15:00Z",
        category=category_groceries,
        paid_by=user_alex,
        split_details=_split((user_alex, "32.48")),
    ),
    Expense(
        expense_id="mock_exp_004",
        name="Rent February",
        description="Monthly rent",
        price=Decimal("1250.00"),
        date="2024-02-01T09:00:00Z",
        category=category_rent,
        paid_by=user_alex,
        split_details=_split((user_sarah, "625.00"), (user_alex, "625.00")),
    ),
    Expense(
        expense_id="mock_exp_005",
        name="Groceries Provigo",
        description="Fish, greens and fruit",
        price=Decimal("67.99"),
        date="2024-02-12T10:20:00Z",
        category=category_groceries,
        paid_by=user_alex,
        split_details=_split((user_alex, "34.00"), (user_sarah, "33.99")),
    ),
    Expense(
        expense_id="mock_exp_006",
        name="Food for Zorro",
        description="Premium kibble",
        price=Decimal("174.50"),
        date="2024-01-20T16:30:00Z",
        category=category_pet,
        paid_by=user_sarah,
        split_details=_split((user_sarah, "87.25"), (user_alex, "87.25")),
    ),
]

def build_mock_repository() -> InMemoryExpenseRepository:
    return InMemoryExpenseRepository(lists=[mock_list], expenses={MOCK_LIST_ID: mock_expenses})
