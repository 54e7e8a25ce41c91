import logging
import secrets
import string
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from fastapi import HTTPException
from app.core.exceptions import InvalidExpenseError
from app.core.utils import CENTS, qround, to_decimal
from app.models.category import Category
from app.models.expense import Expense
from app.models.expense_list import ExpenseList
from app.models.user import User
from app.repositories.expense_repository import ExpenseRepository
from app.schemas.expense import ExpenseCreate
from app.schemas.expense_list import ExpenseListCreate, ExpenseListJoin, ExpenseListUpdate
from app.services.split_services import percentages_from_details

logger = logging.getLogger(__name__)

SHARE_CODE_ALPHABET = string.ascii_uppercase + string.digits
SHARE_CODE_LENGTH = 6

def user_to_dict(user: User):
    return {
        "user_id": user.user_id,
        "name": user.name,
        "profile_image": user.profile_image,
    }

def category_to_dict(category: Category | None):
    if category is None:
        return None
    return {
        "category_id": category.category_id,
        "name": category.name,
        "icon": category.icon,
        "color": category.color,
    }

def expense_to_dict(expense: Expense):
    percentages = percentages_from_details(expense.split_details, expense.price)
    return {
        "expense_id": expense.expense_id,
        "name": expense.name,
        "description": expense.description,
        "price": str(qround(to_decimal(expense.price))),
        "date": expense.date,
        "category": category_to_dict(expense.category),
        "paid_by": user_to_dict(expense.paid_by),
        "splits": [
            {
                "user": user_to_dict(s.user),
                "amount": str(qround(to_decimal(s.amount))),
                "percentage": str(percentages[s.user.user_id]),
            }
            for s in expense.split_details
        ],
    }

def expense_list_to_dict(expense_list: ExpenseList):
    return {
        "list_id": expense_list.list_id,
        "name": expense_list.name,
        "created_by": expense_list.created_by,
        "created_at": expense_list.created_at,
        "share_code": expense_list.share_code,
        "members": [user_to_dict(m) for m in expense_list.members],
        "categories": [category_to_dict(c) for c in expense_list.categories],
    }

async def get_expense_list_or_404(repo: ExpenseRepository, list_id: str) -> ExpenseList:
    expense_list = await repo.get_expense_list(list_id)
    if not expense_list:
        raise HTTPException(404, "Expense list not found")
    return expense_list

async def _new_share_code(repo: ExpenseRepository) -> str:
    while True:
        code = "".join(secrets.choice(SHARE_CODE_ALPHABET) for _ in range(SHARE_CODE_LENGTH))
        if not await repo.find_expense_list_by_share_code(code):
            return code

def _check_unique_members(members):
    member_ids = [m.user_id for m in members]
    if len(member_ids) != len(set(member_ids)):
        raise ValueError("Duplicate members in expense list")

async def create_expense_list(repo: ExpenseRepository, data: ExpenseListCreate):
    _check_unique_members(data.members)

    created_at = datetime.now(timezone.utc).isoformat()
    share_code = await _new_share_code(repo)
    expense_list = await repo.add_expense_list(data.to_model(created_at=created_at, share_code=share_code))
    logger.info("Created expense list %s with %d members", expense_list.list_id, len(expense_list.members))
    return expense_list_to_dict(expense_list)

async def list_expense_lists(repo: ExpenseRepository):
    return [expense_list_to_dict(l) for l in await repo.list_expense_lists()]

async def get_expense_list(repo: ExpenseRepository, list_id: str):
    return expense_list_to_dict(await get_expense_list_or_404(repo, list_id))

async def update_expense_list(repo: ExpenseRepository, list_id: str, data: ExpenseListUpdate):
    expense_list = await get_expense_list_or_404(repo, list_id)
    changes = {}

    if data.name is not None:
        changes["name"] = data.name

    if data.members is not None:
        _check_unique_members(data.members)

        # Members with recorded expenses can't be removed
        kept = {m.user_id for m in data.members}
        involved = set()
        for expense in await repo.fetch_expenses(list_id):
            involved.update(u.user_id for u in expense.participants())
        if involved - kept:
            raise ValueError("Cannot remove members who have recorded expenses")

        changes["members"] = tuple(m.to_model() for m in data.members)

    if data.categories is not None:
        changes["categories"] = tuple(c.to_model() for c in data.categories)

    expense_list = replace(expense_list, **changes)
    if not await repo.update_expense_list(expense_list):
        raise HTTPException(404, "Expense list not found")

    logger.info("Updated expense list %s: %s", list_id, ", ".join(sorted(changes)) or "no changes")
    return expense_list_to_dict(expense_list)

async def delete_expense_list(repo: ExpenseRepository, list_id: str):
    if not await repo.delete_expense_list(list_id):
        raise HTTPException(404, "Expense list not found")

    logger.info("Deleted expense list %s", list_id)
    return {"status": "deleted"}

async def join_expense_list(repo: ExpenseRepository, data: ExpenseListJoin):
    code = data.share_code.strip().upper()
    expense_list = await repo.find_expense_list_by_share_code(code) if code else None
    if not expense_list:
        raise HTTPException(404, "No expense list with that share code")

    joined = await repo.add_member(expense_list.list_id, data.user.to_model())
    if not joined:
        raise HTTPException(404, "Expense list not found")

    logger.info("User %s joined expense list %s", data.user.user_id, joined.list_id)
    return expense_list_to_dict(joined)

def _validate_expense(expense_list: ExpenseList, data: ExpenseCreate):
    # 1. Check payer is a member of the list
    if expense_list.members and not expense_list.is_member(data.paid_by.user_id):
        raise InvalidExpenseError("Payer is not a member of the expense list", field="paid_by")

    user_ids = [s.user.user_id for s in data.splits]

    # 2. Check duplicates
    if len(user_ids) != len(set(user_ids)):
        raise InvalidExpenseError("Duplicate users found in splits", field="splits")

    # 3. Validate sum of splits == total, to the cent
    if data.splits:
        total = sum((s.amount for s in data.splits), Decimal("0"))
        if abs(total - data.price) > CENTS:
            raise InvalidExpenseError("Sum of split amounts must equal total amount", field="splits")
        if total != data.price:
            logger.warning("Split total %s differs from price %s by less than a cent", total, data.price)

    # 4. Validate all users in split are members of the list
    if expense_list.members:
        outsiders = [uid for uid in user_ids if not expense_list.is_member(uid)]
        if outsiders:
            raise InvalidExpenseError("Some users in split are not list members", field="splits")

    # 5. Category must be one the list offers
    if data.category and expense_list.categories:
        if data.category.category_id not in {c.category_id for c in expense_list.categories}:
            raise InvalidExpenseError("Category is not available in this expense list", field="category")

async def _find_expense(repo: ExpenseRepository, list_id: str, expense_id: str) -> Expense:
    for expense in await repo.fetch_expenses(list_id):
        if expense.expense_id == expense_id:
            return expense
    raise HTTPException(404, "Expense not found")

async def create_expense(repo: ExpenseRepository, list_id: str, data: ExpenseCreate):
    expense_list = await get_expense_list_or_404(repo, list_id)
    _validate_expense(expense_list, data)

    expense = await repo.add_expense(list_id, data.to_model())
    logger.info("Added expense %s to list %s", expense.expense_id, list_id)

    return expense_to_dict(expense)

async def update_expense(repo: ExpenseRepository, list_id: str, expense_id: str, data: ExpenseCreate):
    expense_list = await get_expense_list_or_404(repo, list_id)
    await _find_expense(repo, list_id, expense_id)
    _validate_expense(expense_list, data)

    expense = data.to_model(expense_id=expense_id)
    if not await repo.update_expense(list_id, expense):
        raise HTTPException(404, "Expense not found")

    logger.info("Updated expense %s in list %s", expense_id, list_id)
    return expense_to_dict(expense)

async def delete_expense(repo: ExpenseRepository, list_id: str, expense_id: str):
    await get_expense_list_or_404(repo, list_id)

    if not await repo.delete_expense(list_id, expense_id):
        raise HTTPException(404, "Expense not found")

    logger.info("Deleted expense %s from list %s", expense_id, list_id)
    return {"status": "deleted"}

async def get_expenses(repo: ExpenseRepository, list_id: str, category_id: str | None = None):
    await get_expense_list_or_404(repo, list_id)
    expenses = await repo.fetch_expenses(list_id)

    if category_id:
        expenses = [e for e in expenses if e.category and e.category.category_id == category_id]

    # newest first
    expenses.sort(key=lambda e: (e.date, e.expense_id), reverse=True)
    return [expense_to_dict(e) for e in expenses]

async def get_expense_by_id(repo: ExpenseRepository, list_id: str, expense_id: str):
    await get_expense_list_or_404(repo, list_id)
    return expense_to_dict(await _find_expense(repo, list_id, expense_id))
