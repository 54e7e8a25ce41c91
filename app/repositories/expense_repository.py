import asyncio
import uuid
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Protocol
from app.models.expense import Expense
from app.models.expense_list import ExpenseList
from app.models.user import User

class ExpenseRepository(Protocol):
    """Data access for expense lists and their expenses."""

    async def fetch_expenses(self, list_id: str) -> List[Expense]: ...

    async def get_expense_list(self, list_id: str) -> Optional[ExpenseList]: ...

    async def find_expense_list_by_share_code(self, share_code: str) -> Optional[ExpenseList]: ...

    async def list_expense_lists(self) -> List[ExpenseList]: ...

    async def add_expense_list(self, expense_list: ExpenseList) -> ExpenseList: ...

    async def update_expense_list(self, expense_list: ExpenseList) -> bool: ...

    async def delete_expense_list(self, list_id: str) -> bool: ...

    async def add_member(self, list_id: str, user: User) -> Optional[ExpenseList]: ...

    async def add_expense(self, list_id: str, expense: Expense) -> Expense: ...

    async def update_expense(self, list_id: str, expense: Expense) -> bool: ...

    async def delete_expense(self, list_id: str, expense_id: str) -> bool: ...


class InMemoryExpenseRepository:
    def __init__(self, lists: Iterable[ExpenseList] = (), expenses: Optional[Dict[str, Iterable[Expense]]] = None):
        self._lists: Dict[str, ExpenseList] = {l.list_id: l for l in lists}
        self._expenses: Dict[str, List[Expense]] = {
            list_id: list(items) for list_id, items in (expenses or {}).items()
        }
        self._lock = asyncio.Lock()

    async def fetch_expenses(self, list_id: str) -> List[Expense]:
        # snapshot, so callers never see a list mutated mid-computation
        return list(self._expenses.get(list_id, []))

    async def get_expense_list(self, list_id: str) -> Optional[ExpenseList]:
        return self._lists.get(list_id)

    async def find_expense_list_by_share_code(self, share_code: str) -> Optional[ExpenseList]:
        for expense_list in self._lists.values():
            if expense_list.share_code and expense_list.share_code == share_code:
                return expense_list
        return None

    async def list_expense_lists(self) -> List[ExpenseList]:
        return sorted(self._lists.values(), key=lambda l: l.list_id)

    async def add_expense_list(self, expense_list: ExpenseList) -> ExpenseList:
        async with self._lock:
            if not expense_list.list_id:
                expense_list = replace(expense_list, list_id=uuid.uuid4().hex)
            self._lists[expense_list.list_id] = expense_list
            self._expenses.setdefault(expense_list.list_id, [])
            return expense_list

    async def update_expense_list(self, expense_list: ExpenseList) -> bool:
        async with self._lock:
            if expense_list.list_id not in self._lists:
                return False
            self._lists[expense_list.list_id] = expense_list
            return True

    async def delete_expense_list(self, list_id: str) -> bool:
        async with self._lock:
            if self._lists.pop(list_id, None) is None:
                return False
            self._expenses.pop(list_id, None)
            return True

    async def add_member(self, list_id: str, user: User) -> Optional[ExpenseList]:
        async with self._lock:
            expense_list = self._lists.get(list_id)
            if expense_list is None:
                return None
            if not expense_list.is_member(user.user_id):
                expense_list = replace(expense_list, members=expense_list.members + (user,))
                self._lists[list_id] = expense_list
            return expense_list

    async def add_expense(self, list_id: str, expense: Expense) -> Expense:
        async with self._lock:
            if not expense.expense_id:
                expense = replace(expense, expense_id=uuid.uuid4().hex)
            self._expenses.setdefault(list_id, []).append(expense)
            return expense

    async def update_expense(self, list_id: str, expense: Expense) -> bool:
        async with self._lock:
            items = self._expenses.get(list_id, [])
            for i, e in enumerate(items):
                if e.expense_id == expense.expense_id:
                    items[i] = expense
                    return True
            return False

    async def delete_expense(self, list_id: str, expense_id: str) -> bool:
        async with self._lock:
            items = self._expenses.get(list_id, [])
            for i, e in enumerate(items):
                if e.expense_id == expense_id:
                    del items[i]
                    return True
            return False
