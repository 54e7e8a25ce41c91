from fastapi import APIRouter, Depends, HTTPException
from app.core.dependencies import get_expense_repository
from app.repositories.expense_repository import ExpenseRepository
from app.schemas.expense import ExpenseCreate
from app.schemas.expense_list import ExpenseListCreate, ExpenseListJoin, ExpenseListUpdate
from app.services.expense_services import (
    create_expense,
    create_expense_list,
    delete_expense,
    delete_expense_list,
    get_expense_by_id,
    get_expense_list,
    get_expenses,
    join_expense_list,
    list_expense_lists,
    update_expense,
    update_expense_list,
)

router = APIRouter()

@router.get("/")
async def all_lists(repo: ExpenseRepository = Depends(get_expense_repository)):
    return await list_expense_lists(repo)

@router.post("/")
async def new_list(data: ExpenseListCreate, repo: ExpenseRepository = Depends(get_expense_repository)):
    try:
        return await create_expense_list(repo, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.post("/join")
async def join_list(data: ExpenseListJoin, repo: ExpenseRepository = Depends(get_expense_repository)):
    return await join_expense_list(repo, data)

@router.get("/{list_id}")
async def fetch_list(list_id: str, repo: ExpenseRepository = Depends(get_expense_repository)):
    return await get_expense_list(repo, list_id)

@router.patch("/{list_id}")
async def edit_list(list_id: str, data: ExpenseListUpdate, repo: ExpenseRepository = Depends(get_expense_repository)):
    try:
        return await update_expense_list(repo, list_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.delete("/{list_id}")
async def del_list(list_id: str, repo: ExpenseRepository = Depends(get_expense_repository)):
    return await delete_expense_list(repo, list_id)

@router.get("/{list_id}/expenses")
async def list_expenses(
    list_id: str,
    category_id: str | None = None,
    repo: ExpenseRepository = Depends(get_expense_repository),
):
    return await get_expenses(repo, list_id, category_id=category_id)

@router.post("/{list_id}/expenses")
async def add_expense(list_id: str, data: ExpenseCreate, repo: ExpenseRepository = Depends(get_expense_repository)):
    try:
        return await create_expense(repo, list_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/{list_id}/expenses/{expense_id}")
async def fetch_expense(list_id: str, expense_id: str, repo: ExpenseRepository = Depends(get_expense_repository)):
    return await get_expense_by_id(repo, list_id, expense_id)

@router.put("/{list_id}/expenses/{expense_id}")
async def edit_expense(
    list_id: str,
    expense_id: str,
    data: ExpenseCreate,
    repo: ExpenseRepository = Depends(get_expense_repository),
):
    try:
        return await update_expense(repo, list_id, expense_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.delete("/{list_id}/expenses/{expense_id}")
async def del_expense(list_id: str, expense_id: str, repo: ExpenseRepository = Depends(get_expense_repository)):
    return await delete_expense(repo, list_id, expense_id)
