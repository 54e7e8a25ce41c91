from fastapi import APIRouter, Depends, HTTPException
from app.core.config import Settings
from app.core.dependencies import get_expense_repository, get_settings
from app.repositories.expense_repository import ExpenseRepository
from app.schemas.balances import SettleRequest
from app.services.balance_services import get_overall_balances, get_user_balance, get_simplified_balances, settle_expenses

router = APIRouter()

@router.post("/settle")
async def settle(data: SettleRequest, config: Settings = Depends(get_settings)):
    try:
        return settle_expenses([e.to_model() for e in data.expenses], config)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/{list_id}/overall")
async def overall_balances(
    list_id: str,
    repo: ExpenseRepository = Depends(get_expense_repository),
    config: Settings = Depends(get_settings)
):
    return await get_overall_balances(repo, list_id, config)


@router.get("/{list_id}/user/{user_id}")
async def user_balance(
    list_id: str,
    user_id: str,
    repo: ExpenseRepository = Depends(get_expense_repository)
):
    return await get_user_balance(repo, list_id, user_id)


@router.get("/{list_id}/simplified")
async def simplified_balances(
    list_id: str,
    repo: ExpenseRepository = Depends(get_expense_repository),
    config: Settings = Depends(get_settings)
):
    return await get_simplified_balances(repo, list_id, config)
