from fastapi import APIRouter, HTTPException
from app.schemas.balances import SplitPreviewRequest
from app.services.expense_services import user_to_dict
from app.services.split_services import build_split_details

router = APIRouter()

@router.post("/preview")
async def preview_split(data: SplitPreviewRequest):
    try:
        details = build_split_details(
            data.method,
            data.price,
            [u.to_model() for u in data.users],
            data.values,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [
        {"user": user_to_dict(d.user), "amount": str(d.amount)}
        for d in details
    ]
