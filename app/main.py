from fastapi import FastAPI
from app.core.config import settings
from app.core.logging_config import configure_logging
from app.api.v1.routes.lists import router as lists_router
from app.api.v1.routes.balances import router as balances_router
from app.api.v1.routes.splits import router as splits_router

configure_logging(settings)

app = FastAPI(title=settings.APP_NAME)

@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} is live"}

app.include_router(lists_router, prefix="/api/v1/lists")
app.include_router(balances_router, prefix="/api/v1/balances")
app.include_router(splits_router, prefix="/api/v1/splits")
