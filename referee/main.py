from fastapi import FastAPI

from referee.config import configure_logging
from referee.routers import actions, holdings

configure_logging()

app = FastAPI(
    title="Territories Referee",
    description="Rules engine for a territorial-conquest strategy game",
    version="0.1.0",
)

app.include_router(actions.router)
app.include_router(holdings.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
