import logging

from fastapi import FastAPI

from api import state
from api.dependencies import get_backend
from api.routers import assignments, ops, tasks

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="todo-aggregator")

app.include_router(assignments.router)
app.include_router(tasks.router)
app.include_router(ops.router)


@app.on_event("startup")
async def startup() -> None:
    backend = get_backend()
    logger.info(f"Using Canvas at {backend.client.config.base_url}")


@app.on_event("shutdown")
async def shutdown() -> None:
    if state.backend is not None:
        await state.backend.client.aclose()
        state.backend = None
        logger.info("Canvas client closed")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
