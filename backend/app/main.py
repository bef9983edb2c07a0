import uvicorn
from fastapi import FastAPI

from backend.app.api.v1.router import router as v1_router
from backend.app.core.logging import configure_logging
from backend.app.db.session import settings

configure_logging(settings)

app = FastAPI(title="MOANA WMS - Warehouse receipts", version="0.1.0")
app.include_router(v1_router, prefix="/v1")


def run() -> None:
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
