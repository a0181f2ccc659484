import uvicorn
from fastapi import FastAPI

from agrostock.app.api.v1.router import router as v1_router
from agrostock.app.core.config import settings
from agrostock.app.core.logging import setup_logging

setup_logging()

app = FastAPI(title="AGROSTOCK", version="0.1.0")
app.include_router(v1_router, prefix="/v1")


def run() -> None:
    uvicorn.run("agrostock.app.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
