"""Liveness endpoint for container platforms that expect an HTTP listener."""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse


def create_app() -> FastAPI:
    app = FastAPI(title="latency-demo", docs_url=None, redoc_url=None)

    @app.get("/", response_class=PlainTextResponse)
    def live() -> str:
        return "ok"

    return app
