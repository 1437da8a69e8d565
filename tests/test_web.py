"""Integration tests for the FastAPI helpers."""

from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from wirebox.core import ServiceContainer
from wirebox.web import container_lifespan, get_container, inject


class Counter:
    def __init__(self) -> None:
        self.hits = 0


def _build_app(container: ServiceContainer, *, warm: bool = True) -> FastAPI:
    app = FastAPI(lifespan=container_lifespan(container, warm=warm))

    @app.get("/hits")
    def hits(counter: Counter = Depends(inject("counter"))) -> dict[str, int]:  # noqa: B008
        counter.hits += 1
        return {"hits": counter.hits}

    @app.get("/services")
    def services(
        current: ServiceContainer = Depends(get_container),  # noqa: B008
    ) -> dict[str, list[str]]:
        return {"services": [str(i) for i in current.get_service_ids()]}

    return app


def test_inject_resolves_shared_service_per_request() -> None:
    container = ServiceContainer()
    container.singleton("counter", Counter)

    with TestClient(_build_app(container)) as client:
        assert container.describe()[0].cached is True
        assert client.get("/hits").json() == {"hits": 1}
        assert client.get("/hits").json() == {"hits": 2}
        assert client.get("/services").json() == {"services": ["counter"]}

    assert container.get_service_ids() == []


def test_lifespan_without_warming_resolves_lazily() -> None:
    container = ServiceContainer()
    container.singleton("counter", Counter)

    with TestClient(_build_app(container, warm=False)) as client:
        assert container.describe()[0].cached is False
        assert client.get("/hits").json() == {"hits": 1}
        assert container.describe()[0].cached is True
