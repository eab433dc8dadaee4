from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from malla import settings
from malla.dag import diagnose
from malla.dsl import load_catalog
from malla.engine import PrerequisiteEngine
from malla.model import Status, UnknownItemError
from malla.store import GraphStateStore

# -------------------- Schemas --------------------

class ItemView(BaseModel):
    id: str
    label: str
    requires: list[str] = Field(default_factory=list)
    status: Status

class MissingView(BaseModel):
    id: str
    label: str

class ToggleResponse(BaseModel):
    item_id: str
    action: str
    completed: list[str]
    items: list[ItemView]

class RejectedResponse(BaseModel):
    item_id: str
    message: str
    missing: list[MissingView]

class DiagnosticsResponse(BaseModel):
    unknown_requirements: dict[str, list[str]]
    cycle_members: list[str]
    levels: list[list[str]]

# -------------------- App --------------------

def create_app(engine: PrerequisiteEngine) -> FastAPI:
    app = FastAPI(title="malla")

    def snapshot(statuses: dict[str, Status]) -> list[ItemView]:
        return [
            ItemView(id=item.id, label=item.display_name, requires=list(item.requires), status=statuses[item.id])
            for item in engine.catalog
        ]

    @app.get("/items", response_model=list[ItemView])
    def list_items():
        return snapshot(engine.statuses())

    @app.post("/items/{item_id}/toggle", response_model=ToggleResponse, responses={409: {"model": RejectedResponse}})
    def toggle_item(item_id: str):
        try:
            result = engine.toggle(item_id)
        except UnknownItemError as e:
            raise HTTPException(status_code=404, detail=str(e))

        if not result.accepted:
            body = RejectedResponse(
                item_id=item_id,
                message=result.message,
                missing=[MissingView(id=m.id, label=m.label) for m in result.missing],
            )
            return JSONResponse(status_code=409, content=body.model_dump())

        return ToggleResponse(
            item_id=item_id,
            action=result.action,
            completed=sorted(result.completed),
            items=snapshot(result.statuses),
        )

    @app.get("/diagnostics", response_model=DiagnosticsResponse)
    def get_diagnostics():
        report = diagnose(engine.catalog)
        return DiagnosticsResponse(
            unknown_requirements=report.unknown_requirements,
            cycle_members=report.cycle_members,
            levels=report.levels,
        )

    return app


def app_from_env() -> FastAPI:
    """Factory for `uvicorn --factory malla.web.app:app_from_env`."""
    if not settings.CATALOG_PATH:
        raise RuntimeError("MALLA_CATALOG must point to a catalog file")
    catalog = load_catalog(settings.CATALOG_PATH)
    store = GraphStateStore(settings.make_kv_store(), key=settings.STATE_KEY)
    return create_app(PrerequisiteEngine(catalog, store))
