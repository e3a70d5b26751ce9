"""FastAPI query surface over the fetch orchestrator."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator

from config import get_auth_settings
from sources import group_by_column
from utils.exceptions import UnknownSourceError
from webapp.runtime import get_orchestrator


logger = logging.getLogger(__name__)

MAX_BATCH_SOURCES = 50


class EntirePayload(BaseModel):
    sources: List[str] = Field(default_factory=list)

    @field_validator("sources")
    @classmethod
    def _clean_ids(cls, value: List[str]) -> List[str]:
        cleaned = [str(item or "").strip() for item in value if str(item or "").strip()]
        if len(cleaned) > MAX_BATCH_SOURCES:
            raise ValueError(f"at most {MAX_BATCH_SOURCES} sources per request")
        return cleaned


app = FastAPI(title="Hotlist API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat(timespec="seconds")}


@app.get("/api/s")
async def get_source(id: str = Query(..., min_length=1)) -> Dict[str, Any]:
    orchestrator = get_orchestrator()
    try:
        result = await orchestrator.fetch(id.strip())
    except UnknownSourceError:
        raise HTTPException(status_code=404, detail=f"unknown source: {id}")
    return result.to_payload()


@app.post("/api/s/entire")
async def get_sources(payload: EntirePayload) -> List[Dict[str, Any]]:
    orchestrator = get_orchestrator()
    registry = orchestrator.registry
    known = [source_id for source_id in payload.sources if source_id in registry]
    skipped = sorted(set(payload.sources) - set(known))
    if skipped:
        logger.info(f"Skipping unknown sources in batch request: {skipped}")
    results = await orchestrator.fetch_many(known)
    return [{"id": source_id, **result.to_payload()} for source_id, result in results.items()]


@app.get("/api/sources")
def list_sources() -> Dict[str, Any]:
    registry = get_orchestrator().registry
    visible = registry.list_visible()
    return {
        "sources": [{"id": key, **meta.to_payload()} for key, meta in visible],
        "columns": [
            {"column": label, "sources": [key for key, _ in entries]}
            for label, entries in group_by_column(visible)
        ],
    }


@app.get("/api/enable-login")
def enable_login() -> Dict[str, Any]:
    client_id = get_auth_settings().github_client_id
    if not client_id:
        return {"enable": False, "url": ""}
    return {
        "enable": True,
        "url": f"https://github.com/login/oauth/authorize?client_id={client_id}",
    }
