from __future__ import annotations

from fastapi import FastAPI, HTTPException

from .feedback.trigger import should_trigger_feedback
from .outbound.href import decode_candidate_link
from .outbound.models import ResolvedLink
from .resolution.cache import get_cache_stats
from .resolution.models import (
    DecodeRequest,
    ResolveRequest,
    ResolveResponse,
    TrackReturnRequest,
    TrackReturnResponse,
)
from .resolution.pipeline import resolve_recommendations

app = FastAPI(title="Recommendation Candidate Resolution API", version="1.0.0")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/recommendations/resolve", response_model=ResolveResponse)
def resolve(body: ResolveRequest) -> ResolveResponse:
    return resolve_recommendations(body)


@app.post("/recommendations/track-return", response_model=TrackReturnResponse)
def track_return(body: TrackReturnRequest) -> TrackReturnResponse:
    return TrackReturnResponse(
        should_show_feedback=should_trigger_feedback(
            body.time_away_seconds,
            has_existing_feedback=body.has_existing_feedback,
        )
    )


# ── Outbound redirect support ────────────────────────────────────────────


@app.post("/outbound/decode", response_model=ResolvedLink)
def outbound_decode(body: DecodeRequest) -> ResolvedLink:
    link, error = decode_candidate_link(body.data, body.language.value)
    if link is None:
        raise HTTPException(status_code=400, detail=error)
    return link


# ── Operations ───────────────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()
