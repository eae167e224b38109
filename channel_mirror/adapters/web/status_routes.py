"""Read-only mirror status API routes."""

from typing import List, Optional

from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel

from channel_mirror.domain.engine import MirrorEngine
from channel_mirror.domain.models import ChannelPair
from channel_mirror.domain.pairing import PairingStore
from channel_mirror.domain.race_guard import RaceGuard


class PairingResponse(BaseModel):
    thread_a: str
    thread_b: str
    created_at: str


class PartnerResponse(BaseModel):
    thread_id: str
    partner_id: str


class StatusResponse(BaseModel):
    channels: List[str]
    pairings: int
    processing: List[str]
    ledger_entries: int
    pending_tasks: int
    engine_running: bool


def create_status_router(
    channels: ChannelPair,
    pairings: PairingStore,
    guard: RaceGuard,
    engine: Optional[MirrorEngine] = None,
) -> APIRouter:
    router = APIRouter(prefix="/mirror", tags=["Mirror"])

    # Snowflake ids are returned as strings, matching the stored records
    @router.get("/status", response_model=StatusResponse)
    async def status():
        return StatusResponse(
            channels=[str(channels.first), str(channels.second)],
            pairings=len(pairings),
            processing=sorted(str(t) for t in guard.in_flight),
            ledger_entries=guard.ledger_size,
            pending_tasks=engine.pending_tasks if engine else 0,
            engine_running=engine.running if engine else False,
        )

    @router.get("/pairings", response_model=List[PairingResponse])
    async def list_pairings():
        return [
            PairingResponse(thread_a=str(p.thread_a), thread_b=str(p.thread_b), created_at=p.created_at)
            for p in pairings.pairings()
        ]

    @router.get("/pairings/{thread_id}", response_model=PartnerResponse)
    async def get_partner(thread_id: int):
        partner = pairings.lookup(thread_id)
        if partner is None:
            raise HTTPException(status_code=404, detail=f"thread {thread_id} is not paired")
        return PartnerResponse(thread_id=str(thread_id), partner_id=str(partner))

    return router


def create_status_app(
    channels: ChannelPair,
    pairings: PairingStore,
    guard: RaceGuard,
    engine: Optional[MirrorEngine] = None,
) -> FastAPI:
    app = FastAPI(title="Channel Mirror")
    app.include_router(create_status_router(channels, pairings, guard, engine))
    return app
