"""Reconciliation API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Path, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import BaseModel

from walletrecon.cells import Table
from walletrecon.config import SLOTS, settings
from walletrecon.exceptions import MissingDescriptionColumnError, TableDecodeError
from walletrecon.services.export import to_csv, to_workbook
from walletrecon.services.reconcile import ReconciliationEngine
from walletrecon.services.session import ReconciliationSession, SessionStore, session_store
from walletrecon.services.tables import read_table

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recon", tags=["reconciliation"])

CSV_FILENAME = "BankComparisonResults.csv"
XLSX_FILENAME = "BankComparisonResults.xlsx"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class SessionResponse(BaseModel):
    """Session state."""

    session_id: str
    files: dict[str, str | None]
    ready: bool
    has_result: bool


class UploadResponse(BaseModel):
    """Result of loading a file into a slot."""

    slot: str
    label: str
    filename: str
    rows: int


def get_store() -> SessionStore:
    return session_store


def get_engine() -> ReconciliationEngine:
    return ReconciliationEngine()


def _session_response(session: ReconciliationSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.id,
        files={slot: session.filename(slot) for slot in SLOTS},
        ready=session.ready,
        has_result=session.result is not None,
    )


async def _get_session(store: SessionStore, session_id: str) -> ReconciliationSession:
    session = await store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return session


async def _decode_upload(upload: UploadFile) -> Table:
    """Read and decode an uploaded file off the event loop, mapping failures to HTTP errors."""
    content = await upload.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large: {upload.filename} ({len(content)} bytes)",
        )

    try:
        return await run_in_threadpool(read_table, upload.filename or "", content)
    except TableDecodeError as e:
        logger.warning(f"Rejected upload {upload.filename}: {e}")
        raise HTTPException(status_code=400, detail=f"Error reading file: {e}") from e


def _check_inputs(has_source: bool, has_wallet: bool) -> None:
    if not has_source:
        raise HTTPException(status_code=400, detail="Please upload the Bank Sheet file first.")
    if not has_wallet:
        raise HTTPException(
            status_code=400,
            detail="Please upload at least one wallet file for comparison.",
        )


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(store: Annotated[SessionStore, Depends(get_store)]):
    """Start a new reconciliation session."""
    return _session_response(await store.create())


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_store)],
):
    """Get uploaded files and result availability for a session."""
    return _session_response(await _get_session(store, session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_store)],
):
    """Discard a session and everything loaded into it."""
    if not await store.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return Response(status_code=204)


@router.put("/sessions/{session_id}/files/{slot}", response_model=UploadResponse)
async def upload_file(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_store)],
    slot: str = Path(..., pattern="^(source|wallet1|wallet2)$"),
    file: UploadFile = File(...),
):
    """Load the bank sheet or a wallet sheet into a session."""
    session = await _get_session(store, session_id)
    table = await _decode_upload(file)
    session.load(slot, file.filename or slot, table)
    await store.save(session)

    return UploadResponse(
        slot=slot,
        label=SLOTS[slot],
        filename=file.filename or slot,
        rows=len(table),
    )


@router.post("/sessions/{session_id}/compare")
async def compare_session(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_store)],
    engine: Annotated[ReconciliationEngine, Depends(get_engine)],
):
    """Run the comparison on a session's uploads."""
    session = await _get_session(store, session_id)
    _check_inputs(session.has_source, session.has_wallet)

    try:
        result = await run_in_threadpool(session.run, engine)
    except MissingDescriptionColumnError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    await store.save(session)

    return result.to_dict()


@router.get("/sessions/{session_id}/result")
async def get_result(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_store)],
):
    """Last comparison result of a session."""
    session = await _get_session(store, session_id)
    if session.result is None:
        raise HTTPException(status_code=404, detail="No results yet. Run a comparison first.")
    return session.result.to_dict()


@router.get("/sessions/{session_id}/export.csv")
async def export_csv(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_store)],
):
    """Download the last result as CSV."""
    session = await _get_session(store, session_id)
    if session.result is None:
        raise HTTPException(status_code=404, detail="No results to export. Run a comparison first.")

    content = await run_in_threadpool(
        to_csv, session.result, session.filename("wallet1"), session.filename("wallet2")
    )
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )


@router.get("/sessions/{session_id}/export.xlsx")
async def export_xlsx(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_store)],
):
    """Download the last result as an Excel workbook."""
    session = await _get_session(store, session_id)
    if session.result is None:
        raise HTTPException(status_code=404, detail="No results to export. Run a comparison first.")

    content = await run_in_threadpool(
        to_workbook, session.result, session.filename("wallet1"), session.filename("wallet2")
    )
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{XLSX_FILENAME}"'},
    )


@router.post("/compare")
async def compare_files(
    engine: Annotated[ReconciliationEngine, Depends(get_engine)],
    source: UploadFile | None = File(None),
    wallet1: UploadFile | None = File(None),
    wallet2: UploadFile | None = File(None),
):
    """Compare uploaded files in one request without keeping a session."""
    _check_inputs(source is not None, wallet1 is not None or wallet2 is not None)

    source_table = await _decode_upload(source)
    wallet1_table = await _decode_upload(wallet1) if wallet1 is not None else None
    wallet2_table = await _decode_upload(wallet2) if wallet2 is not None else None

    try:
        result = await run_in_threadpool(
            engine.reconcile, source_table, wallet1_table, wallet2_table
        )
    except MissingDescriptionColumnError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return result.to_dict()
