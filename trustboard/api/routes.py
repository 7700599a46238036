"""API routes for the leaderboard and identity-linking service."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from trustboard.exceptions import ValidationError
from trustboard.models import LeaderboardRow, LinkRequest, LinkResult, LinkState, TxStatusResponse
from trustboard.services import IdentityLinker, LeaderboardService
from trustboard.services.link_service import validate_tx_hash
from .dependencies import get_identity_linker, get_leaderboard_service

router = APIRouter()


@router.get("/leaderboard", response_model=list[LeaderboardRow])
async def get_leaderboard(
    tab: str = Query(
        "overall",
        description="Leaderboard tab: overall or current",
        examples=["overall"],
    ),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> Response:
    """
    Get the ranked leaderboard with oracle trust flags.

    Returns ranked list: rank, name, score, cheatFlag
    """
    payload = await service.get_leaderboard(tab)
    return Response(content=payload, media_type="application/json")


@router.post("/link-address", response_model=LinkResult)
async def link_address(
    body: LinkRequest,
    linker: IdentityLinker = Depends(get_identity_linker),
) -> JSONResponse:
    """
    Bind a Flow address to the EVM address that signed the link message.

    The relayer pays gas. Returns: txHash
    """
    attempt = await linker.link(body)
    result = attempt.to_result().model_dump(exclude_none=True)

    if attempt.state is LinkState.REJECTED:
        return JSONResponse(status_code=400, content=result)
    if attempt.state is LinkState.RELAY_FAILED:
        return JSONResponse(status_code=500, content=result)
    return JSONResponse(status_code=200, content=result)


@router.get("/tx-status", response_model=TxStatusResponse)
async def get_tx_status(
    tx_hash: str = Query(
        "",
        alias="hash",
        description="Transaction hash (0x + 64 hex chars)",
    ),
    linker: IdentityLinker = Depends(get_identity_linker),
) -> JSONResponse:
    """
    Wait (bounded) for a relayed transaction to be mined.

    Returns: mined
    """
    try:
        validate_tx_hash(tx_hash)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content=TxStatusResponse(mined=False, error=str(e)).model_dump(exclude_none=True),
        )

    state = await linker.confirm(tx_hash)
    mined = state is LinkState.CONFIRMED
    return JSONResponse(content=TxStatusResponse(mined=mined).model_dump(exclude_none=True))
