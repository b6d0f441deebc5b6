"""
Discord interactions endpoint: every button click / select choice on the board lands here.

Configure https://<host>/discord/interactions as the application's Interactions Endpoint URL.
"""
import json
import logging

from fastapi import APIRouter, BackgroundTasks, Header, Request
from fastapi.concurrency import run_in_threadpool

from slotboard.config import settings
from slotboard.core.errors import InvalidInteractionSignature, signature_error_to_http
from slotboard.services.discord.interactions import verify_signature
from slotboard.services.interaction_service import handle_interaction

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/interactions")
async def interactions(
    request: Request,
    background_tasks: BackgroundTasks,
    x_signature_ed25519: str | None = Header(None, alias="X-Signature-Ed25519"),
    x_signature_timestamp: str | None = Header(None, alias="X-Signature-Timestamp"),
) -> dict:
    """
    Verify the request signature, answer within Discord's 3 s window and schedule the
    follow-up (claim, manual refresh) as a background task.
    """
    body = await request.body()
    try:
        verify_signature(settings.discord_public_key, x_signature_ed25519 or "", x_signature_timestamp or "", body)
    except InvalidInteractionSignature as e:
        raise signature_error_to_http(e) from e
    interaction = json.loads(body or b"{}")
    # sheet reads for the picker/history are blocking
    response, follow_up = await run_in_threadpool(handle_interaction, interaction)
    if follow_up is not None:
        background_tasks.add_task(follow_up)
    return response
