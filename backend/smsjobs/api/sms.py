"""
SMS Gateway Webhook

    POST /api/sms/inbound     - inbound message (Twilio form post or JSON)
    POST /api/sms/job-search  - same handler, legacy path

Responses:
    405 JSON  - any method other than POST
    400 JSON  - From or Body missing
    200 XML   - every other case, including internal faults
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from smsjobs.schemas import InboundSMS
from smsjobs.services.dispatcher import SMSDispatcher, build_dispatcher
from smsjobs.services.twiml import message_response

logger = logging.getLogger(__name__)
router = APIRouter()

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_dispatcher(request: Request) -> SMSDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        dispatcher = build_dispatcher()
        request.app.state.dispatcher = dispatcher
    return dispatcher


async def read_payload(request: Request) -> Dict[str, Any]:
    """Webhook fields from a form-encoded or JSON body; {} when unreadable."""
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            payload = await request.json()
            return payload if isinstance(payload, dict) else {}
        form = await request.form()
        return dict(form)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        logger.info(f"Unreadable webhook body: {e}")
        return {}


def xml_response(text: str) -> Response:
    return Response(content=message_response(text), media_type="text/xml")


@router.api_route("/inbound", methods=ALL_METHODS)
@router.api_route("/job-search", methods=ALL_METHODS)
async def inbound_sms(
    request: Request,
    dispatcher: SMSDispatcher = Depends(get_dispatcher),
):
    if request.method != "POST":
        return JSONResponse(status_code=405, content={"error": "Method not allowed"})

    try:
        message = InboundSMS.model_validate(await read_payload(request))
    except ValidationError:
        message = None

    if message is None or not message.is_complete:
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})

    try:
        reply = await dispatcher.handle(message.from_phone, message.body, message.media_url)
    except Exception:
        logger.exception("SMS webhook error")
        reply = dispatcher.error_text

    return xml_response(reply)
