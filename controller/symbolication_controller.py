# controller/symbolication_controller.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from controller.controller_dependencies import get_symbolication_service
from service.symbolication_service import SymbolicationService
from util.constants import InternalURIs

symbolication_router = APIRouter()


@symbolication_router.post(InternalURIs.SYMBOLICATE, response_class=PlainTextResponse)
async def symbolicate(
    request: Request,
    service: SymbolicationService = Depends(get_symbolication_service),
) -> PlainTextResponse:
    # Packager clients send the stack as text/plain, not application/json.
    body = (await request.body()).decode("utf-8", errors="replace")
    envelope = await service.symbolicate_request(body)
    return PlainTextResponse(envelope.dump())
