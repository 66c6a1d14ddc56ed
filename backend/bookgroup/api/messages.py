"""Member-to-member email endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from bookgroup.api.deps import get_message_service
from bookgroup.api.security_deps import require_member
from bookgroup.domain.members.schemas import Member
from bookgroup.domain.messaging import schemas
from bookgroup.domain.messaging.service import MessageService

router = APIRouter(prefix="/api", tags=["messages"])


@router.get("/message-data", response_model=schemas.MessageDataResponse)
async def message_data_endpoint(
	member: Member = Depends(require_member),
	service: MessageService = Depends(get_message_service),
) -> schemas.MessageDataResponse:
	return await service.message_data(member)


@router.post("/send-message", response_model=schemas.SendMessageResponse)
async def send_message_endpoint(
	payload: schemas.SendMessageRequest,
	member: Member = Depends(require_member),
	service: MessageService = Depends(get_message_service),
) -> schemas.SendMessageResponse:
	sent = await service.send_message(member, payload)
	return schemas.SendMessageResponse(sent=sent)
