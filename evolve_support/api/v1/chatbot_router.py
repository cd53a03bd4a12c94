"""Chat completion endpoint.

The body is the bare ``{"response": ...}`` object that chat screens consume,
not the ``ApiResponse`` envelope used elsewhere.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from evolve_support.dependencies import get_chatbot_service
from evolve_support.schemas.chatbot_schema import ChatbotRequest, ChatbotResponse
from evolve_support.services.chatbot_service import ChatbotService

router = APIRouter(prefix="/api/v1/chatbot", tags=["chatbot"])

ChatbotServiceDep = Annotated[ChatbotService, Depends(get_chatbot_service)]


@router.post("", response_model=ChatbotResponse)
async def chatbot(
    request: ChatbotRequest,
    service: ChatbotServiceDep,
) -> ChatbotResponse:
    """Generate one assistant reply."""
    return await service.reply(request)
