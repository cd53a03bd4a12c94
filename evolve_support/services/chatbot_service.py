"""Chat completion for the scooter support assistant."""

import re
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from evolve_support.core.exceptions import (
    AppException,
    ChatCompletionError,
    MessageRequiredError,
    UnexpectedError,
)
from evolve_support.models.order import Order
from evolve_support.repositories.order_repo import OrderRepository
from evolve_support.schemas.chatbot_schema import ChatbotRequest, ChatbotResponse

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are a helpful customer support assistant for an electric scooter company.\n"
    "You help customers with questions about:\n"
    "- Scooter models, features, and specifications\n"
    "- Battery life, charging, and maintenance\n"
    "- Troubleshooting common issues\n"
    "- Order status and delivery information "
    "(you have access to their order history when they ask)\n"
    "- Warranty and repair services\n"
    "- Safety tips and riding guidelines\n\n"
    "When customers ask about their orders, use the provided order history to "
    "give specific, accurate information about their purchases, delivery status, "
    "and order details.\n"
    "Always be friendly, helpful, and provide clear, accurate information. "
    "If you don't know something specific about our scooters, suggest they "
    "contact our support team for detailed assistance."
)

ORDER_INTENT_PATTERN = re.compile(
    r"\b(order|orders|purchase|bought|delivery|shipped|status|tracking)\b",
    re.IGNORECASE,
)

ORDER_CONTEXT_HEADER = "User's Order History:"


def is_order_query(message: str) -> bool:
    """Whether a message asks about purchases or deliveries."""
    return ORDER_INTENT_PATTERN.search(message) is not None


def _format_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _format_amount(value: Decimal) -> str:
    text = f"{value:.2f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def format_order_line(order: Order) -> str:
    """Render one order as a single line of model context."""
    line = (
        f"Order #{order.order_number}: {order.product_name} ({order.product_model})"
        f" - Status: {order.status}"
        f" - Ordered: {_format_date(order.order_date)}"
        f" - Amount: ${_format_amount(order.total_amount)}"
    )
    if order.delivery_date is not None:
        line += f" - Delivery: {_format_date(order.delivery_date)}"
    return line


def format_order_context(orders: Sequence[Order]) -> str:
    """Order history block appended to the system prompt, or ``""``."""
    if not orders:
        return ""
    lines = "\n".join(format_order_line(order) for order in orders)
    return f"\n\n{ORDER_CONTEXT_HEADER}\n{lines}"


class ChatbotService:
    """Generates assistant replies, enriched with order history when relevant."""

    def __init__(
        self,
        llm: BaseChatModel,
        order_repo: OrderRepository,
        user_id: int | None,
    ) -> None:
        self._llm = llm
        self._order_repo = order_repo
        self._user_id = user_id

    async def reply(self, request: ChatbotRequest) -> ChatbotResponse:
        """Answer one message. Each call is independent of earlier turns."""
        message = (request.message or "").strip()
        if not message:
            raise MessageRequiredError()

        try:
            system_prompt = SYSTEM_PROMPT + await self._order_context(message)
            content = await self._complete(system_prompt, message)
        except AppException:
            raise
        except Exception as exc:
            logger.exception("Chatbot request failed", user_id=self._user_id)
            raise UnexpectedError() from exc

        logger.info(
            "Chatbot replied",
            user_id=self._user_id,
            has_file=request.has_file,
            response_length=len(content),
        )
        return ChatbotResponse(response=content)

    async def _order_context(self, message: str) -> str:
        if self._user_id is None or not is_order_query(message):
            return ""
        try:
            orders = await self._order_repo.find_by_user(self._user_id)
        except Exception:
            logger.warning(
                "Could not fetch orders", user_id=self._user_id, exc_info=True
            )
            return ""
        return format_order_context(orders)

    async def _complete(self, system_prompt: str, message: str) -> str:
        try:
            result = await self._llm.ainvoke(
                [SystemMessage(content=system_prompt), HumanMessage(content=message)]
            )
        except Exception as exc:
            logger.exception("Chat completion failed", user_id=self._user_id)
            raise ChatCompletionError() from exc

        content = result.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return str(content)
