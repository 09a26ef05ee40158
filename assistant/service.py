"""
Caller-facing operations.

Nine fixed operations, each returning the task's plain value (or its
documented fallback). None of them raises on model failure.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel

from assistant.dispatcher import TaskDispatcher
from assistant.domain import Customer, DomainSlice, Product, Sale
from assistant.results import SmartInsights, VoiceIntent
from assistant.tasks import TaskKind
from inference import InlineImage


R = TypeVar("R", bound=BaseModel)

ImageInput = Union[str, InlineImage, None]


def _records(model: Type[R], items: Optional[Iterable[Any]]) -> List[R]:
    """Accept pydantic records or plain dicts (camelCase or snake_case)."""
    return [item if isinstance(item, model) else model.model_validate(item) for item in (items or [])]


def _image(image: ImageInput) -> Optional[InlineImage]:
    if image is None or isinstance(image, InlineImage):
        return image
    return InlineImage(data=image)


class PosAssistant:
    """Thin facade over TaskDispatcher for the POS front end."""

    def __init__(self, dispatcher: TaskDispatcher):
        self.dispatcher = dispatcher

    def fetch_market_news(self) -> str:
        return self.dispatcher.run(TaskKind.MARKET_NEWS).value

    def fetch_price_variation_suggestion(self) -> str:
        return self.dispatcher.run(TaskKind.PRICE_SUGGESTION).value

    def ask_shop_ai(
        self,
        question: str,
        products: Optional[Sequence[Any]] = None,
        sales: Optional[Sequence[Any]] = None,
        customers: Optional[Sequence[Any]] = None,
    ) -> str:
        domain = DomainSlice(
            products=_records(Product, products),
            sales=_records(Sale, sales),
            customers=_records(Customer, customers),
        )
        return self.dispatcher.run(TaskKind.SHOP_QUERY, domain, question).value

    def analyze_image_for_billing(self, image: ImageInput, products: Sequence[Any]) -> List[Dict[str, Any]]:
        """Recognized cart lines as [{"productId", "quantity"}]."""
        domain = DomainSlice(products=_records(Product, products), image=_image(image))
        lines = self.dispatcher.run(TaskKind.VISUAL_BILLING, domain).value
        return [line.to_payload() for line in lines]

    def process_voice_command(self, transcript: str, products: Sequence[Any]) -> Optional[Dict[str, Any]]:
        """The parsed intent as {"type", "productId"?, "quantity"?}, or None."""
        domain = DomainSlice(products=_records(Product, products))
        intent: Optional[VoiceIntent] = self.dispatcher.run(TaskKind.VOICE_COMMAND, domain, transcript).value
        return intent.to_payload() if intent is not None else None

    def generate_smart_insights(self, sales: Sequence[Any], products: Sequence[Any]) -> Dict[str, Any]:
        domain = DomainSlice(sales=_records(Sale, sales), products=_records(Product, products))
        insights: SmartInsights = self.dispatcher.run(TaskKind.SMART_INSIGHTS, domain).value
        return insights.to_payload()

    def analyze_customer_face(self, image: ImageInput) -> str:
        domain = DomainSlice(image=_image(image))
        return self.dispatcher.run(TaskKind.FACE_DESCRIPTION, domain).value

    def identify_customer_from_image(self, image: ImageInput, customers: Sequence[Any]) -> Optional[str]:
        domain = DomainSlice(customers=_records(Customer, customers), image=_image(image))
        return self.dispatcher.run(TaskKind.FACE_IDENTIFICATION, domain).value

    def get_smart_upsell_suggestion(self, cart_item_names: Sequence[str]) -> Optional[str]:
        domain = DomainSlice(cart_item_names=list(cart_item_names or []))
        return self.dispatcher.run(TaskKind.UPSELL_SUGGESTION, domain).value
