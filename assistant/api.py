"""
HTTP surface for the POS front end.

Serves:
- /health/live: Liveness probe
- /diagnostics/fallbacks: Recent fallback records (operator visibility)
- /ai/*: One POST endpoint per assistant operation

Every /ai endpoint answers 200 with {"result": value}; model failures show up
as the operation's fallback value, never as an error status.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from assistant.domain import Customer, Product, Sale
from assistant.observability import ObservabilityStore
from assistant.service import PosAssistant
from inference import InlineImage


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageBody(_Body):
    image: str = Field(..., description="Base64-encoded image data")
    mime_type: str = "image/jpeg"

    def inline_image(self) -> InlineImage:
        return InlineImage(data=self.image, mime_type=self.mime_type)


class AskRequest(_Body):
    question: str
    products: List[Product] = Field(default_factory=list)
    sales: List[Sale] = Field(default_factory=list)
    customers: List[Customer] = Field(default_factory=list)


class VisualBillingRequest(ImageBody):
    products: List[Product] = Field(default_factory=list)


class VoiceCommandRequest(_Body):
    transcript: str
    products: List[Product] = Field(default_factory=list)


class InsightsRequest(_Body):
    sales: List[Sale] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)


class FaceIdentifyRequest(ImageBody):
    customers: List[Customer] = Field(default_factory=list)


class UpsellRequest(_Body):
    cart_item_names: List[str] = Field(default_factory=list)


def get_assistant(request: Request) -> PosAssistant:
    return request.app.state.assistant


router = APIRouter(prefix="/ai", tags=["assistant"])


# Plain `def` endpoints: FastAPI runs them in its threadpool, so a slow model
# call never blocks the event loop.
@router.post("/market-news")
def market_news(assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.fetch_market_news()}


@router.post("/price-suggestion")
def price_suggestion(assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.fetch_price_variation_suggestion()}


@router.post("/ask")
def ask(body: AskRequest, assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.ask_shop_ai(body.question, body.products, body.sales, body.customers)}


@router.post("/visual-billing")
def visual_billing(body: VisualBillingRequest, assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.analyze_image_for_billing(body.inline_image(), body.products)}


@router.post("/voice-command")
def voice_command(body: VoiceCommandRequest, assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.process_voice_command(body.transcript, body.products)}


@router.post("/insights")
def insights(body: InsightsRequest, assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.generate_smart_insights(body.sales, body.products)}


@router.post("/face/describe")
def face_describe(body: ImageBody, assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.analyze_customer_face(body.inline_image())}


@router.post("/face/identify")
def face_identify(body: FaceIdentifyRequest, assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.identify_customer_from_image(body.inline_image(), body.customers)}


@router.post("/upsell")
def upsell(body: UpsellRequest, assistant: PosAssistant = Depends(get_assistant)):
    return {"result": assistant.get_smart_upsell_suggestion(body.cart_item_names)}


def create_app(
    assistant: Optional[PosAssistant] = None,
    store: Optional[ObservabilityStore] = None,
    lifespan=None,
) -> FastAPI:
    """
    Create FastAPI application.

    Without an explicit assistant the process-wide bootstrap is used, which
    raises ConfigurationError at startup if the model backend is not configured.
    """
    if assistant is None:
        from infra import bootstrap_infrastructure

        infra = bootstrap_infrastructure()
        assistant = infra.get_assistant()
        store = store or infra.get_store()

    app = FastAPI(
        title="POS AI Assistant API",
        description="Typed AI helpers for the point-of-sale admin tool",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.assistant = assistant
    app.state.store = store

    @app.get("/health/live")
    async def health_live():
        """Liveness probe."""
        return {"status": "alive"}

    @app.get("/diagnostics/fallbacks")
    async def recent_fallbacks(limit: int = 50):
        """Recent fallback records (metadata and truncated model text only)."""
        if app.state.store is None:
            return {"fallbacks": []}
        return {"fallbacks": app.state.store.get_recent_fallbacks(limit)}

    app.include_router(router)
    return app
