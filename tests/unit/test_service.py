"""
Tests for the PosAssistant operations.

Each operation returns a plain value (or its fallback) and accepts either
domain records or camelCase dicts as the front end sends them.
"""

import pytest

from assistant.dispatcher import TaskDispatcher
from assistant.service import PosAssistant
from inference import InlineImage, ModelGateway, StubModelBackend


def make_assistant(responses=None, fail_tasks=None):
    backend = StubModelBackend(responses=responses, fail_tasks=fail_tasks)
    return PosAssistant(TaskDispatcher(ModelGateway(backend))), backend


PRODUCT_DICTS = [
    {"id": "p1", "name": "Rice 1kg", "brand": "Daawat", "price": 120, "stock": 40, "expiryDate": "2027-01-01"},
    {"id": "p2", "name": "Milk 500ml", "brand": "Amul", "price": 30, "stock": 3},
]


class TestTextOperations:

    def test_market_news(self):
        assistant, _ = make_assistant(responses={"market_news": "Tomato prices ease."})
        assert assistant.fetch_market_news() == "Tomato prices ease."

    def test_market_news_unavailable(self):
        assistant, _ = make_assistant(fail_tasks={"market_news"})
        assert assistant.fetch_market_news() == "Market news currently unavailable."

    def test_price_suggestion_empty(self):
        assistant, _ = make_assistant(responses={"price_suggestion": ""})
        assert assistant.fetch_price_variation_suggestion() == "Could not fetch suggestion."

    def test_ask_shop_ai(self):
        assistant, backend = make_assistant(responses={"shop_query": "You have 2 products."})
        answer = assistant.ask_shop_ai("How many products?", products=PRODUCT_DICTS)

        assert answer == "You have 2 products."
        assert '"productsCount":2' in backend.requests[0].prompt

    def test_ask_shop_ai_failure(self):
        assistant, _ = make_assistant(fail_tasks={"shop_query"})
        assert assistant.ask_shop_ai("Hello?") == "Sorry, I'm having trouble connecting to my brain right now."

    def test_analyze_customer_face(self):
        assistant, backend = make_assistant(responses={"face_description": "Male, 40s, beard"})
        assert assistant.analyze_customer_face("aGVsbG8=") == "Male, 40s, beard"
        assert backend.requests[0].image == InlineImage(data="aGVsbG8=")

    def test_analyze_customer_face_empty(self):
        assistant, _ = make_assistant(responses={"face_description": ""})
        assert assistant.analyze_customer_face("aGVsbG8=") == "Customer detected"

    def test_upsell(self):
        assistant, backend = make_assistant(responses={"upsell_suggestion": " Butter \n"})
        assert assistant.get_smart_upsell_suggestion(["Bread"]) == "Butter"
        assert backend.requests[0].prompt.startswith("Suggest 1 grocery add-on for: Bread.")

    def test_upsell_empty_cart(self):
        assistant, backend = make_assistant()
        assert assistant.get_smart_upsell_suggestion([]) is None
        assert backend.requests == []


class TestStructuredOperations:

    def test_voice_command_from_dicts(self):
        assistant, backend = make_assistant(
            responses={"voice_command": '```json\n{"type": "ADD_ITEM", "productId": "p1", "quantity": 0.5}\n```'}
        )
        result = assistant.process_voice_command("add 500 grams of rice", PRODUCT_DICTS)

        assert result == {"type": "ADD_ITEM", "productId": "p1", "quantity": 0.5}
        assert '"price"' not in backend.requests[0].prompt

    def test_voice_command_invalid(self):
        assistant, _ = make_assistant(responses={"voice_command": '{"type": "DANCE"}'})
        assert assistant.process_voice_command("dance", PRODUCT_DICTS) is None

    def test_visual_billing(self):
        assistant, _ = make_assistant(
            responses={"visual_billing": '[{"productId": "p2", "quantity": 2}, {"productId": "x"}]'}
        )
        assert assistant.analyze_image_for_billing("aGVsbG8=", PRODUCT_DICTS) == [
            {"productId": "p2", "quantity": 2.0}
        ]

    def test_visual_billing_no_image(self):
        assistant, backend = make_assistant()
        assert assistant.analyze_image_for_billing(None, PRODUCT_DICTS) == []
        assert backend.requests == []

    def test_smart_insights(self):
        assistant, _ = make_assistant(responses={"smart_insights": '{"staffPerformance": "Arjun leads"}'})
        sales = [{"id": "s1", "date": "2026-10-01T09:00:00", "total": 50, "items": [{"name": "Milk"}]}]

        assert assistant.generate_smart_insights(sales, PRODUCT_DICTS) == {
            "stockPrediction": "No data",
            "staffPerformance": "Arjun leads",
            "salesHeatmap": [],
        }

    def test_identify_customer(self):
        assistant, _ = make_assistant(responses={"face_identification": '{"matchedId": "c2"}'})
        customers = [
            {"id": "c1", "name": "Asha", "faceAttributes": "female, 30s"},
            {"id": "c2", "name": "Ravi", "faceAttributes": "male, 50s"},
        ]
        assert assistant.identify_customer_from_image("aGVsbG8=", customers) == "c2"

    def test_identify_customer_unknown_id(self):
        assistant, _ = make_assistant(responses={"face_identification": '{"matchedId": "c9"}'})
        customers = [{"id": "c1", "name": "Asha", "faceAttributes": "female, 30s"}]
        assert assistant.identify_customer_from_image("aGVsbG8=", customers) is None

    @pytest.mark.parametrize("customers", [[], [{"id": "c1", "name": "Asha"}]])
    def test_identify_customer_no_descriptors(self, customers):
        assistant, backend = make_assistant()
        assert assistant.identify_customer_from_image("aGVsbG8=", customers) is None
        assert backend.requests == []
