"""
Tests for the model boundary: ModelGateway, GeminiModelBackend, StubModelBackend.

Verifies:
✔ Missing backend is a construction-time ConfigurationError
✔ Backend exceptions become a typed non-success ModelResponse
✔ Exactly one backend call per gateway call (no retry)
✔ Gemini payload carries image, response format and thinking budget
✔ Gemini transport failures map to error types, never raise
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from inference import (
    ConfigurationError,
    GeminiModelBackend,
    InlineImage,
    ModelBackend,
    ModelGateway,
    ModelRequest,
    ModelResponse,
    StubModelBackend,
)


class ExplodingBackend(ModelBackend):
    def __init__(self):
        self.calls = 0

    def generate(self, request):
        self.calls += 1
        raise RuntimeError("socket closed")


class TestModelGateway:

    def test_missing_backend_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            ModelGateway(None)

    def test_backend_exception_becomes_unavailable(self):
        backend = ExplodingBackend()
        response = ModelGateway(backend).call(task="market_news", prompt="hi")

        assert response.status == "fatal_error"
        assert response.error_type == "backend_unavailable"
        assert not response.is_available
        assert "socket closed" in response.metadata["error"]
        assert backend.calls == 1

    def test_single_attempt_on_failure(self):
        backend = StubModelBackend(fail_tasks={"voice_command"})
        response = ModelGateway(backend).call(task="voice_command", prompt="checkout")

        assert not response.is_available
        assert len(backend.requests) == 1

    def test_hints_are_forwarded(self):
        backend = StubModelBackend()
        image = InlineImage(data="abc")
        ModelGateway(backend, timeout_s=5).call(
            task="visual_billing",
            prompt="p",
            image=image,
            response_format="application/json",
            reasoning_effort="minimal",
            trace_id="t-1",
        )

        request = backend.requests[0]
        assert request.image == image
        assert request.response_format == "application/json"
        assert request.reasoning_effort == "minimal"
        assert request.timeout_s == 5
        assert request.trace_id == "t-1"

    def test_non_response_value_becomes_unavailable(self):
        backend = MagicMock(spec=ModelBackend)
        backend.generate.return_value = "raw string"
        response = ModelGateway(backend).call(task="market_news", prompt="hi")
        assert response.error_type == "invalid_output"


class TestStubBackend:

    def test_deterministic(self):
        backend = StubModelBackend()
        request = ModelRequest(task="market_news", prompt="x")
        assert backend.generate(request).output == backend.generate(request).output

    def test_scripted_output(self):
        backend = StubModelBackend(responses={"upsell_suggestion": "Butter"})
        assert backend.generate(ModelRequest(task="upsell_suggestion", prompt="x")).output == "Butter"

    def test_unknown_task_default(self):
        response = StubModelBackend().generate(ModelRequest(task="other", prompt="x"))
        assert response.output == "Default stub output for task: other"


def _ok_response(payload):
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = payload
    return resp


class TestGeminiBackend:

    @pytest.fixture
    def backend(self):
        return GeminiModelBackend(api_key="k", model_name="gemini-2.5-flash", base_url="https://example.test/")

    def test_payload_text_only(self, backend):
        payload = backend.build_payload(ModelRequest(task="market_news", prompt="Headline"))
        assert payload == {"contents": [{"role": "user", "parts": [{"text": "Headline"}]}]}

    def test_payload_with_image_and_hints(self, backend):
        request = ModelRequest(
            task="voice_command",
            prompt="Parse",
            image=InlineImage(data="b64", mime_type="image/png"),
            response_format="application/json",
            reasoning_effort="minimal",
        )
        payload = backend.build_payload(request)

        parts = payload["contents"][0]["parts"]
        assert parts[0] == {"inlineData": {"mimeType": "image/png", "data": "b64"}}
        assert parts[1] == {"text": "Parse"}
        assert payload["generationConfig"] == {
            "responseMimeType": "application/json",
            "thinkingConfig": {"thinkingBudget": 0},
        }

    def test_default_effort_sends_no_thinking_config(self, backend):
        request = ModelRequest(task="smart_insights", prompt="x", response_format="application/json")
        assert "thinkingConfig" not in backend.build_payload(request)["generationConfig"]

    @patch("inference.gemini.requests.post")
    def test_success_concatenates_text_parts(self, mock_post, backend):
        mock_post.return_value = _ok_response(
            {"candidates": [{"content": {"parts": [{"text": '{"type": '}, {"text": '"CHECKOUT"}'}]}}]}
        )
        response = backend.generate(ModelRequest(task="voice_command", prompt="x", trace_id="t"))

        assert response.status == "success"
        assert response.output == '{"type": "CHECKOUT"}'
        url = mock_post.call_args.args[0]
        assert url == "https://example.test/v1beta/models/gemini-2.5-flash:generateContent"
        assert mock_post.call_args.kwargs["headers"] == {"x-goog-api-key": "k"}
        assert mock_post.call_args.kwargs["timeout"] is None

    @patch("inference.gemini.requests.post")
    def test_no_candidates_is_empty_text(self, mock_post, backend):
        mock_post.return_value = _ok_response({"promptFeedback": {"blockReason": "SAFETY"}})
        response = backend.generate(ModelRequest(task="market_news", prompt="x"))
        assert response.status == "success"
        assert response.output == ""

    @pytest.mark.parametrize("exc, status, error_type", [
        (requests.Timeout("slow"), "recoverable_error", "timeout"),
        (requests.ConnectionError("down"), "recoverable_error", "connection"),
        (ValueError("bad body"), "fatal_error", "backend_unavailable"),
    ])
    def test_transport_failures(self, backend, exc, status, error_type):
        with patch("inference.gemini.requests.post", side_effect=exc):
            response = backend.generate(ModelRequest(task="market_news", prompt="x"))
        assert response.status == status
        assert response.error_type == error_type

    @patch("inference.gemini.requests.post")
    def test_http_error(self, mock_post, backend):
        resp = MagicMock()
        resp.status_code = 429
        resp.raise_for_status.side_effect = requests.HTTPError("429", response=resp)
        mock_post.return_value = resp

        response = backend.generate(ModelRequest(task="market_news", prompt="x"))
        assert response.error_type == "http_error"
        assert response.metadata["status_code"] == 429

    def test_gateway_passes_through_gemini_failure(self, backend):
        with patch("inference.gemini.requests.post", side_effect=requests.ConnectionError("down")):
            response = ModelGateway(backend).call(task="market_news", prompt="x")
        assert isinstance(response, ModelResponse)
        assert not response.is_available
