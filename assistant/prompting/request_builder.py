"""
Request Builder Layer
=====================

Turns a task kind plus ambient domain data into the prompt (and optional
inline image) sent to the model.

Responsibilities:
- Projects domain records through CONTEXT_WHITELIST, the single table of
  fields each task is allowed to send
- States the exact expected output shape in every prompt, since the service
  is not otherwise schema-constrained
- Caps history-like context (recent sales, sample products)

Invariants:
- A context payload never contains a field outside its task's whitelist
- Tasks without a whitelist entry send no domain records at all
- UPSELL_SUGGESTION sends cart item names only, no numbers, no customer data
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from pydantic import BaseModel

from assistant.domain import DomainSlice
from assistant.tasks import TaskKind
from inference import InlineImage

# ── Budget Constants ──────────────────────────────────────────────────────────
MAX_RECENT_SALES: int = 20
MAX_SAMPLE_PRODUCTS: int = 20

# A field spec is a field name, or (name, nested specs) for list/object fields.
FieldSpec = Union[str, Tuple[str, Tuple["FieldSpec", ...]]]

# ── Whitelist ─────────────────────────────────────────────────────────────────
# task -> context key -> fields sent for each record under that key.
CONTEXT_WHITELIST: Dict[TaskKind, Dict[str, Tuple[FieldSpec, ...]]] = {
    TaskKind.VOICE_COMMAND: {
        "inventory": ("id", "name"),
    },
    TaskKind.VISUAL_BILLING: {
        "inventory": ("id", "name", "brand"),
    },
    TaskKind.SMART_INSIGHTS: {
        "sales": ("date", "cashier", "total", ("items", ("name", "quantity"))),
        "inventory": ("name", "stock"),
    },
    TaskKind.FACE_IDENTIFICATION: {
        "customers": ("id", "face_attributes"),
    },
}

# ── Prompt Templates ──────────────────────────────────────────────────────────
MARKET_NEWS_PROMPT = (
    "Generate a one-sentence fictional news headline about today's grocery "
    "market trends. Keep it professional."
)

PRICE_SUGGESTION_PROMPT = (
    "Generate a short, fictional market news update for retail grocery products. "
    "Format: 'News Headline.\nSUGGESTION: Increase/Decrease [Category] prices by X%'"
)

SHOP_QUERY_PROMPT = """System Instruction: You are "ProBot", a retail AI assistant.
Answer based ONLY on the data provided. Be concise.

Data:
{data}

Question: {question}"""

VISUAL_BILLING_PROMPT = """Identify grocery items in the image. Match against inventory: {inventory}
Return JSON array ONLY: [{{"productId": "id", "quantity": 1}}]
Return [] if nothing in the image matches the inventory."""

VOICE_COMMAND_PROMPT = """Act as a POS Voice Parser. Map input to Intent.
Input: {transcript}
Inventory: {inventory}

Intents:
1. ADD: User wants to add item. Return {{"type": "ADD_ITEM", "productId": "id", "quantity": number}}.
   Handle weights as a fraction of the pack (e.g. 500g of a 1kg packet = 0.5).
2. CHECKOUT: User wants to finish/pay. Return {{"type": "CHECKOUT"}}.
3. CLEAR: Clear bill. Return {{"type": "CLEAR_BILL"}}.

Return JSON ONLY."""

SMART_INSIGHTS_PROMPT = """Analyze retail data.
Sales: {sales}
Stock: {inventory}

Provide JSON ONLY:
{{
  "stockPrediction": "Short text on stockout risks",
  "staffPerformance": "Short text on top employee",
  "salesHeatmap": [{{"productName": "Name", "score": 85}}]
}}
Scores are integers from 0 to 100."""

FACE_DESCRIPTION_PROMPT = "Describe face: Gender, Age, Features. Max 6 words."

FACE_IDENTIFICATION_PROMPT = """Match the face in the image to these text descriptions: {customers}
Return JSON ONLY: {{"matchedId": "id"}} or {{"matchedId": null}} if nobody matches."""

UPSELL_PROMPT = "Suggest 1 grocery add-on for: {items}. Max 3 words."


@dataclass
class BuiltRequest:
    """Prompt, optional image, and the exact context that was embedded."""

    prompt: str
    image: Optional[InlineImage] = None
    context: Dict[str, Any] = field(default_factory=dict)


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def project(record: Any, fields: Iterable[FieldSpec]) -> Dict[str, Any]:
    """
    Reduce one record to the whitelisted fields.

    Accepts pydantic models or plain dicts. Nested specs project every element
    of a list field (or a single nested object) the same way.
    """
    data = record.model_dump(mode="json") if isinstance(record, BaseModel) else dict(record)
    out: Dict[str, Any] = {}
    for spec in fields:
        if isinstance(spec, tuple):
            name, nested = spec
            value = data.get(name)
            if isinstance(value, list):
                out[name] = [project(v, nested) for v in value]
            elif value is not None:
                out[name] = project(value, nested)
            else:
                out[name] = None
        else:
            out[spec] = data.get(spec)
    return out


def _sale_time(sale) -> datetime:
    """Sort key for sales; naive timestamps are read as UTC."""
    if sale.date.tzinfo is None or sale.date.utcoffset() is None:
        return sale.date.replace(tzinfo=timezone.utc)
    return sale.date


def build_context(task: TaskKind, domain: DomainSlice) -> Dict[str, Any]:
    """
    Assemble the whitelisted context payload for a task.

    Record selection (which records) is decided here; field selection
    (which fields) comes only from CONTEXT_WHITELIST.
    """
    whitelist = CONTEXT_WHITELIST.get(task)
    if not whitelist:
        return {}

    sources = {
        "inventory": domain.products,
        "sales": sorted(domain.sales, key=_sale_time)[-MAX_RECENT_SALES:],
        "customers": domain.customers_with_descriptor,
    }
    return {
        key: [project(record, fields) for record in sources[key]]
        for key, fields in whitelist.items()
    }


class RequestBuilder:
    """Builds a minimized prompt per task kind."""

    def build(self, task: TaskKind, domain: DomainSlice, user_input: str = "") -> BuiltRequest:
        context = build_context(task, domain)

        if task == TaskKind.MARKET_NEWS:
            return BuiltRequest(prompt=MARKET_NEWS_PROMPT)

        if task == TaskKind.PRICE_SUGGESTION:
            return BuiltRequest(prompt=PRICE_SUGGESTION_PROMPT)

        if task == TaskKind.SHOP_QUERY:
            # Aggregates only; no per-record fields leave the terminal.
            context = {
                "productsCount": len(domain.products),
                "salesCount": len(domain.sales),
                "sampleProducts": [p.name for p in domain.products[:MAX_SAMPLE_PRODUCTS]],
            }
            prompt = SHOP_QUERY_PROMPT.format(data=_compact(context), question=user_input.strip())
            return BuiltRequest(prompt=prompt, context=context)

        if task == TaskKind.VISUAL_BILLING:
            prompt = VISUAL_BILLING_PROMPT.format(inventory=_compact(context["inventory"]))
            return BuiltRequest(prompt=prompt, image=domain.image, context=context)

        if task == TaskKind.VOICE_COMMAND:
            prompt = VOICE_COMMAND_PROMPT.format(
                transcript=_compact(user_input.strip()),
                inventory=_compact(context["inventory"]),
            )
            return BuiltRequest(prompt=prompt, context=context)

        if task == TaskKind.SMART_INSIGHTS:
            prompt = SMART_INSIGHTS_PROMPT.format(
                sales=_compact(context["sales"]),
                inventory=_compact(context["inventory"]),
            )
            return BuiltRequest(prompt=prompt, context=context)

        if task == TaskKind.FACE_DESCRIPTION:
            return BuiltRequest(prompt=FACE_DESCRIPTION_PROMPT, image=domain.image)

        if task == TaskKind.FACE_IDENTIFICATION:
            prompt = FACE_IDENTIFICATION_PROMPT.format(customers=_compact(context["customers"]))
            return BuiltRequest(prompt=prompt, image=domain.image, context=context)

        if task == TaskKind.UPSELL_SUGGESTION:
            names = [n.strip() for n in domain.cart_item_names if n and n.strip()]
            context = {"cart": names}
            return BuiltRequest(prompt=UPSELL_PROMPT.format(items=",".join(names)), context=context)

        raise ValueError(f"Unknown task kind: {task}")
