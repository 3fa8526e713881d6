"""
Optional LLM enrichment.

Sends the rubric and metrics (plus a truncated copy of the HTML) to an
OpenAI-compatible chat completion endpoint with a tool schema hint, and
parses whatever comes back on a best-effort basis. Never raises: a missing
key yields a "skipped" marker and any failure yields a "failed" marker.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .config import AuditConfig
from .models import Enrichment, EnrichmentStatus

logger = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
TRUNCATION_MARKER = "\n\n...[TRUNCATED]"

SYSTEM_PROMPT = (
    "You are an expert SEO & local GEO auditor. Produce a concise, prioritized set of "
    "recommendations for a single web page. For each recommendation include priority "
    "(HIGH/MEDIUM/LOW), estimated effort (eg: 5m/30m/2h), impact (Low/Medium/High) and an "
    "optional copy-paste code snippet. Return strict JSON matching the function schema."
)
USER_PROMPT = (
    "Static analysis: {prelim}\n\nPlease prioritize and explain the top 8 actionable fixes "
    "for SEO and GEO readiness. Be concise and provide copy-paste examples where applicable."
)

AUDIT_RESULT_TOOL = {
    "type": "function",
    "function": {
        "name": "ai_audit_result",
        "description": "Return strict JSON for AI audit results for single-page SEO+GEO audit",
        "parameters": {
            "type": "object",
            "properties": {
                "seo_score": {"type": "number"},
                "geo_score": {"type": "number"},
                "ai_score_breakdown": {
                    "type": "object",
                    "additionalProperties": {"type": "number"},
                },
                "ai_missing": {"type": "array", "items": {"type": "string"}},
                "ai_suggestions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "key": {"type": "string"},
                            "priority": {"type": "string"},
                            "advice": {"type": "string"},
                            "example_fix": {"type": "string"},
                            "impact": {"type": "string"},
                            "estimated_effort": {"type": "string"},
                        },
                    },
                },
                "ai_fix_snippets": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
                "notes": {"type": "string"},
            },
        },
    },
}


def truncate_html(html: str, limit: int) -> str:
    if len(html) > limit:
        return html[:limit] + TRUNCATION_MARKER
    return html


def build_request(config: AuditConfig, context: Dict[str, Any], html: str) -> Dict[str, Any]:
    prelim = json.dumps(context, indent=2)
    snippet = truncate_html(html or "", config.enrichment_html_limit)
    return {
        "model": config.enrichment_model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT.format(prelim=prelim)},
            {
                "role": "user",
                "content": f"Prelim JSON summary:\n{prelim}\n\nHTML snippet (truncated):\n{snippet}",
            },
        ],
        "tools": [AUDIT_RESULT_TOOL],
        "tool_choice": {"type": "function", "function": {"name": "ai_audit_result"}},
        "temperature": 0.0,
        "max_tokens": 1200,
    }


def _loads_object(text: str) -> Dict[str, Any]:
    value = json.loads(text)
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value


def parse_completion(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Pull the structured result out of a chat completion body.

    Tries tool-call arguments, then legacy function_call arguments, then the
    outermost {...} span of the message text. Anything unparseable comes
    back as {"raw": ..., "parse_error": ...}.
    """
    choices = data.get("choices") or []
    first = choices[0] if choices and isinstance(choices[0], dict) else {}
    message = first.get("message") or {}

    arguments = None
    tool_calls = message.get("tool_calls") or []
    if tool_calls:
        arguments = ((tool_calls[0] or {}).get("function") or {}).get("arguments")
    if not arguments:
        arguments = (message.get("function_call") or {}).get("arguments")
    if arguments:
        try:
            return _loads_object(arguments)
        except ValueError as e:
            return {"raw": arguments, "parse_error": str(e)}

    content = message.get("content")
    if content:
        start, end = content.find("{"), content.rfind("}")
        if start != -1 and end > start:
            try:
                return _loads_object(content[start:end + 1])
            except ValueError as e:
                return {"raw": content, "parse_error": str(e)}
        return {"raw": content}
    return {"raw": data}


async def enrich(
    config: AuditConfig,
    context: Dict[str, Any],
    html: str = "",
    client: Optional[httpx.AsyncClient] = None,
    url: str = OPENAI_CHAT_URL,
) -> Enrichment:
    """
    Run the enrichment call once.

    Args:
        config: Supplies the API key, model, input cap and timeout.
        context: JSON-safe rubric + metrics summary.
        html: Raw HTML; truncated to config.enrichment_html_limit.
        client: Optional pre-built httpx.AsyncClient (tests inject a mock transport).
        url: Chat completion endpoint.
    """
    if not config.can_enrich:
        return Enrichment(status=EnrichmentStatus.SKIPPED)

    body = build_request(config, context, html)
    headers = {"Authorization": f"Bearer {config.openai_api_key}"}
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.llm_timeout_seconds) as own_client:
                resp = await own_client.post(url, json=body, headers=headers)
        else:
            resp = await client.post(url, json=body, headers=headers)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPStatusError as e:
        message = f"Enrichment API error {e.response.status_code}: {e.response.text[:500]}"
        logger.error(message)
        return Enrichment(status=EnrichmentStatus.FAILED, error=message)
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Enrichment call failed: {e}")
        return Enrichment(status=EnrichmentStatus.FAILED, error=str(e))

    if not isinstance(data, dict):
        return Enrichment(status=EnrichmentStatus.FAILED, error="Unexpected response body")
    return Enrichment(status=EnrichmentStatus.OK, payload=parse_completion(data))
