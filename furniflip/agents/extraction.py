"""Extraction agent: tool-using chat model that names, categorises and prices an item."""

import json
import logging
import re

from pydantic import ValidationError

from ..config import MAX_AGENT_TURNS, STRUCTURED_OUTPUT
from ..errors import AgentError
from ..models.schemas import CandidateListing, ExtractionResult, InventoryFields
from ..prompts.inventory import SYSTEM, inventory_prompt
from ..tools import llm
from ..tools.retriever import RetrievalTool

logger = logging.getLogger(__name__)

# `label: value` up to the next line that starts a new label, or end of text
_FIELD_RE = re.compile(r"(\w+):\s*([\s\S]+?)(?=\n\w+:|\Z)")
_QUOTES_RE = re.compile(r"^[\"']|[\"']$")

_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "inventory_item",
        "strict": True,
        "schema": InventoryFields.model_json_schema(),
    },
}


def extract_fields(text: str) -> dict[str, str]:
    """Parse `label: value` pairs from the agent's free-form answer.

    Values are trimmed, literal ``\\n`` sequences become newlines and one
    surrounding quote character is removed. A label that appears more than
    once keeps its last value.
    """
    fields: dict[str, str] = {}
    for match in _FIELD_RE.finditer(text):
        key, value = match.group(1), match.group(2)
        value = value.strip().replace("\\n", "\n")
        fields[key] = _QUOTES_RE.sub("", value)
    return fields


def parse_structured(text: str) -> ExtractionResult:
    try:
        fields = InventoryFields.model_validate_json(text)
    except ValidationError as e:
        raise AgentError(f"Structured answer did not match schema: {e}") from e
    return ExtractionResult.from_fields(fields.model_dump())


def build_messages(
    image_url: str,
    candidates: list[CandidateListing],
    categories: list[str],
    conditions: list[str],
) -> list[dict]:
    prompt = inventory_prompt(
        [c.title for c in candidates],
        categories,
        conditions,
        [c.price for c in candidates],
    )
    return [
        {"role": "system", "content": SYSTEM},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                llm.image_content_part(image_url, detail="high"),
            ],
        },
    ]


async def _run_tool_call(tool: RetrievalTool, call) -> str:
    if call.function.name != tool.name:
        return json.dumps({"error": f"Tool '{call.function.name}' is not available"})
    try:
        args = json.loads(call.function.arguments or "{}")
    except json.JSONDecodeError:
        args = {}
    query = args.get("query") or ""
    logger.info("Agent → %s(%r)", tool.name, query[:120])
    return await tool.run(query)


async def run_extraction_agent(
    image_url: str,
    candidates: list[CandidateListing],
    categories: list[str],
    conditions: list[str],
    tool: RetrievalTool,
    *,
    structured: bool = STRUCTURED_OUTPUT,
    max_turns: int = MAX_AGENT_TURNS,
) -> ExtractionResult:
    """Let the model look at the photo, query the retrieval tool, and answer.

    Missing fields in the answer are not an error; they come back empty and
    listed in ``ExtractionResult.missing``.

    Raises:
        AgentError: the model never produced a final answer within
            ``max_turns``, or a structured answer failed validation.
    """
    messages = build_messages(image_url, candidates, categories, conditions)
    response_format = _RESPONSE_FORMAT if structured else None

    answer: str | None = None
    for turn in range(max_turns):
        msg = await llm.chat(messages, tools=[tool.spec()], response_format=response_format)

        if not msg.tool_calls:
            answer = msg.content or ""
            logger.info("Agent answered after %d turn(s)", turn + 1)
            break

        messages.append({
            "role": "assistant",
            "content": msg.content or "",
            "tool_calls": [call.model_dump() for call in msg.tool_calls],
        })
        for call in msg.tool_calls:
            result = await _run_tool_call(tool, call)
            messages.append({"role": "tool", "tool_call_id": call.id, "content": result})
    else:
        raise AgentError(f"Agent hit max turns ({max_turns}) without answering")

    if structured:
        result = parse_structured(answer)
    else:
        result = ExtractionResult.from_fields(extract_fields(answer))

    if result.partial:
        logger.warning("Partial extraction for %s, missing %s", image_url, ", ".join(result.missing))
    return result
