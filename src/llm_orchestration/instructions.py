"""
Instruction suggestion.

Given the systems a user has connected, ask the model for a handful of
concrete, implementable workflow instructions. The call runs through the
retry engine: the reply must be a non-empty array that still holds at
least one usable line after sanitation.
"""

import json
from typing import Iterable, Optional

import structlog

from llm_orchestration.config import Settings, settings as default_settings
from llm_orchestration.llm.base_client import LanguageModel
from llm_orchestration.models.enums import MessageRole
from llm_orchestration.models.llm_models import Message, SystemDefinition
from llm_orchestration.retry.engine import RetryEngine
from llm_orchestration.retry.sanitizer import sanitized_string_list
from llm_orchestration.retry.validators import compose_validators, non_empty_array

logger = structlog.get_logger(__name__)


INSTRUCTIONS_SCHEMA = {
    "type": "array",
    "items": {"type": "string"},
}

INSTRUCTIONS_SYSTEM_PROMPT = """You are an expert at suggesting specific, implementable workflows combining different APIs and systems. Given a set of systems, suggest natural language instructions that can be directly built into workflows, with a focus on data retrieval and practical integrations.

For each system, provide 1-2 specific retrieval-focused examples. Then, suggest 3-4 detailed integration workflows that combine multiple systems. Each suggestion should be specific enough to implement directly, including key data points or criteria to use.

**Important:** Return ONLY a JSON array of strings. Do NOT include any section headers, markdown, bullet points, numbers, or explanations. Each string in the array should be a single, specific, implementable instruction.

**Example output:**
[
  "Retrieve all Stripe customers who have spent over $1000 in the last 30 days.",
  "Find MongoDB documents where subscription_status is 'past_due'.",
  "When a customer's total spend in Stripe exceeds $5000, fetch their order history from MongoDB and update their loyalty tier."
]

Remember: the output MUST be a JSON array of strings with no extra formatting or explanation. Keep each instruction concise, with a maximum of 4 options total (not per system).
"""


def build_instruction_messages(systems: Iterable[SystemDefinition]) -> list[Message]:
    """Build the system + user prompt listing the systems as JSON."""
    systems_json = json.dumps(
        [system.model_dump(mode="json") for system in systems],
        indent=2,
        ensure_ascii=False,
    )
    return [
        Message(role=MessageRole.SYSTEM, content=INSTRUCTIONS_SYSTEM_PROMPT),
        Message(role=MessageRole.USER, content=f"Systems: {systems_json}"),
    ]


async def generate_instructions(
    systems: Iterable[SystemDefinition],
    model: LanguageModel,
    settings: Optional[Settings] = None,
    org_id: str = "",
) -> list[str]:
    """
    Suggest workflow instructions for a set of systems.

    Args:
        systems: Connected systems to build suggestions for
        model: Provider (normally the cached model from create_language_model)
        settings: Retry settings (default: process settings)
        org_id: Organization id for log context

    Returns:
        Sanitized, non-empty list of instruction strings

    Raises:
        RetryExhausted: No usable suggestion after INSTRUCTION_MAX_ATTEMPTS
    """
    settings = settings or default_settings
    engine = RetryEngine.from_settings(model, settings, max_attempts=settings.INSTRUCTION_MAX_ATTEMPTS)
    log = logger.bind(org_id=org_id)

    log.info("Generating instructions", max_attempts=engine.max_attempts)
    instructions, metadata = await engine.generate_object(
        build_instruction_messages(systems),
        INSTRUCTIONS_SCHEMA,
        validator=compose_validators(non_empty_array, sanitized_string_list),
    )
    log.info(
        "Instructions generated",
        count=len(instructions),
        total_attempts=metadata.total_attempts,
    )
    return instructions
