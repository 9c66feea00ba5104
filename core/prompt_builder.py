# core/prompt_builder.py

from dataclasses import dataclass
from typing import List
from langchain_core.messages import BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate

from .conversation import user_turn
from .errors import ConfigurationError
from .models import AdvisoryCapability, AdvisoryRequest, ChatInput
from .schema_registry import CapabilitySpec, describe

LANGUAGES = {
    "en": "English",
    "hi": "Hindi",
    "pa": "Punjabi",
    "ta": "Tamil",
    "te": "Telugu",
    "bn": "Bengali",
    "es": "Spanish",
    "fr": "French",
}

SYSTEM_INSTRUCTION = """You are AgriWise, an elite senior agricultural agronomist and Regenerative Agriculture Champion.
User Language: {language}.

CORE PHILOSOPHY:
- ALWAYS prioritize organic, biological, and regenerative farming methods.
- ALWAYS explain the differences between chemical (synthetic) fertilizers/pesticides and organic alternatives.
- Warn against the "chemical treadmill" and the degradation of soil health caused by synthetic over-reliance.

OPERATIONAL GUIDELINES:
- Respond in {language}.
- Use localized scientific terminology.
- Use Markdown for structured reports.
"""


def language_name(code: str) -> str:
    return LANGUAGES.get((code or "").lower(), "English")


@dataclass(frozen=True)
class BuiltPrompt:
    """The exact request content for one remote call."""
    capability: AdvisoryCapability
    spec: CapabilitySpec
    system_instruction: str
    # Conversation history first, the new user turn last.
    messages: List[BaseMessage]

    @property
    def user_turn(self) -> HumanMessage:
        return self.messages[-1]


def build_prompt(request: AdvisoryRequest) -> BuiltPrompt:
    """
    Renders the system instruction and the capability's task text for a request.
    Pure function: the same request always yields the same parts.
    """
    spec = describe(request.capability)
    attachment = request.attachment
    if attachment is not None and not spec.requires_image_support:
        raise ConfigurationError(f"{spec.capability.value} does not accept image attachments.")

    variables = spec.task_variables(request.payload, request.location)
    template = ChatPromptTemplate.from_messages([
        ("system", SYSTEM_INSTRUCTION + spec.system_addendum),
        ("human", spec.task_template),
    ])
    system_message, human_message = template.format_messages(
        language=language_name(request.locale),
        **variables,
    )

    history: List[BaseMessage] = []
    if isinstance(request.payload, ChatInput):
        history = request.payload.history.as_messages()

    return BuiltPrompt(
        capability=spec.capability,
        spec=spec,
        system_instruction=system_message.content,
        messages=history + [user_turn(human_message.content, attachment)],
    )
