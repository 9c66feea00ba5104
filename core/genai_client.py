# core/genai_client.py

import base64
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from google import genai
from google.genai import types
from langchain_core.messages import BaseMessage

from .config import settings
from .conversation import turn_role
from .models import GroundingReference, LocationData, MapSource, WebSource
from .prompt_builder import BuiltPrompt

logger = logging.getLogger(__name__)


@dataclass
class ModelReply:
    """Raw text from the model plus any search citations."""
    text: str = ""
    sources: List[GroundingReference] = field(default_factory=list)


def _to_part(part) -> types.Part:
    if isinstance(part, str):
        return types.Part.from_text(text=part)
    if part.get("type") == "media":
        return types.Part.from_bytes(data=base64.b64decode(part["data"]), mime_type=part["mime_type"])
    return types.Part.from_text(text=part.get("text", ""))


def to_contents(messages: List[BaseMessage]) -> List[types.Content]:
    """Converts langchain turns to Gemini contents, keeping their order."""
    contents = []
    for message in messages:
        parts = message.content if isinstance(message.content, list) else [message.content]
        contents.append(types.Content(role=turn_role(message), parts=[_to_part(p) for p in parts]))
    return contents


def build_config(prompt: BuiltPrompt, location: Optional[LocationData] = None) -> types.GenerateContentConfig:
    """Structured-output schema and search tools follow the registry entry for the capability."""
    spec = prompt.spec
    config = {"system_instruction": prompt.system_instruction}
    if spec.is_structured:
        config["response_mime_type"] = "application/json"
        config["response_schema"] = spec.response_shape
    if spec.allow_external_search:
        tools = [types.Tool(google_search=types.GoogleSearch())]
        if spec.use_maps:
            tools.append(types.Tool(google_maps=types.GoogleMaps()))
            if location is not None and location.is_known:
                config["tool_config"] = types.ToolConfig(
                    retrieval_config=types.RetrievalConfig(
                        lat_lng=types.LatLng(latitude=location.latitude, longitude=location.longitude)
                    )
                )
        config["tools"] = tools
    return types.GenerateContentConfig(**config)


def _review_snippets(maps_chunk) -> List[str]:
    place_sources = getattr(maps_chunk, "place_answer_sources", None) or []
    if not isinstance(place_sources, list):
        place_sources = [place_sources]
    snippets = []
    for place_source in place_sources:
        for review in getattr(place_source, "review_snippets", None) or []:
            text = getattr(review, "review", None) or getattr(review, "snippet", None)
            if text:
                snippets.append(text)
    return snippets


def extract_sources(response) -> List[GroundingReference]:
    """Pulls web and map citations out of the first candidate's grounding metadata."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        if getattr(chunk, "web", None) is not None:
            sources.append(GroundingReference(web=WebSource(uri=chunk.web.uri, title=chunk.web.title)))
        elif getattr(chunk, "maps", None) is not None:
            snippets = _review_snippets(chunk.maps)
            sources.append(GroundingReference(
                maps=MapSource(uri=chunk.maps.uri, title=chunk.maps.title, review_snippets=snippets)
            ))
    return sources


class GeminiClient:
    """
    Sends one built prompt to Gemini. Errors from google-genai (APIError with `.code`)
    are left to propagate so the executor can classify them.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Optional[genai.Client] = None):
        self.model = model or settings.gemini_model
        self.client = client or genai.Client(api_key=api_key or settings.google_api_key)
        logger.info(f"---GEMINI CLIENT: Initialized for model {self.model}---")

    async def generate(self, prompt: BuiltPrompt, location: Optional[LocationData] = None) -> ModelReply:
        logger.info(f"---GEMINI CLIENT: Calling {self.model} for {prompt.capability.value}---")
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=to_contents(prompt.messages),
            config=build_config(prompt, location),
        )
        return ModelReply(text=response.text or "", sources=extract_sources(response))
