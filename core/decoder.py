# core/decoder.py

import json
import logging
from typing import Optional, Type, TypeVar
from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers.json import JsonOutputParser
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_parser = JsonOutputParser()


def parse_json_object(raw: Optional[str]) -> dict:
    """
    Parses a JSON object out of model text. Handles ```json fences with prose
    around them and trailing notes after the object. Anything else becomes {}.
    """
    if not raw or not raw.strip():
        return {}
    try:
        data = _parser.parse(raw)
    except (OutputParserException, json.JSONDecodeError) as e:
        logger.warning(f"---DECODER: Malformed JSON from model, using empty result: {e}---")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"---DECODER: Expected a JSON object, got {type(data).__name__}---")
        return {}
    return data


def decode_structured(raw: Optional[str], shape: Type[M]) -> M:
    """
    Decodes model output into `shape`. Fields that fail validation are dropped
    one at a time so the rest of the response survives.
    """
    data = parse_json_object(raw)
    while True:
        try:
            return shape.model_validate(data)
        except ValidationError as e:
            bad_fields = {err["loc"][0] for err in e.errors() if err["loc"] and err["loc"][0] in data}
            if not bad_fields:
                logger.warning(f"---DECODER: Could not validate {shape.__name__}, using empty result---")
                return shape()
            logger.warning(f"---DECODER: Dropping invalid fields {sorted(map(str, bad_fields))}---")
            data = {k: v for k, v in data.items() if k not in bad_fields}


def decode_text(raw: Optional[str], fallback: str) -> str:
    """Free-text capabilities: empty output becomes the fallback sentence."""
    if raw is None or not raw.strip():
        return fallback
    return raw
