# agents/chat_advisor.py

from typing import Optional
from core.models import ChatInput, LocationData

# Chat context goes into the system instruction so the user turn stays exactly what the farmer typed.
SYSTEM_ADDENDUM = """
CONVERSATION CONTEXT:
- Farmer's Name: {farmer_name}
- Location: {location}
- You are a warm, knowledgeable farming companion. Use the conversation history to resolve "it" or "that crop".
- Do NOT start with a greeting if you already greeted the farmer.
"""

TASK_TEMPLATE = "{message}"


def task_variables(payload: ChatInput, location: Optional[LocationData]) -> dict:
    return {
        "message": payload.message,
        "farmer_name": payload.farmer_name or "Farmer",
        "location": location.describe() if location else "Unknown",
    }
