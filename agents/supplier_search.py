# agents/supplier_search.py

from typing import Optional
from core.models import LocationData, SupplierSearchInput

TASK_TEMPLATE = """Find agricultural suppliers near {location} for: "{query}".
{organic_line}
Use map and web search. Prefer suppliers of organic inputs (compost, bio-fertilizers, neem products) when relevant.

Return a JSON object with:
- suppliers: array of {{ name, type, distance_km (number), description, url }}"""


def task_variables(payload: SupplierSearchInput, location: Optional[LocationData]) -> dict:
    query = f"Certified organic agricultural suppliers for {payload.query}" if payload.organic_only else payload.query
    return {
        "location": location.describe() if location else "Unknown",
        "query": query,
        "organic_line": "Only include suppliers with organic certification." if payload.organic_only else "",
    }
