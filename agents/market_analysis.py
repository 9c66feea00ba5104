# agents/market_analysis.py

from typing import Optional
from core.models import LocationData, MarketAnalysisInput

ORGANIC_PREMIUM_BLOCK = """
**Organic Premium:** The query concerns organic produce. Add an "Organic Premium" section that compares
organic vs conventional prices for the same goods, states the typical premium as a percentage, and
says whether the premium covers certification and transition costs.
"""

TASK_TEMPLATE = """You are a smart market analyst.
Provide a market analysis for: "{query}".
Category: {category}. Period: {period}.
Market region: {location}.

1. Infer the largest wholesale market (Mandi) or APMC for the region.
2. Only report prices that are stated by a reliable, recent source. Do NOT guess.
3. Describe the price trend and give practical selling advice.
{organic_section}
Return a JSON object with:
- analysis: Markdown summary
- prices: array of {{ label: string, price: number }} suitable for a price chart (label is a crop, market or date)"""


def mentions_organic(query: str) -> bool:
    return "organic" in query.lower()


def task_variables(payload: MarketAnalysisInput, location: Optional[LocationData]) -> dict:
    return {
        "query": payload.query or "major local crops",
        "category": payload.category,
        "period": payload.period,
        "location": location.describe() if location else "Unknown",
        "organic_section": ORGANIC_PREMIUM_BLOCK if mentions_organic(payload.query) else "",
    }
