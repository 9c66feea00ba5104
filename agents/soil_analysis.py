# agents/soil_analysis.py

from typing import Optional
from core.models import LocationData, SoilAnalysisInput

# Only injected when the farmer attached a photo of the sample.
VISUAL_INDICATORS_BLOCK = """
An image of the soil sample is attached:
1. Identify visual indicators of nutrient deficiency (e.g. coloration, texture).
2. Estimate organic matter content visually.
3. Determine soil texture with a confidence score.
4. Provide biological recommendations for improvement.
"""

TASK_TEMPLATE = """Analyze this soil health profile.
Location: {location}
Data: pH {ph}, Organic Matter {organic_matter}, Type {soil_type}.{crop_line}
{image_instructions}
Return a JSON object with:
- analysis: Markdown string
- health_score: 0-100
- typical_n/p/k: text descriptions
- normalized_n/p/k: 0-100 values
- companion_advice: companion planting suggestions that improve this soil
- visual_indicators: string array of identified traits
- texture_confidence: {{ type: string, score: number }}"""


def task_variables(payload: SoilAnalysisInput, location: Optional[LocationData]) -> dict:
    organic_matter = "Not specified" if payload.organic_matter is None else f"{payload.organic_matter}%"
    return {
        "location": location.describe() if location else "Unknown",
        "ph": payload.ph,
        "organic_matter": organic_matter,
        "soil_type": payload.soil_type,
        "crop_line": f"\nIntended crop: {payload.crop}." if payload.crop else "",
        "image_instructions": VISUAL_INDICATORS_BLOCK if payload.image else "",
    }
