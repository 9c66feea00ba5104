# agents/crop_plan.py

from typing import Optional
from core.models import CropPlanInput, LocationData

PEST_RESISTANT_FILTER = "Pest Resistant"

PEST_RESISTANCE_BLOCK = """
**Pest Resistance:** The farmer selected the "Pest Resistant" filter. Only suggest varieties with documented
resistance to the main pests of this region, name the pests each variety resists, and prefer biological
control (trap crops, beneficial insects) over synthetic pesticides.
"""

MODE_TASKS = {
    "recommend": "Recommend the 5 best crops for this location, soil and season. Fill `recommendations`.",
    "rotation": "Design a 12-month crop rotation plan that restores soil nitrogen and breaks pest cycles. Fill `rotation_plan` and mark pest-break periods.",
    "companion": "Suggest companion plants for {crop} and the plants to keep away from it. Fill `recommendations`.",
    "calendar": "Build a planting and harvest calendar for {crop} at this location. Fill `rotation_plan` with one entry per period.",
}

TASK_TEMPLATE = """Create a crop strategy.
Location: {location}
Soil Type: {soil_type}
Farmer Preferences: {filters}

Task: {mode_task}
{pest_section}
Return a JSON object with:
- analysis: Markdown explanation
- recommendations: array of {{ name, match_score (0-100), key_benefit, climate_fit, maturity_days, harvest_window }}
- rotation_plan: array of {{ period, crop, reason, pest_break (boolean) }}"""


def task_variables(payload: CropPlanInput, location: Optional[LocationData]) -> dict:
    mode_task = MODE_TASKS[payload.mode].format(crop=payload.crop_input.strip() or "the selected crop")
    return {
        "location": location.describe() if location else "Unknown",
        "soil_type": payload.soil_type,
        "filters": ", ".join(payload.filters) if payload.filters else "None",
        "mode_task": mode_task,
        "pest_section": PEST_RESISTANCE_BLOCK if PEST_RESISTANT_FILTER in payload.filters else "",
    }
