# agents/irrigation_advice.py

from typing import Optional
from core.models import IrrigationAdviceInput, LocationData

TASK_TEMPLATE = """Provide an irrigation plan.
Crop: {crop}
Growth Stage: {stage}
Current Soil Moisture: {moisture}%
Location: {location}

**Your Instructions:**
1.  Check the local weather outlook before advising; skip irrigation if rain is expected.
2.  Give the timing (time of day, interval) and amount of water for this growth stage.
3.  Recommend an efficient method (drip, furrow, sprinkler) for this crop.
4.  Add water-saving regenerative practices (mulching, cover crops, organic matter).

Answer in Markdown."""


def task_variables(payload: IrrigationAdviceInput, location: Optional[LocationData]) -> dict:
    return {
        "crop": payload.crop,
        "stage": payload.stage,
        "moisture": payload.moisture,
        "location": location.describe() if location else "Unknown",
    }
