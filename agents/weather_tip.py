# agents/weather_tip.py

from typing import Optional
from core.models import LocationData, WeatherTipInput

TASK_TEMPLATE = """You are a world-class agronomist providing hyper-precise weather advice.
Location: {location}
Raw 7-Day Weather Forecast: {forecast}

1. Summarise today's temperature and condition.
2. Give ONE actionable farming tip for today grounded in the forecast.
3. Raise an alert only for weather that threatens crops (frost, heavy rain, heatwave, storm).

Return a JSON object with:
- temperature: string, e.g. "28°C"
- condition: short string
- farming_tip: string
- alert: {{ type, message, severity (High | Medium | Low) }}, use type "None" when there is no alert"""


def task_variables(payload: WeatherTipInput, location: Optional[LocationData]) -> dict:
    return {
        "location": location.describe() if location else "Unknown",
        "forecast": payload.forecast or "Not available. Use search for the current local weather.",
    }
