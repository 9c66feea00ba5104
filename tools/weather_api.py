# tools/weather_api.py
import logging
import requests
from langchain_core.tools import tool
from datetime import datetime

logger = logging.getLogger(__name__)

API_URL = "https://api.open-meteo.com/v1/forecast"

# Every failure message returned by the tool starts with this.
ERROR_PREFIX = "Error"

# WMO weather interpretation codes used by Open-Meteo
WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Rime fog",
    51: "Light drizzle",
    53: "Drizzle",
    55: "Dense drizzle",
    61: "Light rain",
    63: "Rain",
    65: "Heavy rain",
    71: "Light snow",
    73: "Snow",
    75: "Heavy snow",
    80: "Rain showers",
    81: "Heavy rain showers",
    82: "Violent rain showers",
    95: "Thunderstorm",
    96: "Thunderstorm with hail",
    99: "Severe thunderstorm with hail",
}


def describe_weather_code(code) -> str:
    return WEATHER_CODES.get(code, "Unknown conditions")


@tool
def get_weather_forecast(latitude: float, longitude: float, forecast_days: int = 7) -> str:
    """
    Fetches the daily forecast for a latitude/longitude from Open-Meteo.
    Returns one line per day with condition, temperature range, precipitation
    and wind, or an error string when the service cannot be reached.
    """
    logger.info(f"---TOOL: Fetching weather for Lat={latitude}, Lon={longitude}---")
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "daily": "weathercode,temperature_2m_max,temperature_2m_min,precipitation_sum,wind_speed_10m_max",
        "timezone": "auto",
        "forecast_days": forecast_days,
    }

    try:
        response = requests.get(API_URL, params=params, timeout=10)
        response.raise_for_status()
        daily = response.json()["daily"]

        lines = [f"{len(daily['time'])}-Day Weather Forecast:"]
        for i, day in enumerate(daily["time"]):
            date = datetime.strptime(day, "%Y-%m-%d").strftime("%A, %b %d")
            lines.append(
                f"- {date}: {describe_weather_code(daily['weathercode'][i])}, "
                f"Temp {daily['temperature_2m_min'][i]}°C to {daily['temperature_2m_max'][i]}°C, "
                f"Precipitation: {daily['precipitation_sum'][i]}mm, "
                f"Wind: up to {daily['wind_speed_10m_max'][i]} km/h"
            )
        return "\n".join(lines)
    except requests.exceptions.RequestException as e:
        logger.warning(f"---TOOL: Weather request failed: {e}---")
        return f"{ERROR_PREFIX} fetching weather data: {e}"
    except (KeyError, IndexError, ValueError) as e:
        logger.warning(f"---TOOL: Weather response malformed: {e}---")
        return f"{ERROR_PREFIX} processing weather data: {e}"
