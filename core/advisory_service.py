# core/advisory_service.py

import asyncio
import logging
from typing import Callable, Optional

from tools.weather_api import ERROR_PREFIX, get_weather_forecast
from .config import settings
from .conversation import ConversationSession, model_turn
from .decoder import decode_structured, decode_text
from .errors import AdvisoryError, AdvisoryRequestError, MissingContextError, ServiceBusyError
from .executor import error_status, execute, is_retryable
from .genai_client import GeminiClient, ModelReply
from .models import (
    AdvisoryRequest,
    AdvisoryResponse,
    Attachment,
    ChatExchange,
    ChatInput,
    CropDiagnosisInput,
    CropPlanInput,
    IrrigationAdviceInput,
    LocationData,
    MarketAnalysisInput,
    SoilAnalysisInput,
    SupplierSearchInput,
    WeatherTipInput,
)
from .prompt_builder import BuiltPrompt, build_prompt

logger = logging.getLogger(__name__)


def fetch_forecast(latitude: float, longitude: float) -> Optional[str]:
    """Forecast text for the prompt, or None when Open-Meteo could not be used."""
    forecast = get_weather_forecast.invoke({"latitude": latitude, "longitude": longitude})
    if not forecast or forecast.startswith(ERROR_PREFIX):
        return None
    return forecast


def _require_location(location: Optional[LocationData], purpose: str) -> LocationData:
    if location is None or not location.is_known:
        raise MissingContextError(f"Location is required to {purpose}. Please enable location access.")
    return location


class AdvisoryService:
    """
    The single entry point the UI calls. One coroutine per advisory capability;
    each validates its context, builds the prompt, runs the model call with
    retries and decodes the reply into a typed result.
    """

    def __init__(
        self,
        client=None,
        max_retries: Optional[int] = None,
        base_delay_ms: Optional[float] = None,
        forecast_fetcher: Optional[Callable[[float, float], Optional[str]]] = None,
    ):
        self.client = client or GeminiClient()
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.base_delay_ms = settings.retry_base_delay_ms if base_delay_ms is None else base_delay_ms
        self.forecast_fetcher = forecast_fetcher or fetch_forecast

    # --- PIPELINE ---

    async def _call(self, prompt: BuiltPrompt, location: Optional[LocationData]) -> ModelReply:
        try:
            return await execute(
                lambda: self.client.generate(prompt, location),
                max_retries=self.max_retries,
                base_delay_ms=self.base_delay_ms,
            )
        except AdvisoryError:
            raise
        except Exception as e:
            status = error_status(e)
            logger.error(f"---ADVISORY SERVICE: {prompt.capability.value} failed: {type(e).__name__} - {e}---")
            if is_retryable(e):
                raise ServiceBusyError(status=status) from e
            raise AdvisoryRequestError(f"Advisory request failed: {e}", status=status) from e

    async def _advise(self, request: AdvisoryRequest) -> AdvisoryResponse:
        prompt = build_prompt(request)
        reply = await self._call(prompt, request.location)
        spec = prompt.spec
        if spec.is_structured:
            result = decode_structured(reply.text, spec.response_shape)
        else:
            result = decode_text(reply.text, spec.fallback_text)
        return AdvisoryResponse(capability=request.capability, result=result, sources=reply.sources)

    def _request(self, payload, location: Optional[LocationData], language: Optional[str]) -> AdvisoryRequest:
        return AdvisoryRequest(
            payload=payload,
            locale=language or settings.default_language,
            location=location,
        )

    # --- CAPABILITIES ---

    async def analyze_soil(
        self,
        soil: SoilAnalysisInput,
        location: Optional[LocationData] = None,
        language: Optional[str] = None,
    ) -> AdvisoryResponse:
        """Soil health report. Works without a location; an attached photo adds visual checks."""
        logger.info("---ADVISORY SERVICE: SOIL ANALYSIS---")
        return await self._advise(self._request(soil, location, language))

    async def find_suppliers(
        self,
        query: str,
        location: Optional[LocationData],
        organic_only: bool = False,
        language: Optional[str] = None,
    ) -> AdvisoryResponse:
        logger.info("---ADVISORY SERVICE: SUPPLIER SEARCH---")
        if not query.strip():
            raise MissingContextError("Please describe what you are looking for.")
        _require_location(location, "find suppliers near you")
        payload = SupplierSearchInput(query=query, organic_only=organic_only)
        return await self._advise(self._request(payload, location, language))

    async def converse(
        self,
        session: ConversationSession,
        message: str,
        location: Optional[LocationData] = None,
        language: Optional[str] = None,
        farmer_name: Optional[str] = None,
        image: Optional[Attachment] = None,
    ) -> ChatExchange:
        """
        Sends the history plus the new message (newest last) and returns the reply
        with a new session holding both turns. `session` itself is left untouched.
        """
        logger.info("---ADVISORY SERVICE: CHAT---")
        if not message.strip():
            raise MissingContextError("Please type a message.")
        payload = ChatInput(message=message, history=session, farmer_name=farmer_name, image=image)
        prompt = build_prompt(self._request(payload, location, language))
        reply = await self._call(prompt, location)
        text = decode_text(reply.text, prompt.spec.fallback_text)
        updated = session.append(prompt.user_turn).append(model_turn(text))
        return ChatExchange(reply=text, sources=reply.sources, session=updated)

    async def diagnose_crop(
        self,
        symptoms: str = "",
        image: Optional[Attachment] = None,
        language: Optional[str] = None,
    ) -> AdvisoryResponse:
        logger.info("---ADVISORY SERVICE: CROP DIAGNOSIS---")
        if image is None and not symptoms.strip():
            raise MissingContextError("Please upload a photo or describe the symptoms.")
        payload = CropDiagnosisInput(symptoms=symptoms, image=image)
        return await self._advise(self._request(payload, None, language))

    async def get_weather_tip(
        self,
        location: Optional[LocationData],
        language: Optional[str] = None,
    ) -> AdvisoryResponse:
        """Today's weather summary, one farming tip and an optional alert."""
        logger.info("---ADVISORY SERVICE: WEATHER TIP---")
        location = _require_location(location, "get a weather forecast")
        forecast = await asyncio.to_thread(self.forecast_fetcher, location.latitude, location.longitude)
        if forecast is None:
            logger.warning("---ADVISORY SERVICE: Forecast unavailable, relying on search---")
        payload = WeatherTipInput(forecast=forecast)
        return await self._advise(self._request(payload, location, language))

    async def get_market_analysis(
        self,
        query: str,
        location: Optional[LocationData],
        category: str = "All",
        period: str = "Current",
        language: Optional[str] = None,
    ) -> AdvisoryResponse:
        logger.info("---ADVISORY SERVICE: MARKET ANALYSIS---")
        _require_location(location, "find local market prices")
        payload = MarketAnalysisInput(query=query, category=category, period=period)
        return await self._advise(self._request(payload, location, language))

    async def plan_crop(
        self,
        plan: CropPlanInput,
        location: Optional[LocationData],
        language: Optional[str] = None,
    ) -> AdvisoryResponse:
        logger.info(f"---ADVISORY SERVICE: CROP PLAN ({plan.mode})---")
        _require_location(location, "analyze climate data")
        if plan.mode in ("companion", "calendar") and not plan.crop_input.strip():
            raise MissingContextError("Please enter a crop name for this feature.")
        return await self._advise(self._request(plan, location, language))

    async def get_irrigation_advice(
        self,
        irrigation: IrrigationAdviceInput,
        location: Optional[LocationData],
        language: Optional[str] = None,
    ) -> AdvisoryResponse:
        logger.info("---ADVISORY SERVICE: IRRIGATION ADVICE---")
        _require_location(location, "plan irrigation for your weather")
        if not irrigation.crop.strip():
            raise MissingContextError("Please select a crop.")
        return await self._advise(self._request(irrigation, location, language))
