# core/models.py

import base64
import re
import time
from enum import Enum
from typing import Annotated, Generic, List, Literal, Optional, TypeVar, Union
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .conversation import ConversationSession


def new_record_id() -> str:
    """Creation-time id; later records get larger ids so they sort by recency."""
    return str(time.time_ns())


# --- ADVISORY CAPABILITIES ---

class AdvisoryCapability(str, Enum):
    SOIL_ANALYSIS = "SoilAnalysis"
    SUPPLIER_SEARCH = "SupplierSearch"
    CHAT = "Chat"
    CROP_DIAGNOSIS = "CropDiagnosis"
    WEATHER_TIP = "WeatherTip"
    MARKET_ANALYSIS = "MarketAnalysis"
    CROP_PLAN = "CropPlan"
    IRRIGATION_ADVICE = "IrrigationAdvice"


class LocationData(BaseModel):
    """Coordinates from the geolocation provider, or an error marker when it was denied."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    error: Optional[str] = None

    @property
    def is_known(self) -> bool:
        return self.error is None and self.latitude is not None and self.longitude is not None

    def describe(self) -> str:
        return f"{self.latitude}, {self.longitude}" if self.is_known else "Unknown"


_DATA_URL = re.compile(r"^data:(.*?);base64,(.*)$", re.DOTALL)


class Attachment(BaseModel):
    """Inline binary part (e.g. a photo) sent alongside the prompt."""
    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: str = Field(description="Base64 encoded bytes.")

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str = "image/jpeg") -> "Attachment":
        return cls(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))

    @classmethod
    def from_data_url(cls, url: str) -> "Attachment":
        match = _DATA_URL.match(url)
        if not match:
            raise ValueError("Not a base64 data URL.")
        return cls(mime_type=match.group(1), data=match.group(2))

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


# --- CAPABILITY PAYLOADS ---

class SoilAnalysisInput(BaseModel):
    capability: Literal[AdvisoryCapability.SOIL_ANALYSIS] = AdvisoryCapability.SOIL_ANALYSIS
    ph: float
    organic_matter: Optional[float] = None
    soil_type: str = "Loam"
    crop: Optional[str] = None
    image: Optional[Attachment] = None


class SupplierSearchInput(BaseModel):
    capability: Literal[AdvisoryCapability.SUPPLIER_SEARCH] = AdvisoryCapability.SUPPLIER_SEARCH
    query: str
    organic_only: bool = False


class ChatInput(BaseModel):
    capability: Literal[AdvisoryCapability.CHAT] = AdvisoryCapability.CHAT
    message: str
    history: ConversationSession = Field(default_factory=ConversationSession)
    farmer_name: Optional[str] = None
    image: Optional[Attachment] = None


class CropDiagnosisInput(BaseModel):
    capability: Literal[AdvisoryCapability.CROP_DIAGNOSIS] = AdvisoryCapability.CROP_DIAGNOSIS
    symptoms: str = ""
    image: Optional[Attachment] = None


class WeatherTipInput(BaseModel):
    capability: Literal[AdvisoryCapability.WEATHER_TIP] = AdvisoryCapability.WEATHER_TIP
    forecast: Optional[str] = None


class MarketAnalysisInput(BaseModel):
    capability: Literal[AdvisoryCapability.MARKET_ANALYSIS] = AdvisoryCapability.MARKET_ANALYSIS
    query: str = ""
    category: str = "All"
    period: str = "Current"


CropPlanMode = Literal["recommend", "rotation", "companion", "calendar"]


class CropPlanInput(BaseModel):
    capability: Literal[AdvisoryCapability.CROP_PLAN] = AdvisoryCapability.CROP_PLAN
    mode: CropPlanMode = "recommend"
    soil_type: str = "Loam"
    filters: List[str] = []
    crop_input: str = ""


class IrrigationAdviceInput(BaseModel):
    capability: Literal[AdvisoryCapability.IRRIGATION_ADVICE] = AdvisoryCapability.IRRIGATION_ADVICE
    crop: str
    stage: str = "Vegetative"
    moisture: int = Field(default=50, ge=0, le=100)


AdvisoryPayload = Annotated[
    Union[
        SoilAnalysisInput,
        SupplierSearchInput,
        ChatInput,
        CropDiagnosisInput,
        WeatherTipInput,
        MarketAnalysisInput,
        CropPlanInput,
        IrrigationAdviceInput,
    ],
    Field(discriminator="capability"),
]


class AdvisoryRequest(BaseModel):
    """One advisory call. Built fresh per call and never persisted."""
    model_config = ConfigDict(frozen=True)

    payload: AdvisoryPayload
    locale: str = "en"
    location: Optional[LocationData] = None

    @property
    def capability(self) -> AdvisoryCapability:
        return self.payload.capability

    @property
    def attachment(self) -> Optional[Attachment]:
        return getattr(self.payload, "image", None)


# --- GROUNDING ---

class WebSource(BaseModel):
    uri: Optional[str] = None
    title: Optional[str] = None


class MapSource(BaseModel):
    uri: Optional[str] = None
    title: Optional[str] = None
    review_snippets: List[str] = []


class GroundingReference(BaseModel):
    """Citation attached by the model when it used search. Passed through as received."""
    web: Optional[WebSource] = None
    maps: Optional[MapSource] = None


# --- DECODED RESULTS ---
# Every field is optional: None means the model left it out.

class AdvisoryResult(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TextureConfidence(AdvisoryResult):
    type: Optional[str] = None
    score: Optional[float] = None


class SoilAnalysisResult(AdvisoryResult):
    analysis: Optional[str] = Field(default=None, description="Markdown report.")
    health_score: Optional[float] = Field(default=None, description="Overall soil health, 0-100.")
    typical_n: Optional[str] = None
    typical_p: Optional[str] = None
    typical_k: Optional[str] = None
    normalized_n: Optional[float] = Field(default=None, description="Nitrogen level, 0-100.")
    normalized_p: Optional[float] = Field(default=None, description="Phosphorus level, 0-100.")
    normalized_k: Optional[float] = Field(default=None, description="Potassium level, 0-100.")
    companion_advice: Optional[str] = None
    visual_indicators: Optional[List[str]] = None
    texture_confidence: Optional[TextureConfidence] = None


class PricePoint(AdvisoryResult):
    label: Optional[str] = None
    price: Optional[float] = None


class MarketAnalysisResult(AdvisoryResult):
    analysis: Optional[str] = None
    prices: Optional[List[PricePoint]] = None


class CropRecommendation(AdvisoryResult):
    name: Optional[str] = None
    match_score: Optional[float] = None
    key_benefit: Optional[str] = None
    climate_fit: Optional[str] = None
    maturity_days: Optional[int] = None
    harvest_window: Optional[str] = None


class RotationStep(AdvisoryResult):
    period: Optional[str] = None
    crop: Optional[str] = None
    reason: Optional[str] = None
    pest_break: Optional[bool] = None


class CropPlanResult(AdvisoryResult):
    analysis: Optional[str] = None
    recommendations: Optional[List[CropRecommendation]] = None
    rotation_plan: Optional[List[RotationStep]] = None


class Supplier(AdvisoryResult):
    name: Optional[str] = None
    type: Optional[str] = None
    distance_km: Optional[float] = None
    description: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_organic(self) -> bool:
        text = f"{self.description or ''} {self.type or ''}".lower()
        return "organic" in text


class SupplierSearchResult(AdvisoryResult):
    suppliers: Optional[List[Supplier]] = None


class WeatherAlert(AdvisoryResult):
    type: Optional[str] = None
    message: Optional[str] = None
    severity: Optional[Literal["High", "Medium", "Low"]] = None


class WeatherTipResult(AdvisoryResult):
    temperature: Optional[str] = None
    condition: Optional[str] = None
    farming_tip: Optional[str] = None
    alert: Optional[WeatherAlert] = None


T = TypeVar("T")


class AdvisoryResponse(BaseModel, Generic[T]):
    """What the facade hands back: the decoded result plus any search citations."""
    capability: AdvisoryCapability
    result: T
    sources: List[GroundingReference] = []


class ChatExchange(BaseModel):
    reply: str
    sources: List[GroundingReference] = []
    session: ConversationSession


# --- STORED RECORDS ---

class SoilLog(BaseModel):
    """A soil analysis the farmer chose to keep."""
    id: str = Field(default_factory=new_record_id)
    date_iso: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    crop: Optional[str] = None
    analysis: Optional[str] = None
    health_score: Optional[float] = None
    normalized_n: Optional[float] = None
    normalized_p: Optional[float] = None
    normalized_k: Optional[float] = None
    ph: Optional[float] = None
    organic_matter: Optional[float] = None

    @classmethod
    def from_analysis(cls, result: SoilAnalysisResult, soil: SoilAnalysisInput) -> "SoilLog":
        return cls(
            crop=soil.crop,
            analysis=result.analysis,
            health_score=result.health_score,
            normalized_n=result.normalized_n,
            normalized_p=result.normalized_p,
            normalized_k=result.normalized_k,
            ph=soil.ph,
            organic_matter=soil.organic_matter,
        )


class Task(BaseModel):
    id: str = Field(default_factory=new_record_id)
    title: str
    priority: Literal["High", "Medium", "Low"] = "Medium"
    due_date: str = Field(default_factory=lambda: datetime.now(timezone.utc).date().isoformat())
    completed: bool = False
    created_at: int = Field(default_factory=lambda: time.time_ns() // 1_000_000)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Task title cannot be empty.")
        return value


PROFILE_KEY = "user_profile"


class ProfileRecord(BaseModel):
    """The single farmer profile, keyed by a fixed string rather than a generated id."""
    key: str = PROFILE_KEY
    name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = Field(default=None, description="Base64 image string.")
    preferred_soil: Optional[str] = None
    preferred_filters: List[str] = []
    notifications: dict = Field(default_factory=lambda: {"weather": True, "market": True, "pests": True})


class IrrigationLog(BaseModel):
    id: str = Field(default_factory=new_record_id)
    date: str = Field(default_factory=lambda: datetime.now(timezone.utc).date().isoformat())
    amount: str
    crop: str
    weather_condition: Optional[str] = "Unknown"
