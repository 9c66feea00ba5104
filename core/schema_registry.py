# core/schema_registry.py

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Type
from pydantic import BaseModel

from agents import (
    chat_advisor,
    crop_diagnosis,
    crop_plan,
    irrigation_advice,
    market_analysis,
    soil_analysis,
    supplier_search,
    weather_tip,
)
from .errors import ConfigurationError
from .models import (
    AdvisoryCapability,
    CropPlanResult,
    MarketAnalysisResult,
    SoilAnalysisResult,
    SupplierSearchResult,
    WeatherTipResult,
)

UNABLE_TO_ADVISE = "Unable to generate advice."
DIAGNOSIS_FAILED = "Diagnosis failed."


@dataclass(frozen=True)
class CapabilitySpec:
    """Everything the pipeline needs to know about one capability."""
    capability: AdvisoryCapability
    task_template: str
    task_variables: Callable[..., dict]
    # None means the model answers in free Markdown.
    response_shape: Optional[Type[BaseModel]] = None
    allow_external_search: bool = False
    use_maps: bool = False
    requires_image_support: bool = False
    system_addendum: str = ""
    fallback_text: str = UNABLE_TO_ADVISE

    @property
    def is_structured(self) -> bool:
        return self.response_shape is not None


_REGISTRY: Dict[AdvisoryCapability, CapabilitySpec] = {
    AdvisoryCapability.SOIL_ANALYSIS: CapabilitySpec(
        capability=AdvisoryCapability.SOIL_ANALYSIS,
        task_template=soil_analysis.TASK_TEMPLATE,
        task_variables=soil_analysis.task_variables,
        response_shape=SoilAnalysisResult,
        requires_image_support=True,
    ),
    AdvisoryCapability.SUPPLIER_SEARCH: CapabilitySpec(
        capability=AdvisoryCapability.SUPPLIER_SEARCH,
        task_template=supplier_search.TASK_TEMPLATE,
        task_variables=supplier_search.task_variables,
        response_shape=SupplierSearchResult,
        allow_external_search=True,
        use_maps=True,
    ),
    AdvisoryCapability.CHAT: CapabilitySpec(
        capability=AdvisoryCapability.CHAT,
        task_template=chat_advisor.TASK_TEMPLATE,
        task_variables=chat_advisor.task_variables,
        allow_external_search=True,
        requires_image_support=True,
        system_addendum=chat_advisor.SYSTEM_ADDENDUM,
    ),
    AdvisoryCapability.CROP_DIAGNOSIS: CapabilitySpec(
        capability=AdvisoryCapability.CROP_DIAGNOSIS,
        task_template=crop_diagnosis.TASK_TEMPLATE,
        task_variables=crop_diagnosis.task_variables,
        requires_image_support=True,
        fallback_text=DIAGNOSIS_FAILED,
    ),
    AdvisoryCapability.WEATHER_TIP: CapabilitySpec(
        capability=AdvisoryCapability.WEATHER_TIP,
        task_template=weather_tip.TASK_TEMPLATE,
        task_variables=weather_tip.task_variables,
        response_shape=WeatherTipResult,
        allow_external_search=True,
    ),
    AdvisoryCapability.MARKET_ANALYSIS: CapabilitySpec(
        capability=AdvisoryCapability.MARKET_ANALYSIS,
        task_template=market_analysis.TASK_TEMPLATE,
        task_variables=market_analysis.task_variables,
        response_shape=MarketAnalysisResult,
        allow_external_search=True,
    ),
    AdvisoryCapability.CROP_PLAN: CapabilitySpec(
        capability=AdvisoryCapability.CROP_PLAN,
        task_template=crop_plan.TASK_TEMPLATE,
        task_variables=crop_plan.task_variables,
        response_shape=CropPlanResult,
        allow_external_search=True,
    ),
    AdvisoryCapability.IRRIGATION_ADVICE: CapabilitySpec(
        capability=AdvisoryCapability.IRRIGATION_ADVICE,
        task_template=irrigation_advice.TASK_TEMPLATE,
        task_variables=irrigation_advice.task_variables,
        allow_external_search=True,
    ),
}

_missing = set(AdvisoryCapability) - set(_REGISTRY)
if _missing:
    raise ConfigurationError(f"No prompt registered for capabilities: {sorted(c.value for c in _missing)}")


def describe(capability: AdvisoryCapability) -> CapabilitySpec:
    """Returns the prompt template, response shape and model options for a capability."""
    try:
        return _REGISTRY[AdvisoryCapability(capability)]
    except (KeyError, ValueError):
        raise ConfigurationError(f"Unknown advisory capability: {capability!r}") from None
