from core.decoder import decode_structured, decode_text, parse_json_object
from core.models import CropPlanResult, MarketAnalysisResult, SoilAnalysisResult
from core.schema_registry import DIAGNOSIS_FAILED, UNABLE_TO_ADVISE


def test_empty_payload_decodes_to_all_missing_fields():
    result = decode_structured("", SoilAnalysisResult)

    assert isinstance(result, SoilAnalysisResult)
    assert result.health_score is None
    assert result.analysis is None
    assert result.model_dump(exclude_none=True) == {}


def test_malformed_json_is_absorbed():
    assert decode_structured("Sorry, I can't do that {", MarketAnalysisResult) == MarketAnalysisResult()
    assert parse_json_object("[1, 2, 3]") == {}
    assert parse_json_object(None) == {}


def test_fenced_json_is_parsed():
    raw = '```json\n{"analysis": "Prices are rising", "prices": [{"label": "Tomato", "price": 24.5}]}\n```'

    result = decode_structured(raw, MarketAnalysisResult)

    assert result.analysis == "Prices are rising"
    assert result.prices[0].label == "Tomato"
    assert result.prices[0].price == 24.5


def test_zero_is_kept_distinct_from_missing():
    result = decode_structured('{"health_score": 0}', SoilAnalysisResult)

    assert result.health_score == 0
    assert result.normalized_n is None


def test_invalid_field_is_dropped_and_the_rest_survives():
    raw = '{"analysis": "Loamy and healthy", "health_score": "very good", "visual_indicators": ["dark colour"]}'

    result = decode_structured(raw, SoilAnalysisResult)

    assert result.analysis == "Loamy and healthy"
    assert result.health_score is None
    assert result.visual_indicators == ["dark colour"]


def test_nested_invalid_items_drop_only_that_field():
    raw = '{"analysis": "Plan", "rotation_plan": [{"period": "Kharif", "pest_break": "sometimes"}], "recommendations": [{"name": "Millet"}]}'

    result = decode_structured(raw, CropPlanResult)

    assert result.analysis == "Plan"
    assert result.rotation_plan is None
    assert result.recommendations[0].name == "Millet"


def test_free_text_fallbacks():
    assert decode_text("", UNABLE_TO_ADVISE) == "Unable to generate advice."
    assert decode_text("   ", DIAGNOSIS_FAILED) == "Diagnosis failed."
    assert decode_text(None, DIAGNOSIS_FAILED) == "Diagnosis failed."
    assert decode_text("## Early blight", DIAGNOSIS_FAILED) == "## Early blight"


def test_fenced_json_after_a_preamble_is_parsed():
    raw = 'Here is the soil report:\n```json\n{"analysis": "Good loam", "health_score": 80}\n```'

    result = decode_structured(raw, SoilAnalysisResult)

    assert result.health_score == 80
    assert result.analysis == "Good loam"


def test_trailing_note_after_the_object_is_ignored():
    raw = '{"analysis": "Good loam", "health_score": 72}\nNote: values are estimates.'

    assert decode_structured(raw, SoilAnalysisResult).health_score == 72
