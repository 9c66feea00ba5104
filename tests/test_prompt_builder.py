from langchain_core.messages import AIMessage, HumanMessage

from core.conversation import ConversationSession, turn_text
from core.models import (
    AdvisoryRequest,
    Attachment,
    ChatInput,
    CropPlanInput,
    LocationData,
    MarketAnalysisInput,
    SoilAnalysisInput,
)
from core.prompt_builder import build_prompt, language_name

FARM = LocationData(latitude=30.9, longitude=75.85)
PHOTO = Attachment(mime_type="image/png", data="aGVsbG8=")


def soil_request(image=None, locale="en"):
    return AdvisoryRequest(
        payload=SoilAnalysisInput(ph=6.5, organic_matter=3.0, soil_type="Loam", image=image),
        locale=locale,
    )


def test_same_input_builds_the_same_prompt():
    first = build_prompt(soil_request(PHOTO))
    second = build_prompt(soil_request(PHOTO))

    assert first.system_instruction == second.system_instruction
    assert [m.content for m in first.messages] == [m.content for m in second.messages]


def test_system_instruction_carries_persona_comparison_and_language():
    prompt = build_prompt(soil_request(locale="hi"))

    assert "AgriWise" in prompt.system_instruction
    assert "chemical (synthetic) fertilizers/pesticides and organic alternatives" in prompt.system_instruction
    assert "User Language: Hindi." in prompt.system_instruction


def test_unknown_locale_falls_back_to_english():
    assert language_name("xx") == "English"
    assert "User Language: English." in build_prompt(soil_request(locale="xx")).system_instruction


def test_soil_prompt_without_image_has_a_single_text_part():
    prompt = build_prompt(soil_request())

    assert len(prompt.messages) == 1
    content = prompt.user_turn.content
    assert isinstance(content, str)
    assert "pH 6.5, Organic Matter 3.0%, Type Loam" in content
    assert "Location: Unknown" in content
    assert "visual indicators of nutrient deficiency" not in content


def test_soil_prompt_with_image_adds_visual_instructions_and_media_part():
    prompt = build_prompt(soil_request(PHOTO))

    text, media = prompt.user_turn.content
    assert text["type"] == "text"
    assert "visual indicators of nutrient deficiency" in text["text"]
    assert media == {"type": "media", "mime_type": "image/png", "data": "aGVsbG8="}


def test_market_prompt_adds_organic_premium_for_organic_queries():
    organic = AdvisoryRequest(payload=MarketAnalysisInput(query="Organic basmati rice"), location=FARM)
    conventional = AdvisoryRequest(payload=MarketAnalysisInput(query="Basmati rice"), location=FARM)

    organic_text = turn_text(build_prompt(organic).user_turn)
    conventional_text = turn_text(build_prompt(conventional).user_turn)

    assert "Organic Premium" in organic_text
    assert "organic vs conventional prices" in organic_text
    assert "Organic Premium" not in conventional_text
    assert "30.9, 75.85" in organic_text


def test_pest_resistance_only_when_filter_selected():
    with_filter = CropPlanInput(mode="recommend", filters=["Drought Tolerant", "Pest Resistant"])
    without_filter = CropPlanInput(mode="recommend", filters=["Drought Tolerant"])

    assert "**Pest Resistance:**" in turn_text(build_prompt(AdvisoryRequest(payload=with_filter, location=FARM)).user_turn)
    assert "**Pest Resistance:**" not in turn_text(build_prompt(AdvisoryRequest(payload=without_filter, location=FARM)).user_turn)


def test_crop_plan_mode_text_mentions_crop():
    plan = CropPlanInput(mode="companion", crop_input="Tomato")

    text = turn_text(build_prompt(AdvisoryRequest(payload=plan, location=FARM)).user_turn)

    assert "companion plants for Tomato" in text


def test_chat_prompt_keeps_history_first_and_new_turn_last():
    history = ConversationSession(turns=(HumanMessage(content="What is mulching?"), AIMessage(content="Covering soil.")))
    request = AdvisoryRequest(payload=ChatInput(message="Which mulch for tomatoes?", history=history, farmer_name="Asha"))

    prompt = build_prompt(request)

    assert [m.content for m in prompt.messages] == ["What is mulching?", "Covering soil.", "Which mulch for tomatoes?"]
    assert "Farmer's Name: Asha" in prompt.system_instruction
