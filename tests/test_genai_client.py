from types import SimpleNamespace

from core.genai_client import build_config, extract_sources, to_contents
from core.models import (
    AdvisoryRequest,
    Attachment,
    ChatInput,
    CropDiagnosisInput,
    LocationData,
    SoilAnalysisInput,
    SupplierSearchInput,
)
from core.prompt_builder import build_prompt

FARM = LocationData(latitude=18.52, longitude=73.85)


def test_structured_capability_without_search_sends_schema_only():
    prompt = build_prompt(AdvisoryRequest(payload=SoilAnalysisInput(ph=6.5, organic_matter=3.0)))

    config = build_config(prompt)

    assert config.response_mime_type == "application/json"
    assert config.response_schema is not None
    assert not config.tools


def test_supplier_search_uses_maps_around_the_farm():
    prompt = build_prompt(AdvisoryRequest(payload=SupplierSearchInput(query="neem cake"), location=FARM))

    config = build_config(prompt, FARM)

    assert len(config.tools) == 2
    assert config.tools[0].google_search is not None
    assert config.tools[1].google_maps is not None
    assert config.tool_config.retrieval_config.lat_lng.latitude == 18.52


def test_free_text_chat_has_search_but_no_schema():
    prompt = build_prompt(AdvisoryRequest(payload=ChatInput(message="When to sow wheat?")))

    config = build_config(prompt, FARM)

    assert config.response_schema is None
    assert len(config.tools) == 1
    assert config.tool_config is None


def test_attached_photo_becomes_inline_bytes():
    photo = Attachment(mime_type="image/jpeg", data="aGVsbG8=")
    prompt = build_prompt(AdvisoryRequest(payload=CropDiagnosisInput(symptoms="Yellow spots", image=photo)))

    [content] = to_contents(prompt.messages)

    assert content.role == "user"
    assert content.parts[-1].inline_data.mime_type == "image/jpeg"
    assert content.parts[-1].inline_data.data == b"hello"


def test_sources_from_web_and_maps_chunks():
    review = SimpleNamespace(review="Good quality vermicompost")
    response = SimpleNamespace(candidates=[SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=[
        SimpleNamespace(web=SimpleNamespace(uri="https://agmarknet.gov.in", title="Agmarknet"), maps=None),
        SimpleNamespace(web=None, maps=SimpleNamespace(
            uri="https://maps.google.com/?cid=1",
            title="Green Agro Store",
            place_answer_sources=SimpleNamespace(review_snippets=[review]),
        )),
    ]))])

    web, place = extract_sources(response)

    assert web.web.title == "Agmarknet"
    assert place.maps.title == "Green Agro Store"
    assert place.maps.review_snippets == ["Good quality vermicompost"]


def test_reply_without_candidates_has_no_sources():
    assert extract_sources(SimpleNamespace(candidates=None)) == []
