from langchain_core.messages import AIMessage, HumanMessage

from core.conversation import ConversationSession, turn_role, turn_text, user_turn
from core.models import Attachment


def test_append_returns_new_session():
    session = ConversationSession(turns=(HumanMessage(content="Hi"),))

    longer = session.append(AIMessage(content="Hello, farmer!"))

    assert len(session) == 1
    assert [t.content for t in longer.turns] == ["Hi", "Hello, farmer!"]
    assert longer.last().content == "Hello, farmer!"


def test_roles_and_text_of_multimodal_turn():
    turn = user_turn("Is this blight?", Attachment(mime_type="image/jpeg", data="AAAA"))

    assert turn_role(turn) == "user"
    assert turn_role(AIMessage(content="Yes")) == "model"
    assert turn_text(turn) == "Is this blight?"


def test_session_survives_serialisation():
    session = ConversationSession().extend([HumanMessage(content="Soil pH?"), AIMessage(content="6.5 is ideal.")])

    restored = ConversationSession.from_dict(session.to_dict())

    assert [(t.type, t.content) for t in restored.turns] == [("human", "Soil pH?"), ("ai", "6.5 is ideal.")]
