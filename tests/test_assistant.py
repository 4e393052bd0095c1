from skillspot.core.store import NGOS
from skillspot.models.chat import ChatMessage
from skillspot.models.organization import Organization
from skillspot.services.assistant import (
    CATALOG_UNAVAILABLE_REPLY,
    CONNECTION_REPLY,
    GREETING,
    NOT_CONFIGURED_REPLY,
    CourseAssistant,
    build_contents,
    simplified_catalog,
)
from skillspot.services.seed_data import demo_ngos


class BrokenStore:
    def select(self, table, **eq):
        raise RuntimeError("offline")


def _catalog():
    return simplified_catalog([Organization.model_validate(n) for n in demo_ngos()])


def test_catalog_keeps_only_what_the_model_needs():
    catalog = _catalog()

    assert set(catalog[0]) == {"id", "name", "description", "location", "type", "courses"}
    assert set(catalog[0]["courses"][0]) == {"id", "name", "description", "category", "seatsAvailable"}
    assert catalog[1]["courses"][0]["seatsAvailable"] == 0


def test_first_user_turn_carries_instructions_and_catalog():
    history = [
        ChatMessage(sender="ai", text=GREETING),
        ChatMessage(sender="user", text="Anything in Chicago?"),
        ChatMessage(sender="ai", text="Community Builders United runs two courses."),
    ]

    contents = build_contents("Is the CNA course full?", history, _catalog())

    assert [c.role for c in contents] == ["user", "model", "user"]
    first = contents[0].parts[0].text
    assert "Community Builders United" in first
    assert first.endswith('My question is: "Anything in Chicago?"')
    assert contents[2].parts[0].text == "Is the CNA course full?"


def test_greeting_only_history_prefixes_the_new_message():
    contents = build_contents("Hi", [ChatMessage(sender="ai", text=GREETING)], _catalog())

    assert len(contents) == 1
    assert contents[0].parts[0].text.endswith('My question is: "Hi"')


def test_chat_endpoint_returns_model_text(client, gemini):
    resp = client.post("/api/chat", json={"message": "web development?", "history": []})

    assert resp.status_code == 200
    assert resp.json() == {"reply": gemini.models.reply}
    [call] = gemini.models.calls
    assert call["model"] == "gemini-2.5-flash"


def test_chat_rejects_blank_messages(client):
    assert client.post("/api/chat", json={"message": "   "}).status_code == 422


def test_model_failure_becomes_apology(client, gemini):
    gemini.models.error = RuntimeError("quota exceeded")

    resp = client.post("/api/chat", json={"message": "hello"})

    assert resp.json() == {"reply": CONNECTION_REPLY}


def test_unconfigured_assistant(store):
    assistant = CourseAssistant(None, "gemini-2.5-flash")

    assert assistant.ready is False
    assert assistant.reply(store, "hello") == NOT_CONFIGURED_REPLY


def test_catalog_failure(gemini):
    assistant = CourseAssistant(gemini, "gemini-2.5-flash")

    assert assistant.reply(BrokenStore(), "hello") == CATALOG_UNAVAILABLE_REPLY
    assert gemini.models.calls == []


def test_reads_live_catalog(store, gemini):
    store.insert(NGOS, {"id": "solo", "name": "Solo Skills", "courses": []})

    CourseAssistant(gemini, "m").reply(store, "what is there?")

    [call] = gemini.models.calls
    assert "Solo Skills" in call["contents"][0].parts[0].text
