"""Course assistant backed by Gemini.

The catalog is small, so each request carries a trimmed JSON snapshot of
every NGO and course alongside the user's question. The model's reply is
returned as-is.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from ..core.store import NGOS, DataStore
from ..models.chat import ChatMessage
from ..models.organization import Organization

logger = logging.getLogger(__name__)

GREETING = "Hello! I'm your SkillSpot assistant. How can I help you find the perfect course today?"
NOT_CONFIGURED_REPLY = "Configuration error: The AI assistant cannot be initialized."
CONNECTION_REPLY = "Sorry, I'm having trouble connecting. Please try again later."
CATALOG_UNAVAILABLE_REPLY = "Sorry, I couldn't load the course catalog right now. Please try again later."

SYSTEM_INSTRUCTION = (
    "You are a friendly and helpful AI assistant for SkillSpot 2.0. Your goal is to help users find "
    "suitable skill development courses from various NGOs. You should be encouraging and provide clear, "
    "concise information. Based on the user's query and the NGO data provided, recommend the most relevant "
    "options. Provide the NGO name and course name in your recommendation. If a course is full "
    "(seatsAvailable: 0), mention that the user can join a waitlist. If the user asks a general question, "
    "answer it politely. Do not make up information not present in the provided context."
)


def create_gemini_client(api_key: str) -> Optional[genai.Client]:
    if not api_key:
        logger.error("[Gemini] GEMINI_API_KEY is missing; the assistant will answer with a configuration error.")
        return None
    try:
        return genai.Client(api_key=api_key)
    except Exception:
        logger.exception("[Gemini] Failed to initialize client")
        return None


def simplified_catalog(orgs: List[Organization]) -> List[Dict[str, Any]]:
    """Only the fields the assistant needs, to keep the prompt small."""
    return [
        {
            "id": org.id,
            "name": org.name,
            "description": org.description,
            "location": org.location,
            "type": org.type,
            "courses": [
                {
                    "id": c.id,
                    "name": c.name,
                    "description": c.description,
                    "category": c.category,
                    "seatsAvailable": c.seats_available,
                }
                for c in org.courses
            ],
        }
        for org in orgs
    ]


def build_contents(message: str, history: List[ChatMessage], catalog: List[Dict[str, Any]]) -> List[types.Content]:
    turns = [m for m in history if m.text != GREETING] + [ChatMessage(sender="user", text=message)]
    data_context = (
        "Here is the data for the available NGOs and courses on SkillSpot 2.0:\n"
        + json.dumps(catalog, indent=2)
    )

    contents: List[types.Content] = []
    prefixed = False
    for turn in turns:
        text = turn.text
        if turn.sender == "user" and not prefixed:
            text = f'{SYSTEM_INSTRUCTION}\n\n{data_context}\n\nMy question is: "{turn.text}"'
            prefixed = True
        contents.append(
            types.Content(
                role="user" if turn.sender == "user" else "model",
                parts=[types.Part(text=text)],
            )
        )
    return contents


class CourseAssistant:
    def __init__(self, client: Optional[genai.Client], model: str):
        self.client = client
        self.model = model

    @property
    def ready(self) -> bool:
        return self.client is not None

    def reply(self, store: DataStore, message: str, history: Optional[List[ChatMessage]] = None) -> str:
        if self.client is None:
            return NOT_CONFIGURED_REPLY
        try:
            orgs = [Organization.model_validate(r) for r in store.select(NGOS)]
        except Exception:
            logger.exception("[assistant] catalog load failed")
            return CATALOG_UNAVAILABLE_REPLY

        contents = build_contents(message, history or [], simplified_catalog(orgs))
        try:
            response = self.client.models.generate_content(model=self.model, contents=contents)
        except Exception:
            logger.exception("[assistant] Error calling Gemini API")
            return CONNECTION_REPLY
        return response.text or ""
