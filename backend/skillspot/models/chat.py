from typing import List, Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    sender: Literal["user", "ai"]
    text: str


class ChatRequest(BaseModel):
    message: str
    history: List[ChatMessage] = []


class ChatResponse(BaseModel):
    reply: str
