from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from ...core.exceptions import ValidationError
from ...models.chat import ChatRequest, ChatResponse
from ..deps import AssistantDep, StoreDep

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(body: ChatRequest, store: StoreDep, assistant: AssistantDep):
    if not body.message.strip():
        raise ValidationError("Message cannot be empty.")
    reply = await run_in_threadpool(assistant.reply, store, body.message, body.history)
    return ChatResponse(reply=reply)
