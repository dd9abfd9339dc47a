"""Coach — conversational habit coach on top of the digest.

Every turn rebuilds the habit digest so the LLM always sees fresh
numbers, then sends:

  system: Persona + Context(digest) [+ Profile]
  history (last COACH_HISTORY_LIMIT messages)
  user:   the new message (or the Greeting instruction)
"""

import logging
from dataclasses import dataclass

from habitpal import db
from habitpal.config import COACH_HISTORY_LIMIT
from habitpal.digest import Digest
from habitpal.llm import get_client
from habitpal.models import UserProfile
from habitpal.prompt_loader import get_section, render
from habitpal.tracker import local_today, user_digest

log = logging.getLogger(__name__)

PROMPT_NAME = "coach"
FALLBACK_REPLY = "Sorry, I couldn't think straight just now. Could you try again in a moment?"


@dataclass(frozen=True)
class CoachContext:
    summary: str
    profile: UserProfile | None
    digest: Digest


def build_coach_context(user_id: int, today: str) -> CoachContext:
    digest = user_digest(user_id, today)
    return CoachContext(summary=digest.summary, profile=db.get_user_profile(user_id), digest=digest)


def build_system_prompt(ctx: CoachContext, today: str) -> str:
    parts = [
        get_section(PROMPT_NAME, "Persona"),
        render(PROMPT_NAME, "Context", today=today, summary=ctx.summary),
    ]
    if ctx.profile and ctx.profile.name:
        parts.append(render(PROMPT_NAME, "Profile", name=ctx.profile.name, age=ctx.profile.age))
    return "\n\n".join(p for p in parts if p)


def build_messages(ctx: CoachContext, today: str, history: list[dict],
                   text: str | None = None) -> list[dict]:
    """Assemble the OpenAI-style message list for one coach turn."""
    messages = [{"role": "system", "content": build_system_prompt(ctx, today)}]
    for m in history:
        if m["role"] in ("user", "assistant"):
            messages.append({"role": m["role"], "content": m["content"]})
    messages.append({
        "role": "user",
        "content": text if text is not None else get_section(PROMPT_NAME, "Greeting"),
    })
    return messages


def _ask(messages: list[dict]) -> str:
    response = get_client().chat(messages=messages, temperature=0.7)
    log.info("Coach reply: %d tokens (%s)", response.total_tokens, response.model)
    return response.content.strip()


async def greet(user_id: int, today: str | None = None) -> str:
    """Open a conversation. The greeting instruction itself is not stored."""
    today = today or local_today()
    try:
        ctx = build_coach_context(user_id, today)
        reply_text = _ask(build_messages(ctx, today, history=[]))
    except Exception as e:
        log.error("Coach greeting failed: %s", e, exc_info=True)
        return FALLBACK_REPLY
    if reply_text:
        db.save_message(user_id, "assistant", reply_text)
    return reply_text or FALLBACK_REPLY


async def reply(user_id: int, text: str, today: str | None = None) -> str:
    """Answer a user message with the refreshed habit context."""
    today = today or local_today()
    history = db.get_recent_messages(user_id, limit=COACH_HISTORY_LIMIT)
    db.save_message(user_id, "user", text)
    try:
        ctx = build_coach_context(user_id, today)
        reply_text = _ask(build_messages(ctx, today, history, text))
    except Exception as e:
        log.error("Coach reply failed: %s", e, exc_info=True)
        return FALLBACK_REPLY
    if not reply_text:
        return FALLBACK_REPLY
    db.save_message(user_id, "assistant", reply_text)
    return reply_text
