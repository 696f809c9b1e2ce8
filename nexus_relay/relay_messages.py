"""Inbound request parsing and relay line formatting.

Clients send one JSON object per text frame, ``{"model": ..., "text": ...}``.
Everything the relay publishes is a plain text line built by the helpers
below; clients display the lines as-is.
"""
from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

UNKNOWN_MODEL_REPLY = "Please select a valid AI model."


class MalformedMessageError(ValueError):
    """An inbound frame is not valid JSON or does not match :class:`InboundRequest`."""


class InboundRequest(BaseModel):
    """A prompt addressed to one backend."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    model: StrictStr
    """Backend identifier, e.g. "gemini". May name an unknown backend."""
    text: StrictStr
    """The prompt."""


def parse_inbound(raw: str) -> InboundRequest:
    """Parse one client frame.

    :param raw: The frame's text payload
    :return: The parsed request
    :raises MalformedMessageError: on invalid JSON, missing or non-string fields
    """
    try:
        return InboundRequest.model_validate_json(raw)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'message'}: {err['msg']}"
            for err in e.errors()
        )
        raise MalformedMessageError(problems) from e


def format_echo(text: str) -> str:
    return f"You: {text}"


def format_reply(model: str, text: str) -> str:
    return f"🤖 {model}: {text}"


def format_error(model: str, detail: str) -> str:
    return f"🤖 Error with {model}: {detail}"


def format_lag_notice(missed: int) -> str:
    return f"⚠️ Missed {missed} messages"
