from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..catalog.models import Vehicle
from ..recommendations.models import FilterSet


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)
    vehicle_ids: list[int] | None = None


class QuickAction(BaseModel):
    """A suggested next step: a named action, or a literal to echo back."""

    label: str
    action: str | None = None
    value: str | None = None

    @model_validator(mode="after")
    def _exactly_one_target(self) -> QuickAction:
        if (self.action is None) == (self.value is None):
            raise ValueError("quick action needs exactly one of 'action' or 'value'")
        return self


def action(label: str, name: str) -> QuickAction:
    return QuickAction(label=label, action=name)


def literal(label: str, value: str) -> QuickAction:
    return QuickAction(label=label, value=value)


# ---------------------------------------------------------------------------
# Response envelope (closed tagged union on ``type``)
# ---------------------------------------------------------------------------


class _Envelope(BaseModel):
    content: str
    quick_actions: list[QuickAction] = Field(default_factory=list)


class TextResponse(_Envelope):
    type: Literal["text"] = "text"


class VehicleListResponse(_Envelope):
    type: Literal["vehicle_list"] = "vehicle_list"
    vehicles: list[Vehicle]


class ComparisonResponse(_Envelope):
    type: Literal["comparison"] = "comparison"
    vehicles: list[Vehicle]


class PreferencesFormResponse(_Envelope):
    type: Literal["preferences_form"] = "preferences_form"


BotResponse = Annotated[
    Union[TextResponse, VehicleListResponse, ComparisonResponse, PreferencesFormResponse],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Turn log
# ---------------------------------------------------------------------------


class TurnRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    filters: FilterSet = Field(default_factory=FilterSet)
    vehicle_ids: list[int] = Field(default_factory=list)
    source: str | None = None
    timestamp: float


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------


class Conversation(BaseModel):
    conversation_id: int
    user_id: str
    status: Literal["active", "closed"] = "active"
    start_time: float
    end_time: float | None = None
    last_message: str | None = None
    last_message_time: float | None = None


class Message(BaseModel):
    message_id: int
    conversation_id: int
    sender: Literal["user", "bot"]
    content: str
    timestamp: float


class SendMessageResponse(BaseModel):
    user_message: str
    bot_response: BotResponse
