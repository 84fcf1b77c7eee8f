from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


INVOKE_QUERY = "composeExtension/query"
INVOKE_SELECT_ITEM = "composeExtension/selectItem"
INVOKE_SUBMIT_ACTION = "composeExtension/submitAction"


def _as_dict(v: Any) -> Dict[str, Any]:
    return v if isinstance(v, dict) else {}


class QueryParameter(BaseModel):
    name: str = ""
    value: Optional[Any] = None


class QueryEvent(BaseModel):
    """Extension query; only the first parameter's value is used as search text."""

    parameters: List[QueryParameter] = Field(default_factory=list)

    @property
    def text(self) -> str:
        if not self.parameters:
            return ""
        value = self.parameters[0].value
        return "" if value is None else str(value)

    @classmethod
    def from_activity(cls, activity: Dict[str, Any]) -> "QueryEvent":
        value = _as_dict(activity.get("value"))
        return cls(parameters=value.get("parameters") or [])


class SelectItemEvent(BaseModel):
    # Validated later by common.cards.parse_selection
    payload: Any = None

    @classmethod
    def from_activity(cls, activity: Dict[str, Any]) -> "SelectItemEvent":
        return cls(payload=activity.get("value"))


class SubmitActionEvent(BaseModel):
    sender_id: Optional[str] = None
    state: Optional[str] = None

    @classmethod
    def from_activity(cls, activity: Dict[str, Any]) -> "SubmitActionEvent":
        """Extract the sender from value.messagePayload.from.user.id and value.state.

        Any missing level yields None rather than an error.
        """
        value = _as_dict(activity.get("value"))
        sender = _as_dict(_as_dict(value.get("messagePayload")).get("from"))
        user = _as_dict(sender.get("user"))
        user_id = user.get("id")
        state = value.get("state")
        return cls(
            sender_id=user_id if isinstance(user_id, str) and user_id else None,
            state=state if isinstance(state, str) else None,
        )
