from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Union

from common.cards import (
    ExtensionResponse,
    SelectionPayload,
    auth_request,
    build_attachment_pair,
    build_selected_card,
    build_title_card,
    parse_selection,
    result_list,
)
from common.nuget import PackageSearchClient
from extension.config import load_config
from extension.events import (
    INVOKE_QUERY,
    INVOKE_SELECT_ITEM,
    INVOKE_SUBMIT_ACTION,
    QueryEvent,
    SelectItemEvent,
    SubmitActionEvent,
)
from state.login_store import InMemoryLoginStateStore, LoginStateStore


logger = logging.getLogger(__name__)

# Lives for the process lifetime; shared by every invocation of lambda_handler
_PROCESS_STORE = InMemoryLoginStateStore()


class UnsupportedEvent(ValueError):
    """Invoke activity name is not one of the extension's entry points."""


class ExtensionRequestHandler:
    """
    Entry points for the package-search messaging extension.

    - `on_query`: search the registry and return preview/full card pairs.
    - `on_select_item`: expand a tapped preview into the card that gets inserted.
    - `on_submit_action`: capture login state and answer with an auth request or
      a logged-in card.

    Search failures propagate unchanged; the host turns them into an error.
    """

    def __init__(
        self,
        *,
        search_client: PackageSearchClient,
        login_store: LoginStateStore,
        sign_in_url: str,
    ) -> None:
        if not sign_in_url:
            raise ValueError("sign_in_url is required")
        self._search = search_client
        self._store = login_store
        self._sign_in_url = sign_in_url

    async def on_query(self, query_text: str) -> ExtensionResponse:
        records = await self._search.search(query_text or "")
        return result_list([build_attachment_pair(r) for r in records])

    def on_select_item(
        self, selection: Union[SelectionPayload, Dict[str, Any], str, None]
    ) -> ExtensionResponse:
        record = parse_selection(selection)
        return result_list([build_selected_card(record)])

    def on_submit_action(
        self, sender_id: Optional[str], state_payload: Optional[str]
    ) -> ExtensionResponse:
        if sender_id is not None and state_payload is not None:
            # The submitted state doubles as the display name; nothing verifies it
            self._store.put(sender_id, state_payload)
            logger.info("Captured login state for user %s", sender_id)

        name = self._store.get(sender_id) if sender_id is not None else None
        if name is None:
            return auth_request(self._sign_in_url)
        return result_list([build_title_card(f"Insight added by {name}")])

    async def handle_invoke(self, activity: Dict[str, Any]) -> Dict[str, Any]:
        """Route a raw invoke activity by name and wrap the result as an invoke response."""
        name = activity.get("name")
        logger.debug("Dispatching invoke %s", name)
        if name == INVOKE_QUERY:
            response = await self.on_query(QueryEvent.from_activity(activity).text)
        elif name == INVOKE_SELECT_ITEM:
            response = self.on_select_item(SelectItemEvent.from_activity(activity).payload)
        elif name == INVOKE_SUBMIT_ACTION:
            event = SubmitActionEvent.from_activity(activity)
            response = self.on_submit_action(event.sender_id, event.state)
        else:
            raise UnsupportedEvent(f"Unsupported invoke activity: {name!r}")
        return {"status": 200, "body": response.to_payload()}


async def _run(activity: Dict[str, Any]) -> Dict[str, Any]:
    cfg = load_config()
    async with PackageSearchClient(base_url=cfg.search_url, timeout=cfg.timeout) as client:
        handler = ExtensionRequestHandler(
            search_client=client,
            login_store=_PROCESS_STORE,
            sign_in_url=cfg.sign_in_url,
        )
        return await handler.handle_invoke(activity)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """AWS Lambda entry for extension invoke activities.

    Environment:
    - SIGN_IN_URL (required), NUGET_SEARCH_URL, NUGET_TIMEOUT
    - PARAM_PREFIX: optional SSM prefix for the same settings
    """
    activity: Any = event.get("body", event) if isinstance(event, dict) else {}
    if isinstance(activity, str):
        # API Gateway proxy events carry the activity as a JSON string
        activity = json.loads(activity)
    return asyncio.run(_run(activity))
