"""Server list extraction from the embed page markup."""

from __future__ import annotations

import structlog

from streamrelay.domain.exceptions import NoServersFoundError
from streamrelay.infrastructure.common.html_selectors import (
    attr_values,
    parse_html,
    select_items,
)

log = structlog.get_logger(__name__)

SERVER_ITEM_SELECTOR = ".serversList .server"
SERVER_TOKEN_ATTR = "data-hash"


def extract_servers(html: str) -> list[str]:
    """Return the ``data-hash`` token of every server item, in document order.

    Duplicates are kept; each one is attempted.

    Raises:
        NoServersFoundError: The page lists no server with a token.
    """
    soup = parse_html(html)
    tokens = attr_values(select_items(soup, SERVER_ITEM_SELECTOR), SERVER_TOKEN_ATTR)
    if not tokens:
        raise NoServersFoundError("No servers found")
    log.debug("embed_servers_found", count=len(tokens))
    return tokens
