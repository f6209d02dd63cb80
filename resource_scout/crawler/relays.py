# resource_scout/crawler/relays.py
"""
Catalogue of third-party relays used to reach resources that block direct
requests.

Each relay is a plain record: a URL builder and an optional unwrapper for
relays that wrap the payload (e.g. in JSON). New relays are added by
appending to :data:`RELAYS`; the fetcher only ever iterates the tuple.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple
from urllib.parse import quote

__all__ = ("RelayProfile", "RELAYS", "RELAYS_BY_NAME", "select_relays")


@dataclass(frozen=True, slots=True)
class RelayProfile:
    """A relay endpoint: how to address a URL through it and how to read the reply."""

    name: str
    build_url: Callable[[str], str]
    unwrap: Optional[Callable[[bytes], bytes]] = None
    needs_authorization: bool = False

    def payload(self, body: bytes) -> bytes:
        """Return the target resource bytes carried in a relay response body."""
        return self.unwrap(body) if self.unwrap is not None else body


def _encoded(url: str) -> str:
    return quote(url, safe="")


def _unwrap_allorigins(body: bytes) -> bytes:
    data = json.loads(body)
    if not isinstance(data, dict) or not isinstance(data.get("contents"), str):
        raise ValueError("relay reply has no 'contents' field")
    return data["contents"].encode("utf-8")


RELAYS: Tuple[RelayProfile, ...] = (
    RelayProfile(
        name="allorigins",
        build_url=lambda url: f"https://api.allorigins.win/raw?url={_encoded(url)}",
    ),
    RelayProfile(
        name="corsproxy",
        build_url=lambda url: f"https://corsproxy.io/?url={_encoded(url)}",
    ),
    RelayProfile(
        name="codetabs",
        build_url=lambda url: f"https://api.codetabs.com/v1/proxy?quest={_encoded(url)}",
    ),
    RelayProfile(
        name="allorigins-json",
        build_url=lambda url: f"https://api.allorigins.win/get?url={_encoded(url)}",
        unwrap=_unwrap_allorigins,
    ),
    # demo server; every client has to unlock it in a browser first
    RelayProfile(
        name="cors-anywhere",
        build_url=lambda url: f"https://cors-anywhere.herokuapp.com/{url}",
        needs_authorization=True,
    ),
)

RELAYS_BY_NAME: Dict[str, RelayProfile] = {relay.name: relay for relay in RELAYS}


def select_relays(
    names: Optional[Iterable[str]] = None,
    *,
    allow_manual: bool = False,
) -> Tuple[RelayProfile, ...]:
    """
    Return relays in the requested order.

    ``names=None`` keeps catalogue order. Relays that need manual
    authorization are dropped unless *allow_manual* is set.
    """
    if names is None:
        chosen = list(RELAYS)
    else:
        unknown = [n for n in names if n not in RELAYS_BY_NAME]
        if unknown:
            raise ValueError(f"Unknown relay(s): {', '.join(unknown)}")
        chosen = [RELAYS_BY_NAME[n] for n in names]
    if not allow_manual:
        chosen = [relay for relay in chosen if not relay.needs_authorization]
    return tuple(chosen)
