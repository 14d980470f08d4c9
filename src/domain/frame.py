"""
Frame domain - navigation state codec and button-driven state machine.

A frame is a stateless, button-driven UI embedded in a social feed. The
server never stores navigation state: every response carries an opaque
token that the client posts back with the next button press.

State Machine
=============

Pages: home, search, register, gallery (no terminal page).

Transitions (button index is 1-based and independent of the current page):
    1                 -> search    [Back, Continue]
    2 + input text    -> register  [Back, Register Now]   selected_domain = input[:63]
    2 without input   -> search    [Back, Check Availability]
    3                 -> gallery   [Back, View on OpenSea (link)]
    anything else     -> home      [Register Domain, My Domains, Visit App (link)]

Every transition copies the inbound FID claim into the state when one is
present and sets wallet_connected to True. Both values are display hints
only: the token travels through an untrusted client and must never be
used for authorization.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .exceptions import ProtocolDecodeError
from .names import MAX_DOMAIN_LENGTH, full_domain_name
from .ports import ImageRenderer

logger = logging.getLogger(__name__)

# Tokens longer than this are rejected without parsing
MAX_TOKEN_LENGTH = 4096


class FramePage(str, Enum):
    """Screens reachable in the frame."""

    HOME = "home"
    SEARCH = "search"
    REGISTER = "register"
    GALLERY = "gallery"


class ButtonAction(str, Enum):
    """Frame protocol button actions used by this frame."""

    POST = "post"
    LINK = "link"


@dataclass(frozen=True)
class FrameState:
    """Navigation state round-tripped through the client."""

    page: FramePage = FramePage.HOME
    user_fid: int | None = None
    wallet_connected: bool = False
    selected_domain: str | None = None


@dataclass(frozen=True)
class FrameEvent:
    """Inbound button press. All fields come from untrusted data."""

    button_index: int | None = None
    input_text: str | None = None
    fid: int | None = None


@dataclass(frozen=True)
class FrameButton:
    label: str
    action: ButtonAction = ButtonAction.POST
    target: str | None = None


@dataclass(frozen=True)
class FramePresentation:
    """What the client renders: an image descriptor and ordered buttons."""

    image: str
    buttons: list[FrameButton] = field(default_factory=list)


@dataclass(frozen=True)
class FrameResponse:
    """Complete frame reply: presentation plus post URL and next state token."""

    page: FramePage
    image: str
    buttons: list[FrameButton]
    post_url: str
    state: str


class FrameStateCodec:
    """
    Serializes FrameState into an opaque, URL-safe token and back.

    Encoding is deterministic: compact JSON with sorted keys, absent
    optional fields omitted, then unpadded URL-safe base64. Decoding is
    total: any missing, malformed or structurally invalid token yields the
    default home state.
    """

    def encode(self, state: FrameState) -> str:
        payload: dict[str, Any] = {
            "page": state.page.value,
            "walletConnected": state.wallet_connected,
        }
        if state.user_fid is not None:
            payload["userFid"] = state.user_fid
        if state.selected_domain is not None:
            payload["selectedDomain"] = state.selected_domain

        raw = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")

    def decode(self, token: Any) -> FrameState:
        """
        Decode a token posted back by the client.

        Never raises: anything that is not a well-formed token produced by
        encode() decodes to FrameState() (page=home, wallet_connected=False).
        """
        if not token or not isinstance(token, str):
            return FrameState()

        try:
            return self._parse(token)
        except (ProtocolDecodeError, ValueError, RecursionError) as e:
            # Decode failures are never reflected to the remote caller
            logger.debug("Discarding undecodable frame state: %s", e)
            return FrameState()

    def _parse(self, token: str) -> FrameState:
        if len(token) > MAX_TOKEN_LENGTH:
            raise ProtocolDecodeError("token too long")

        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise ProtocolDecodeError("token is not base64") from e

        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, dict):
            raise ProtocolDecodeError("state is not an object")

        try:
            page = FramePage(data.get("page"))
        except ValueError as e:
            raise ProtocolDecodeError("unknown page") from e

        wallet_connected = data.get("walletConnected", False)
        if not isinstance(wallet_connected, bool):
            raise ProtocolDecodeError("walletConnected must be a boolean")

        user_fid = data.get("userFid")
        if user_fid is not None and (
            isinstance(user_fid, bool) or not isinstance(user_fid, int) or user_fid <= 0
        ):
            raise ProtocolDecodeError("userFid must be a positive integer")

        selected_domain = data.get("selectedDomain")
        if selected_domain is not None and not isinstance(selected_domain, str):
            raise ProtocolDecodeError("selectedDomain must be a string")

        return FrameState(
            page=page,
            user_fid=user_fid,
            wallet_connected=wallet_connected,
            selected_domain=selected_domain,
        )


class FrameStateMachine:
    """
    Computes the next frame state and presentation for a button press.

    Pure given its renderer: safe to share across concurrent requests.
    """

    def __init__(
        self,
        renderer: ImageRenderer,
        app_url: str,
        post_url: str,
        marketplace_url: str,
        domain_suffix: str,
        codec: FrameStateCodec | None = None,
    ) -> None:
        self._renderer = renderer
        self._app_url = app_url
        self._post_url = post_url
        self._marketplace_url = marketplace_url
        self._suffix = domain_suffix
        self._codec = codec or FrameStateCodec()

    def transition(
        self, state: FrameState, event: FrameEvent
    ) -> tuple[FrameState, FramePresentation]:
        """
        Apply one button press to the current state.

        Total over all events: unknown or absent button indexes go home.
        """
        user_fid = state.user_fid
        if isinstance(event.fid, int) and not isinstance(event.fid, bool) and event.fid > 0:
            user_fid = event.fid

        # TODO: reconcile wallet_connected with the wallet's real connection status
        next_state = replace(state, user_fid=user_fid, wallet_connected=True)
        back = FrameButton("Back")

        if event.button_index == 1:
            next_state = replace(next_state, page=FramePage.SEARCH)
            image = self._renderer.render(
                "Find Your Domain", f"Search for available .{self._suffix} domains"
            )
            buttons = [back, FrameButton("Continue")]

        elif event.button_index == 2 and event.input_text:
            # Bounded so every reachable state encodes under MAX_TOKEN_LENGTH
            domain = event.input_text[:MAX_DOMAIN_LENGTH]
            next_state = replace(next_state, page=FramePage.REGISTER, selected_domain=domain)
            image = self._renderer.render(
                f"Register {full_domain_name(domain, self._suffix)}",
                "Complete your domain registration",
            )
            buttons = [back, FrameButton("Register Now")]

        elif event.button_index == 2:
            next_state = replace(next_state, page=FramePage.SEARCH)
            image = self._renderer.render("Enter Domain Name", "Type your desired domain name")
            buttons = [back, FrameButton("Check Availability")]

        elif event.button_index == 3:
            next_state = replace(next_state, page=FramePage.GALLERY)
            image = self._renderer.render(
                "Your Domains", f"View and manage your .{self._suffix} domains"
            )
            buttons = [
                back,
                FrameButton("View on OpenSea", ButtonAction.LINK, self._marketplace_url),
            ]

        else:
            next_state = replace(next_state, page=FramePage.HOME)
            image = self._renderer.render(
                "Farcaster Names",
                f"Register .{self._suffix} domains with NFT functionality on Celo mainnet",
            )
            buttons = [
                FrameButton("Register Domain"),
                FrameButton("My Domains"),
                FrameButton("Visit App", ButtonAction.LINK, self._app_url),
            ]

        return next_state, FramePresentation(image=image, buttons=buttons)

    def initial(self) -> FrameResponse:
        """First screen, advertised before any button press."""
        state = FrameState()
        _, presentation = self.transition(state, FrameEvent())
        return FrameResponse(
            page=state.page,
            image=presentation.image,
            buttons=presentation.buttons,
            post_url=self._post_url,
            state=self._codec.encode(state),
        )

    def fallback(self) -> FrameResponse:
        """Home screen rendered when a request cannot be processed."""
        image = self._renderer.render(
            "Farcaster Names", f"Register .{self._suffix} domains on Celo mainnet"
        )
        return FrameResponse(
            page=FramePage.HOME,
            image=image,
            buttons=[
                FrameButton("Try Again"),
                FrameButton("Visit App", ButtonAction.LINK, self._app_url),
            ],
            post_url=self._post_url,
            state=self._codec.encode(FrameState()),
        )

    def handle(self, token: Any, event: FrameEvent) -> FrameResponse:
        """
        Decode, transition and re-encode in one step.

        The frame protocol has no error channel, so any failure renders the
        fallback home screen instead of propagating.
        """
        try:
            state = self._codec.decode(token)
            next_state, presentation = self.transition(state, event)
            return FrameResponse(
                page=next_state.page,
                image=presentation.image,
                buttons=presentation.buttons,
                post_url=self._post_url,
                state=self._codec.encode(next_state),
            )
        except Exception:
            logger.warning("Frame transition failed, rendering fallback", exc_info=True)
            return self.fallback()
