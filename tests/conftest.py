"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Fake ports (renderer, fee oracle, wallet)
- Minting pipeline and frame state machine wired to the fakes
"""

import pytest

from src.domain.frame import FrameStateCodec, FrameStateMachine
from src.domain.minting import MintingPipeline
from tests.fakes import FakeFeeOracle, FakeRenderer, FakeWallet, make_chain

APP_URL = "https://names.example.com"
POST_URL = f"{APP_URL}/v1/frame"
MARKETPLACE_URL = "https://opensea.io/collection/farcaster-names"


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def fee_oracle() -> FakeFeeOracle:
    return FakeFeeOracle()


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def codec() -> FrameStateCodec:
    return FrameStateCodec()


@pytest.fixture
def machine(renderer: FakeRenderer) -> FrameStateMachine:
    return FrameStateMachine(
        renderer=renderer,
        app_url=APP_URL,
        post_url=POST_URL,
        marketplace_url=MARKETPLACE_URL,
        domain_suffix="farcaster.celo",
    )


@pytest.fixture
def pipeline(fee_oracle: FakeFeeOracle) -> MintingPipeline:
    return MintingPipeline(
        fee_oracle=fee_oracle,
        chain=make_chain(),
        receipt_poll_interval=0.001,
        receipt_timeout=1.0,
    )
