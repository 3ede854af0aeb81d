"""
Exchange SDK capabilities backed by py-clob-client.

The L1 credential handshake and EIP-712 order signing are delegated to
the SDK. These calls block, so callers run them in an executor.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from py_clob_client.client import ClobClient
from py_clob_client.clob_types import CreateOrderOptions, OrderArgs
from py_clob_client.order_builder.builder import OrderBuilder
from py_clob_client.signer import Signer

from .auth import Secret
from .constants import DEFAULT_CHAIN_ID, SIGNATURE_TYPE_POLY_GNOSIS_SAFE
from .models.config import ConnectionConfig
from .models.orders import UnsignedOrder


class SignerIdentity:
    """Private key bound to a chain id. Immutable after construction."""

    def __init__(self, private_key: str, chain_id: int = DEFAULT_CHAIN_ID):
        if not private_key:
            raise ValueError("Private key cannot be empty")
        self._private_key = Secret(private_key)
        self._chain_id = chain_id
        try:
            self._signer = Signer(private_key, chain_id)
        except Exception:
            raise ValueError("Private key is not a valid secp256k1 key") from None

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def address(self) -> str:
        return self._signer.address()

    @property
    def signer(self) -> Signer:
        return self._signer

    def reveal_private_key(self) -> str:
        return self._private_key.reveal()

    def __repr__(self) -> str:
        return f"SignerIdentity(address={self.address!r}, chain_id={self._chain_id})"


class SdkCredentialSource:
    """Create-or-derive handshake against the credential endpoint."""

    def __init__(self, identity: SignerIdentity, config: ConnectionConfig):
        self._identity = identity
        self._config = config

    def create_or_derive(self) -> Any:
        """Blocking call; returns the SDK's ApiCreds."""
        client = ClobClient(
            self._config.base_url,
            chain_id=self._identity.chain_id,
            key=self._identity.reveal_private_key(),
            signature_type=self._config.signature_type,
            funder=self._config.funder,
        )
        return client.create_or_derive_api_creds()


def tick_size_key(tick_size: Decimal) -> str:
    """Render a tick size the way the order builder keys its rounding table."""
    return format(tick_size.normalize(), "f")


class SdkOrderSigner:
    """Builds and signs orders with the SDK's order builder."""

    def __init__(
        self,
        identity: SignerIdentity,
        signature_type: int = SIGNATURE_TYPE_POLY_GNOSIS_SAFE,
        funder: Optional[str] = None,
    ):
        self._builder = OrderBuilder(
            identity.signer,
            sig_type=signature_type,
            funder=funder or identity.address,
        )

    def sign_order(self, unsigned: UnsignedOrder) -> Dict[str, Any]:
        """Blocking call; returns the signed order as a plain mapping."""
        request = unsigned.request
        metadata = unsigned.metadata
        # The builder takes floats and does its own tick rounding
        order_args = OrderArgs(
            token_id=str(request.token_id),
            price=float(request.price),
            size=float(request.size),
            side=request.side.value,
            fee_rate_bps=metadata.fee_rate_bps,
        )
        options = CreateOrderOptions(
            tick_size=tick_size_key(metadata.tick_size),
            neg_risk=metadata.neg_risk,
        )
        signed = self._builder.create_order(order_args, options)
        return signed.dict()
