"""
Client for the external value-transfer service.
"""
from dataclasses import dataclass
from typing import Optional
import httpx
import logging
from splitchain.core.config import settings
from splitchain.core.exceptions import InsufficientFundsError, TransferRejectedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferReceipt:
    """Confirmation of a completed transfer."""
    reference: str
    confirmed_amount: int


class HttpTransferClient:
    """
    Executes transfers through the value-transfer HTTP service.

    POST {base_url}/transfers with {"from", "to", "amount"} (amount as a
    base-unit digit string); the service answers with {"reference",
    "confirmed_amount"}. A 402 means the payer cannot cover the transfer;
    any other failure is a rejection. No retries happen here.
    """

    def __init__(
        self,
        base_url: str = None,
        api_key: str = None,
        timeout: float = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.base_url = (base_url or settings.TRANSFER_SERVICE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.TRANSFER_API_KEY
        self.timeout = timeout or settings.TRANSFER_TIMEOUT_SECONDS
        self.transport = transport

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def transfer(self, from_address: str, to_address: str, amount: int) -> TransferReceipt:
        """Move `amount` base units from one member to another."""
        payload = {"from": from_address, "to": to_address, "amount": str(amount)}
        logger.info(f"Requesting transfer of {amount} from {from_address} to {to_address}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    f"{self.base_url}/transfers",
                    json=payload,
                    headers=self._headers()
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            error_text = e.response.text
            logger.error(f"Transfer service error: {e.response.status_code} - {error_text}")
            if e.response.status_code == 402:
                raise InsufficientFundsError(f"Insufficient funds for transfer of {amount}")
            raise TransferRejectedError(f"Transfer rejected ({e.response.status_code}): {error_text}")
        except httpx.TimeoutException:
            logger.error("Transfer service request timed out")
            raise TransferRejectedError("Transfer service timed out")
        except httpx.HTTPError as e:
            logger.error(f"HTTP error with transfer service: {e}")
            raise TransferRejectedError(f"Transfer service unavailable: {e}")

        try:
            receipt = TransferReceipt(
                reference=str(data["reference"]),
                confirmed_amount=int(data["confirmed_amount"])
            )
            if receipt.confirmed_amount <= 0:
                raise ValueError(f"non-positive confirmed amount {receipt.confirmed_amount}")
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed transfer receipt: {data}", exc_info=True)
            raise TransferRejectedError(f"Malformed transfer receipt: {e}")

        logger.info(f"Transfer confirmed: {receipt.reference} ({receipt.confirmed_amount})")
        return receipt
