# Resend HTTP API sender: POST /emails with a bearer key, over httpx.


import httpx
import structlog

from formrelay.delivery.protocol import OutgoingEmail
from formrelay.exceptions import DeliveryError

logger = structlog.get_logger(__name__)


class ResendSender:
    """Sends email through the Resend REST API.

    Owns an httpx.AsyncClient unless one is passed in (tests inject a client
    with a mocked transport). Call aclose() on shutdown.
    """

    name = "resend"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.resend.com",
        timeout_seconds: float = 20.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            logger.warning("resend_api_key_missing", hint="Set RESEND_API_KEY; every send will fail")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._endpoint = f"{base_url.rstrip('/')}/emails"
        self._headers = {"Authorization": f"Bearer {api_key}"}

    async def send(self, email: OutgoingEmail) -> None:
        payload: dict[str, object] = {
            "from": email.sender,
            "to": [email.to],
            "subject": email.subject,
            "html": email.html,
        }
        if email.reply_to:
            payload["reply_to"] = email.reply_to

        try:
            response = await self._client.post(self._endpoint, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise DeliveryError(self.name, f"{type(e).__name__}: {e}") from e

        if response.is_error:
            raise DeliveryError(self.name, _error_message(response))

        logger.debug("resend_accepted", to=email.to, id=_response_id(response))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    """Provider error message if the body carries one, else the status."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"


def _response_id(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("id") if isinstance(body, dict) else None
