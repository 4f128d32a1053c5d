"""Cloudflare AI Gateway (gateway-routed) backend via its OpenAI-compatible endpoint."""

from typing import Dict

from .openai_raw import OpenAICompatibleProvider

GATEWAY_URL_TEMPLATE = "https://gateway.ai.cloudflare.com/v1/{account_id}/{gateway_id}/compat"


class CloudflareGatewayProvider(OpenAICompatibleProvider):
    """Routes completions through an AI Gateway.

    Model ids carry the upstream provider prefix, e.g. ``openai/gpt-4o-mini``.
    The upstream key goes in Authorization, the gateway token in
    ``cf-aig-authorization``.
    """

    name = "cloudflare-gateway"

    def __init__(
        self,
        account_id: str,
        gateway_id: str,
        gateway_token: str,
        api_key: str = "",
        model: str = "openai/gpt-4o-mini",
    ):
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=GATEWAY_URL_TEMPLATE.format(account_id=account_id, gateway_id=gateway_id),
        )
        self.gateway_token = gateway_token

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if self.gateway_token:
            headers["cf-aig-authorization"] = f"Bearer {self.gateway_token}"
        return headers
