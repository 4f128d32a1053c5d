"""
Discord webhook notifier.
Sends executed trades to a Discord channel.
"""

from typing import Optional

import requests

from sentiment_agent.config import DISCORD_WEBHOOK_URL


def send_trade_notification(
    symbol: str,
    side: str,
    reason: str,
    notional: Optional[float] = None,
    confidence: Optional[float] = None,
    webhook_url: Optional[str] = None,
) -> bool:
    """
    Post a rich embed to Discord for an executed buy / sell.
    Silently skips if no webhook URL is configured; never raises.

    Returns:
        True when Discord accepted the message
    """
    url = DISCORD_WEBHOOK_URL if webhook_url is None else webhook_url
    if not url:
        return False

    color_map = {
        "buy": 0x2ECC71,   # green
        "sell": 0xE74C3C,  # red
    }

    fields = [
        {"name": "Side", "value": side.upper(), "inline": True},
        {"name": "Symbol", "value": symbol, "inline": True},
    ]
    if notional is not None:
        fields.append({"name": "Notional", "value": f"${notional:,.2f}", "inline": True})
    if confidence is not None:
        fields.append({"name": "Confidence", "value": f"{confidence:.0%}", "inline": True})

    embed = {
        "title": f"{'🟢 BUY' if side == 'buy' else '🔴 SELL'}  {symbol}",
        "description": reason[:2000],
        "color": color_map.get(side, 0x95A5A6),
        "fields": fields,
    }

    try:
        resp = requests.post(url, json={"embeds": [embed]}, timeout=10)
        resp.raise_for_status()
        print(f"[DISCORD] Notification sent for {symbol} ({side})")
        return True
    except requests.RequestException as exc:
        print(f"[DISCORD] Failed to send notification: {exc}")
        return False
