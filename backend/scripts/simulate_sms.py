#!/usr/bin/env python3
"""
SMS Gateway Simulator

Posts an inbound message to a running webhook the same way the SMS gateway
does (form-encoded From/Body/MediaUrl0) and prints the reply text.

Usage:
    # Search
    python scripts/simulate_sms.py "fence 77002"

    # Claim from the previous search
    python scripts/simulate_sms.py 1 --phone +15550001111

    # Photo message
    python scripts/simulate_sms.py "" --media-url https://example.com/leak.jpg

    # Interactive session
    python scripts/simulate_sms.py --interactive
"""

import asyncio
import argparse
import logging
import re
from typing import Optional
from xml.sax.saxutils import unescape

import httpx

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8000/api/sms/inbound"
DEFAULT_PHONE = "+15550001111"

MESSAGE_PATTERN = re.compile(r"<Message>(.*)</Message>", re.DOTALL)
XML_ENTITIES = {"&quot;": '"', "&apos;": "'"}


def extract_message(document: str) -> str:
    """Pull the reply text out of a TwiML document."""
    match = MESSAGE_PATTERN.search(document)
    if not match:
        return document
    return unescape(match.group(1), XML_ENTITIES)


async def send(
    client: httpx.AsyncClient,
    url: str,
    phone: str,
    body: str,
    media_url: Optional[str] = None,
) -> str:
    data = {"From": phone, "To": "+15550000000", "Body": body}
    if media_url:
        data["NumMedia"] = "1"
        data["MediaUrl0"] = media_url

    response = await client.post(url, data=data)
    if response.status_code != 200:
        return f"HTTP {response.status_code}: {response.text}"
    return extract_message(response.text)


async def interactive(client: httpx.AsyncClient, url: str, phone: str) -> None:
    print(f"Texting {url} as {phone}. Empty line to quit.")
    while True:
        try:
            body = input("> ").strip()
        except EOFError:
            break
        if not body:
            break
        print(await send(client, url, phone, body))


async def main() -> None:
    parser = argparse.ArgumentParser(description="Send a simulated SMS to the job search webhook")
    parser.add_argument("body", nargs="?", default="help", help="Message text")
    parser.add_argument("--url", default=DEFAULT_URL, help="Webhook URL")
    parser.add_argument("--phone", default=DEFAULT_PHONE, help="Sender phone number")
    parser.add_argument("--media-url", help="Attach a photo URL (MediaUrl0)")
    parser.add_argument("--interactive", action="store_true", help="Read messages from stdin")

    args = parser.parse_args()

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            if args.interactive:
                await interactive(client, args.url, args.phone)
            else:
                print(await send(client, args.url, args.phone, args.body, args.media_url))
        except httpx.TransportError as e:
            logger.error(f"Could not reach {args.url}: {e}")


if __name__ == "__main__":
    asyncio.run(main())
