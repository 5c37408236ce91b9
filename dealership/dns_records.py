"""Point a subdomain at the hosting IP through the GoDaddy DNS API.

One-off deployment helper::

    GODADDY_API_KEY=... GODADDY_API_SECRET=... dealership-dns --name bendavis --ip 76.76.21.21

Looks the record up first and then either creates it (PATCH on the domain's
record list) or replaces it (PUT on the type/name pair). No retries.
"""
from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import requests
from dotenv import load_dotenv

logger = logging.getLogger("dealership.dns")

GODADDY_API = "https://api.godaddy.com"
DEFAULT_DOMAIN = "thefortaiagency.ai"
DEFAULT_SUBDOMAIN = "bendavis"
DEFAULT_IP = "76.76.21.21"  # Vercel
DEFAULT_TTL = 600


class DNSConfigurationError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GoDaddyClient:
    def __init__(self, api_key: str, api_secret: str, base_url: str = GODADDY_API,
                 timeout: float = 30, session: Optional[requests.Session] = None):
        if not api_key or not api_secret:
            raise DNSConfigurationError("GoDaddy API key and secret are required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"sso-key {api_key}:{api_secret}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _check(self, resp: requests.Response, action: str, ok=(200,)) -> None:
        if resp.status_code not in ok:
            raise DNSConfigurationError(
                f"{action} failed with HTTP {resp.status_code}", resp.status_code, resp.text
            )

    def get_record(self, domain: str, rtype: str, name: str) -> Optional[List[Dict[str, Any]]]:
        """Existing records for (type, name), or None when GoDaddy answers 404."""
        resp = self.session.get(self._url(f"/v1/domains/{domain}/records/{rtype}/{name}"), timeout=self.timeout)
        if resp.status_code == 404:
            return None
        self._check(resp, "Record lookup")
        records = resp.json()
        # GoDaddy answers 200 with [] for a missing name on some domains
        return records or None

    def create_record(self, domain: str, rtype: str, name: str, data: str, ttl: int = DEFAULT_TTL) -> None:
        payload = [{"type": rtype, "name": name, "data": data, "ttl": ttl}]
        resp = self.session.patch(self._url(f"/v1/domains/{domain}/records"), json=payload, timeout=self.timeout)
        self._check(resp, "Record create", ok=(200, 201, 204))

    def update_record(self, domain: str, rtype: str, name: str, data: str, ttl: int = DEFAULT_TTL) -> None:
        payload = [{"data": data, "ttl": ttl}]
        resp = self.session.put(
            self._url(f"/v1/domains/{domain}/records/{rtype}/{name}"), json=payload, timeout=self.timeout
        )
        self._check(resp, "Record update", ok=(200, 204))

    def configure_record(self, domain: str, rtype: str, name: str, data: str, ttl: int = DEFAULT_TTL) -> str:
        """Create or update; returns "created" or "updated"."""
        existing = self.get_record(domain, rtype, name)
        if existing is None:
            logger.info("No existing %s record for %s.%s, creating", rtype, name, domain)
            self.create_record(domain, rtype, name, data, ttl)
            return "created"
        logger.info("Found existing %s record for %s.%s, updating", rtype, name, domain)
        self.update_record(domain, rtype, name, data, ttl)
        return "updated"


def _interactive() -> bool:
    return sys.stdin.isatty()


def read_credentials() -> Tuple[str, str]:
    """Key and secret from the environment, asking on the terminal for whatever is missing."""
    api_key = os.getenv("GODADDY_API_KEY", "").strip()
    api_secret = os.getenv("GODADDY_API_SECRET", "").strip()
    if api_key and api_secret:
        logger.info("Using GoDaddy credentials from environment variables")
        return api_key, api_secret
    if not _interactive():
        return api_key, api_secret

    print("GoDaddy API credentials needed. Get them at: https://developer.godaddy.com/keys")
    if not api_key:
        api_key = input("Enter your GoDaddy API Key: ").strip()
    if not api_secret:
        api_secret = getpass.getpass("Enter your GoDaddy API Secret: ").strip()
    return api_key, api_secret


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Configure a GoDaddy DNS record for the dealership site")
    p.add_argument("--domain", type=str, default=DEFAULT_DOMAIN, help="Registered domain")
    p.add_argument("--name", type=str, default=DEFAULT_SUBDOMAIN, help="Record name (subdomain)")
    p.add_argument("--ip", type=str, default=DEFAULT_IP, help="Record data, e.g. the hosting IP")
    p.add_argument("--type", dest="rtype", type=str, default="A", help="Record type")
    p.add_argument("--ttl", type=int, default=DEFAULT_TTL)
    p.add_argument("--mode", choices=["auto", "create", "update", "check"], default="auto",
                   help="auto = look up first, then create or update")
    p.add_argument("--api-url", type=str, default=os.getenv("GODADDY_API_URL", GODADDY_API))
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    args = parse_args(argv)
    fqdn = f"{args.name}.{args.domain}"

    api_key, api_secret = read_credentials()

    try:
        client = GoDaddyClient(api_key, api_secret, base_url=args.api_url)
        if args.mode == "check":
            records = client.get_record(args.domain, args.rtype, args.name)
            if records is None:
                print(f"{fqdn}: no {args.rtype} record")
            else:
                for r in records:
                    print(f"{fqdn}: {r.get('type', args.rtype)} -> {r.get('data')} (ttl {r.get('ttl')})")
            return 0
        if args.mode == "create":
            client.create_record(args.domain, args.rtype, args.name, args.ip, args.ttl)
            outcome = "created"
        elif args.mode == "update":
            client.update_record(args.domain, args.rtype, args.name, args.ip, args.ttl)
            outcome = "updated"
        else:
            outcome = client.configure_record(args.domain, args.rtype, args.name, args.ip, args.ttl)
    except DNSConfigurationError as e:
        logger.error("%s %s", e, e.body)
        return 1
    except requests.RequestException as e:
        logger.error("Request to GoDaddy failed: %s", e)
        return 1

    print(f"DNS record {outcome}: {fqdn} {args.rtype} -> {args.ip} (ttl {args.ttl})")
    print("Propagation usually takes 5-10 minutes. Verify with:")
    print(f"  dig {fqdn}")
    print(f"Site: https://{fqdn}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
