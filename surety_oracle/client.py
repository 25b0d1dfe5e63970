# surety_oracle/client.py
"""
Status probe for a running oracle node.

  python -m surety_oracle.client                     # http://127.0.0.1:3000
  python -m surety_oracle.client http://host:3000
"""

import sys

import requests

DEFAULT_URL = "http://127.0.0.1:3000"
TIMEOUT = 5


def fetch_status(base_url=DEFAULT_URL, timeout=TIMEOUT) -> str:
    r = requests.get(f"{base_url.rstrip('/')}/api", timeout=timeout)
    r.raise_for_status()
    return r.json()["message"]


if __name__ == "__main__":
    url = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URL
    try:
        message = fetch_status(url)
    except requests.RequestException as e:
        print(f"  {url}: DOWN ({e})")
        sys.exit(1)
    print(f"  {url}: {message}")
