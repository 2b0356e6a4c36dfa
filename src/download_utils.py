import logging
import time
from collections import namedtuple
from datetime import datetime

import requests
from requests.adapters import HTTPAdapter
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from configs import MAX_REDIRECTS, READ_CHUNK_SIZE
from errors import InvalidURL, ReadFailed, RequestFailed, TooManyRedirects


FetchResult = namedtuple("FetchResult", ["url", "status", "content_type", "body", "fetched_at"])


def build_session(config):
    """One pooled session shared by every worker for the whole run."""
    session = requests.Session()
    session.headers.update({
        "User-Agent": config.user_agent,
        "Accept": "*/*",
        "Accept-Encoding": "gzip, deflate",
    })
    for name, value in config.headers:
        session.headers[name] = value
    adapter = HTTPAdapter(pool_connections=config.concurrency, pool_maxsize=config.concurrency)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.max_redirects = MAX_REDIRECTS
    session.verify = not config.insecure
    if config.insecure:
        urllib3.disable_warnings(InsecureRequestWarning)
    return session


def read_capped(resp, url, max_size, deadline=None):
    """
    Read at most `max_size` bytes of the body as sent on the wire (no
    gzip/deflate decoding). Anything past the cap is dropped without error.
    """
    chunks = []
    total = 0
    try:
        for chunk in resp.raw.stream(READ_CHUNK_SIZE, decode_content=False):
            if not chunk:
                continue
            take = chunk[:max_size - total]
            chunks.append(take)
            total += len(take)
            if total >= max_size:
                logging.debug("Body capped at %d bytes: %s", max_size, url)
                break
            if deadline is not None and time.monotonic() > deadline:
                raise RequestFailed(url, "timeout while reading body")
    except (requests.exceptions.RequestException, urllib3.exceptions.HTTPError, OSError) as exc:
        raise ReadFailed(url, str(exc)) from exc
    return b"".join(chunks)


def fetch_url(session, url, config):
    start = time.monotonic()
    try:
        resp = session.get(url, timeout=config.timeout, stream=True)
    except requests.exceptions.TooManyRedirects as exc:
        raise TooManyRedirects(url, f"exceeded {MAX_REDIRECTS} redirects") from exc
    except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema) as exc:
        raise InvalidURL(url, str(exc)) from exc
    except requests.exceptions.RequestException as exc:
        raise RequestFailed(url, str(exc)) from exc
    except ValueError as exc:
        # urllib3/idna reject some hosts before requests can wrap them
        raise InvalidURL(url, str(exc)) from exc

    try:
        body = read_capped(resp, url, config.max_size, deadline=start + config.timeout)
    finally:
        resp.close()

    ctype = resp.headers.get("Content-Type", "") or ""
    return FetchResult(url, resp.status_code, ctype, body, datetime.now().astimezone())
