import json, socket
from contextlib import contextmanager, suppress
from threading import Event, Timer
import requests

DEFAULT_TIMEOUT_MS = 10_000
CHUNK_BYTES = 64_000


class RequestAborted(Exception):
    """The call did not complete before its deadline."""


@contextmanager
def deadline(timeout_ms: int, on_expire):
    timer = Timer(timeout_ms / 1000, on_expire)
    timer.daemon = True
    timer.start()
    try:
        yield timer
    finally:
        timer.cancel()

def _parse_json(content: bytes):
    try:
        return json.loads(content)
    except ValueError:
        return None

def _close_response(resp) -> None:
    # Shutting the socket down wakes a read blocked in another thread;
    # close() alone does not.
    conn = getattr(getattr(resp, 'raw', None), '_connection', None)
    sock = getattr(conn, 'sock', None)
    if sock is not None:
        with suppress(OSError):
            sock.shutdown(socket.SHUT_RDWR)
    resp.close()

def _read_body(resp, aborted: Event) -> bytes:
    content = b''
    for chunk in resp.iter_content(CHUNK_BYTES):
        if aborted.is_set():
            break
        content += chunk
    return content

def timed_request(method: str, url: str, *, timeout_ms: int = DEFAULT_TIMEOUT_MS,
                  session_factory=requests.Session, **kwargs):
    """Sends one request and returns a pair (response, deserialized JSON or None).

    The body is streamed. Once `timeout_ms` elapses the in-flight response and
    the session are closed and the call fails with `RequestAborted`. Any other
    transport error is raised unchanged. A body that is not JSON gives `None`,
    whatever the status.
    """
    session = session_factory()
    aborted = Event()
    inflight = []

    def abort():
        aborted.set()
        for resp in list(inflight):
            _close_response(resp)
        session.close()

    try:
        with deadline(timeout_ms, abort):
            try:
                resp = session.request(method, url, timeout=timeout_ms / 1000, stream=True, **kwargs)
                inflight.append(resp)
                if aborted.is_set():
                    _close_response(resp)
                content = _read_body(resp, aborted)
            except requests.Timeout as e:
                raise RequestAborted(f'{method} {url} timed out after {timeout_ms} ms') from e
            except Exception as e:
                if aborted.is_set():
                    raise RequestAborted(f'{method} {url} aborted after {timeout_ms} ms') from e
                raise
            if aborted.is_set():
                raise RequestAborted(f'{method} {url} aborted after {timeout_ms} ms')
            return resp, _parse_json(content)
    finally:
        for resp in inflight:
            resp.close()
        session.close()

def get_data(url: str, params: dict | None = None, timeout_ms: int = DEFAULT_TIMEOUT_MS, **kwargs):
    return timed_request('GET', url, params=params, timeout_ms=timeout_ms, **kwargs)

def post_data(url: str, data: dict | None = None, timeout_ms: int = DEFAULT_TIMEOUT_MS, **kwargs):
    headers = {'Content-Type': 'application/json'}
    return timed_request('POST', url, json=data if data is not None else {}, headers=headers,
                         timeout_ms=timeout_ms, **kwargs)
