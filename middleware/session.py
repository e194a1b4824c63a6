# middleware/session.py
"""
Middleware de sessão do servidor.

O cookie guarda apenas um sid opaco assinado (itsdangerous); o dicionário
da sessão fica no SessionStore. `request.session` funciona como na
SessionMiddleware do Starlette, então o cliente OAuth do authlib usa a mesma
sessão.
"""
import json
import logging
import typing

import itsdangerous
from itsdangerous.exc import BadSignature
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection, Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.security import generate_session_id
from storage.session_store import SessionStore

logger = logging.getLogger(__name__)

ROTATE_SCOPE_KEY = "gymsync.session_rotate"


def regenerate_session(request: Request) -> None:
    """Emite um novo sid na resposta (usar ao mudar o principal da sessão)."""
    request.scope[ROTATE_SCOPE_KEY] = True


def _snapshot(data: dict) -> str:
    return json.dumps(data, sort_keys=True, default=str)


class ServerSessionMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        secret_key: str,
        session_cookie: str = "gymsync.sid",
        max_age: int = 24 * 60 * 60,
        path: str = "/",
        same_site: typing.Literal["lax", "strict", "none"] = "lax",
        https_only: bool = False,
    ) -> None:
        self.app = app
        self.store = store
        self.signer = itsdangerous.TimestampSigner(str(secret_key))
        self.session_cookie = session_cookie
        self.max_age = max_age
        self.path = path
        self.security_flags = "httponly; samesite=" + same_site
        if https_only:
            self.security_flags += "; secure"

    async def _load(self, connection: HTTPConnection) -> typing.Tuple[typing.Optional[str], dict]:
        raw = connection.cookies.get(self.session_cookie)
        if not raw:
            return None, {}
        try:
            sid = self.signer.unsign(raw.encode("utf-8"), max_age=self.max_age).decode("utf-8")
        except BadSignature:
            return None, {}
        data = await run_in_threadpool(self.store.get, sid)
        if data is None:
            return None, {}
        return sid, data

    def _cookie(self, value: str, expired: bool = False) -> str:
        if expired:
            lifetime = "expires=Thu, 01 Jan 1970 00:00:00 GMT; "
        else:
            lifetime = f"Max-Age={self.max_age}; "
        return f"{self.session_cookie}={value}; path={self.path}; {lifetime}{self.security_flags}"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        connection = HTTPConnection(scope)
        sid, initial = await self._load(connection)
        scope["session"] = dict(initial)
        initial_snapshot = _snapshot(initial)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                session = scope["session"]
                rotate = scope.get(ROTATE_SCOPE_KEY, False)
                headers = MutableHeaders(scope=message)
                if session:
                    current_sid = sid
                    if current_sid is None or rotate:
                        if current_sid is not None:
                            await run_in_threadpool(self.store.destroy, current_sid)
                        current_sid = generate_session_id()
                    if current_sid != sid or _snapshot(session) != initial_snapshot:
                        await run_in_threadpool(self.store.set, current_sid, session, self.max_age)
                        signed = self.signer.sign(current_sid.encode("utf-8")).decode("utf-8")
                        headers.append("Set-Cookie", self._cookie(signed))
                elif sid is not None:
                    await run_in_threadpool(self.store.destroy, sid)
                    headers.append("Set-Cookie", self._cookie("null", expired=True))
            await send(message)

        await self.app(scope, receive, send_wrapper)
