"""Server-side sessions.

The cookie carries only a signed session id; session data lives in a
``SessionStore`` handed to the app factory. Plain logins get a
browser-session cookie, "remember me" sessions (``session.permanent``) get a
cookie that lives for ``PERMANENT_SESSION_LIFETIME``.
"""

import copy
import logging
import secrets
import threading
from abc import ABC, abstractmethod
from datetime import datetime

from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from werkzeug.datastructures import CallbackDict

logger = logging.getLogger(__name__)


def _new_sid():
    return secrets.token_urlsafe(32)


class SessionStore(ABC):

    @abstractmethod
    def get(self, sid):
        """Session data for ``sid``, or None when unknown or expired."""

    @abstractmethod
    def set(self, sid, data, ttl):
        ...

    @abstractmethod
    def destroy(self, sid):
        ...

    @abstractmethod
    def touch(self, sid, ttl):
        """Pushes the expiry of an existing session ``ttl`` into the future."""


class MemorySessionStore(SessionStore):
    """Process-local store; sessions do not survive a restart or span instances."""

    def __init__(self, clock=datetime.utcnow):
        self._clock = clock
        self._sessions = {}
        self._lock = threading.Lock()

    def get(self, sid):
        with self._lock:
            self._purge()
            entry = self._sessions.get(sid)
            return copy.deepcopy(entry[1]) if entry else None

    def set(self, sid, data, ttl):
        with self._lock:
            self._sessions[sid] = (self._clock() + ttl, copy.deepcopy(data))

    def destroy(self, sid):
        with self._lock:
            self._sessions.pop(sid, None)

    def touch(self, sid, ttl):
        with self._lock:
            entry = self._sessions.get(sid)
            if entry:
                self._sessions[sid] = (self._clock() + ttl, entry[1])

    def __len__(self):
        with self._lock:
            self._purge()
            return len(self._sessions)

    def _purge(self):
        now = self._clock()
        for sid in [sid for sid, (expires, _) in self._sessions.items() if expires <= now]:
            self._sessions.pop(sid, None)


class ServerSession(CallbackDict, SessionMixin):

    def __init__(self, initial=None, sid=None, new=False):
        def on_update(self):
            self.modified = True
        CallbackDict.__init__(self, initial, on_update)
        self.sid = sid
        self.new = new
        self.modified = False
        self.previous_sid = None

    def regenerate(self):
        """Moves the data to a fresh id; the old id is destroyed when the response is saved."""
        if not self.new and self.previous_sid is None:
            self.previous_sid = self.sid
        self.sid = _new_sid()
        self.modified = True


class ServerSideSessionInterface(SessionInterface):
    session_class = ServerSession
    salt = 'twitchviewer.session'

    def __init__(self, store):
        self.store = store

    def _signer(self, app):
        return Signer(app.secret_key, salt=self.salt)

    def open_session(self, app, request):
        cookie = request.cookies.get(self.get_cookie_name(app))
        if cookie:
            try:
                sid = self._signer(app).unsign(cookie).decode('utf-8')
            except BadSignature:
                logger.warning("Rejected session cookie with a bad signature")
                sid = None
            if sid:
                data = self.store.get(sid)
                if data is not None:
                    return self.session_class(data, sid=sid)
        return self.session_class(sid=_new_sid(), new=True)

    def save_session(self, app, session, response):
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)
        secure = self.get_cookie_secure(app)
        samesite = self.get_cookie_samesite(app)
        httponly = self.get_cookie_httponly(app)

        if session.previous_sid:
            self.store.destroy(session.previous_sid)

        if not session:
            if session.modified and not session.new:
                self.store.destroy(session.sid)
                response.delete_cookie(name, domain=domain, path=path, secure=secure,
                                       samesite=samesite, httponly=httponly)
            return

        if session.permanent:
            ttl = app.permanent_session_lifetime
        else:
            ttl = app.config['SESSION_IDLE_TIMEOUT']
        if session.modified or session.new:
            self.store.set(session.sid, dict(session), ttl)
        else:
            self.store.touch(session.sid, ttl)

        if not self.should_set_cookie(app, session):
            return
        response.set_cookie(
            name,
            self._signer(app).sign(session.sid.encode('utf-8')).decode('utf-8'),
            expires=self.get_expiration_time(app, session),
            httponly=httponly,
            domain=domain,
            path=path,
            secure=secure,
            samesite=samesite,
        )
        response.vary.add('Cookie')
