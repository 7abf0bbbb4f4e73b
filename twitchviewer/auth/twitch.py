"""Twitch OAuth2 authorization-code login.

One ``TwitchLogin`` is built per request and walks an explicit state machine:

    IDLE -> REDIRECTED                                   (GET /api/auth/twitch)
    IDLE -> CALLBACK_RECEIVED -> TOKEN_EXCHANGED
         -> PROFILE_FETCHED -> SESSION_ESTABLISHED       (GET /api/auth/twitch/callback)

Every failure lands in a terminal failure state and raises
``TwitchOAuthError``. Each HTTP exchange is attempted once.
"""

import enum
import hmac
import logging
import secrets
from urllib.parse import urlencode

import requests

from twitchviewer.auth.login import establish_session
from twitchviewer.auth.passwords import hash_password
from twitchviewer.errors import UpstreamError

logger = logging.getLogger(__name__)

SESSION_STATE_KEY = 'twitch_oauth_state'


class OAuthState(enum.Enum):
    IDLE = 'idle'
    REDIRECTED = 'redirected-to-provider'
    CALLBACK_RECEIVED = 'callback-received'
    TOKEN_EXCHANGED = 'token-exchanged'
    PROFILE_FETCHED = 'profile-fetched'
    SESSION_ESTABLISHED = 'session-established'

    NOT_CONFIGURED = 'not-configured'
    STATE_MISMATCH = 'state-mismatch'
    PROVIDER_DENIED = 'provider-denied'
    TOKEN_EXCHANGE_FAILED = 'token-exchange-failed'
    PROFILE_FETCH_FAILED = 'profile-fetch-failed'
    ACCOUNT_CONFLICT = 'account-conflict'


FAILURE_STATES = frozenset({
    OAuthState.NOT_CONFIGURED,
    OAuthState.STATE_MISMATCH,
    OAuthState.PROVIDER_DENIED,
    OAuthState.TOKEN_EXCHANGE_FAILED,
    OAuthState.PROFILE_FETCH_FAILED,
    OAuthState.ACCOUNT_CONFLICT,
})

TRANSITIONS = {
    OAuthState.IDLE: {OAuthState.REDIRECTED, OAuthState.CALLBACK_RECEIVED, OAuthState.NOT_CONFIGURED},
    OAuthState.CALLBACK_RECEIVED: {
        OAuthState.TOKEN_EXCHANGED,
        OAuthState.STATE_MISMATCH,
        OAuthState.PROVIDER_DENIED,
        OAuthState.TOKEN_EXCHANGE_FAILED,
    },
    OAuthState.TOKEN_EXCHANGED: {OAuthState.PROFILE_FETCHED, OAuthState.PROFILE_FETCH_FAILED},
    OAuthState.PROFILE_FETCHED: {OAuthState.SESSION_ESTABLISHED, OAuthState.ACCOUNT_CONFLICT},
}


class TwitchOAuthError(UpstreamError):

    def __init__(self, message, state, status_code):
        super().__init__(message, status_code)
        self.state = state


def _failure_status(exc):
    """400 when Twitch rejected the request, 500 for transport errors and Twitch outages."""
    response = getattr(exc, 'response', None)
    if isinstance(exc, requests.HTTPError) and response is not None and 400 <= response.status_code < 500:
        return 400
    return 500


class TwitchClient:

    def __init__(self, client_id, client_secret, redirect_uri, scopes='user:read:email',
                 authorize_endpoint='https://id.twitch.tv/oauth2/authorize',
                 token_endpoint='https://id.twitch.tv/oauth2/token',
                 users_endpoint='https://api.twitch.tv/helix/users',
                 timeout=10, http=None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes
        self.authorize_endpoint = authorize_endpoint
        self.token_endpoint = token_endpoint
        self.users_endpoint = users_endpoint
        self.timeout = timeout
        self.http = http or requests.Session()

    @classmethod
    def from_config(cls, config):
        return cls(
            client_id=config['TWITCH_CLIENT_ID'],
            client_secret=config['TWITCH_CLIENT_SECRET'],
            redirect_uri=config['TWITCH_REDIRECT_URI'],
            scopes=config['TWITCH_SCOPES'],
            authorize_endpoint=config['TWITCH_AUTHORIZE_URL'],
            token_endpoint=config['TWITCH_TOKEN_URL'],
            users_endpoint=config['TWITCH_USERS_URL'],
            timeout=config['TWITCH_HTTP_TIMEOUT'],
        )

    @property
    def configured(self):
        return bool(self.client_id and self.client_secret and self.redirect_uri)

    def authorization_url(self, state):
        params = {
            'client_id': self.client_id,
            'redirect_uri': self.redirect_uri,
            'response_type': 'code',
            'scope': self.scopes,
            'state': state,
        }
        return f"{self.authorize_endpoint}?{urlencode(params)}"

    def exchange_code(self, code):
        response = self.http.post(self.token_endpoint, data={
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'code': code,
            'grant_type': 'authorization_code',
            'redirect_uri': self.redirect_uri,
        }, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def fetch_profile(self, access_token):
        response = self.http.get(self.users_endpoint, headers={
            'Authorization': f'Bearer {access_token}',
            'Client-Id': self.client_id,
        }, timeout=self.timeout)
        response.raise_for_status()
        users = response.json().get('data') or []
        if not users:
            raise ValueError("Twitch returned no user profile")
        return users[0]


class TwitchLogin:

    def __init__(self, client, storage):
        self.client = client
        self.storage = storage
        self.state = OAuthState.IDLE

    def _advance(self, new_state):
        allowed = TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise RuntimeError(f"Invalid OAuth transition {self.state.value} -> {new_state.value}")
        logger.info(f"Twitch OAuth: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _fail(self, new_state, message, status_code):
        self._advance(new_state)
        raise TwitchOAuthError(message, new_state, status_code)

    def begin(self, session):
        """Stores a CSRF state token in the session and returns the Twitch authorize URL."""
        if not self.client.configured:
            self._fail(OAuthState.NOT_CONFIGURED, "Twitch login is not configured", 500)
        state_token = secrets.token_urlsafe(32)
        session[SESSION_STATE_KEY] = state_token
        self._advance(OAuthState.REDIRECTED)
        return self.client.authorization_url(state_token)

    def complete(self, session, params):
        """Handles the callback query; returns the logged-in user record."""
        self._advance(OAuthState.CALLBACK_RECEIVED)

        expected = session.pop(SESSION_STATE_KEY, None)
        received = params.get('state')
        if not expected or not received or not hmac.compare_digest(expected.encode(), received.encode()):
            self._fail(OAuthState.STATE_MISMATCH, "Invalid OAuth state", 400)

        code = params.get('code')
        if params.get('error') or not code:
            message = params.get('error_description') or "Twitch authorization was not granted"
            self._fail(OAuthState.PROVIDER_DENIED, message, 400)

        try:
            tokens = self.client.exchange_code(code)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Twitch token exchange failed: {str(e)}")
            self._fail(OAuthState.TOKEN_EXCHANGE_FAILED, "Failed to exchange Twitch authorization code", _failure_status(e))
        if not tokens.get('access_token'):
            self._fail(OAuthState.TOKEN_EXCHANGE_FAILED, "Twitch returned no access token", 500)
        self._advance(OAuthState.TOKEN_EXCHANGED)

        try:
            profile = self.client.fetch_profile(tokens['access_token'])
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Twitch profile fetch failed: {str(e)}")
            self._fail(OAuthState.PROFILE_FETCH_FAILED, "Failed to fetch Twitch profile", _failure_status(e))
        self._advance(OAuthState.PROFILE_FETCHED)

        user = self._upsert_user(profile, tokens)
        establish_session(user)
        self._advance(OAuthState.SESSION_ESTABLISHED)
        return user

    def _upsert_user(self, profile, tokens):
        twitch_id = str(profile['id'])
        login = profile.get('login') or f"twitch_{twitch_id}"
        token_fields = {
            'twitch_login': login,
            'twitch_access_token': tokens.get('access_token'),
            'twitch_refresh_token': tokens.get('refresh_token'),
        }

        existing = self.storage.get_user_by_twitch_id(twitch_id)
        if existing is not None:
            return self.storage.update_user(existing['id'], token_fields)

        email = profile.get('email')
        if not email:
            self._fail(OAuthState.ACCOUNT_CONFLICT, "Twitch account has no email address", 400)
        if self.storage.get_user_by_email(email) is not None:
            self._fail(OAuthState.ACCOUNT_CONFLICT,
                       "An account with this email already exists. Log in with your password.", 400)

        user = self.storage.create_user({
            'username': self._available_username(login),
            'email': email,
            # unusable until a password reset; Twitch is the login method
            'password': hash_password(secrets.token_urlsafe(32)),
            'twitch_id': twitch_id,
            **token_fields,
        })
        logger.info(f"Created user {user['id']} from Twitch account {twitch_id}")
        return user

    def _available_username(self, login):
        base = login[:45]
        candidate = base
        suffix = 1
        while self.storage.get_user_by_username(candidate) is not None:
            suffix += 1
            candidate = f"{base}{suffix}"
        return candidate
