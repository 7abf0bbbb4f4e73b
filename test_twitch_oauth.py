from urllib.parse import parse_qs, urlparse

import pytest
import requests

from conftest import register
from twitchviewer.auth.twitch import OAuthState, TwitchClient, TwitchLogin, TwitchOAuthError

PROFILE = {'id': '4242', 'login': 'streamer', 'display_name': 'Streamer', 'email': 'streamer@example.com'}


@pytest.fixture()
def twitch(monkeypatch):
    """Stubs the Twitch HTTP calls and records what was exchanged."""
    calls = {'exchange': [], 'profile': []}
    state = {'profile': dict(PROFILE), 'exchange_error': None, 'profile_error': None}

    def exchange_code(self, code):
        calls['exchange'].append(code)
        if state['exchange_error'] is not None:
            raise state['exchange_error']
        return {'access_token': 'access-123', 'refresh_token': 'refresh-456', 'token_type': 'bearer'}

    def fetch_profile(self, access_token):
        calls['profile'].append(access_token)
        if state['profile_error'] is not None:
            raise state['profile_error']
        return state['profile']

    monkeypatch.setattr(TwitchClient, 'exchange_code', exchange_code)
    monkeypatch.setattr(TwitchClient, 'fetch_profile', fetch_profile)
    calls['state'] = state
    return calls


def http_error(status):
    response = requests.Response()
    response.status_code = status
    return requests.HTTPError(f'{status} error', response=response)


def start(client):
    response = client.get('/api/auth/twitch')
    assert response.status_code == 302
    return parse_qs(urlparse(response.headers['Location']).query)['state'][0]


def test_redirects_to_twitch_with_state(client):
    response = client.get('/api/auth/twitch')
    assert response.status_code == 302

    location = urlparse(response.headers['Location'])
    assert f'{location.scheme}://{location.netloc}{location.path}' == 'https://id.twitch.tv/oauth2/authorize'
    query = parse_qs(location.query)
    assert query['client_id'] == ['test-client-id']
    assert query['redirect_uri'] == ['http://localhost/api/auth/twitch/callback']
    assert query['response_type'] == ['code']
    assert query['scope'] == ['user:read:email']
    assert len(query['state'][0]) >= 32


def test_callback_creates_user_and_logs_in(client, twitch, storage):
    state = start(client)
    response = client.get(f'/api/auth/twitch/callback?code=the-code&state={state}')

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/dashboard')
    assert twitch['exchange'] == ['the-code']
    assert twitch['profile'] == ['access-123']

    body = client.get('/api/user').get_json()
    assert body['username'] == 'streamer'
    assert body['twitchId'] == '4242'
    assert body['emailVerified'] is False
    assert 'twitchAccessToken' not in body

    user = storage.get_user_by_twitch_id('4242')
    assert user['twitch_access_token'] == 'access-123'
    assert user['role'] == 'user'


def test_returning_twitch_user_is_updated_not_duplicated(app, twitch, storage):
    for _ in range(2):
        client = app.test_client()
        state = start(client)
        assert client.get(f'/api/auth/twitch/callback?code=c&state={state}').status_code == 302
    assert storage.count_users() == 1


def test_taken_username_gets_a_suffix(app, client, twitch, storage):
    register(app.test_client(), 'streamer', email='someone@example.com')
    state = start(client)
    client.get(f'/api/auth/twitch/callback?code=c&state={state}')
    assert storage.get_user_by_twitch_id('4242')['username'] == 'streamer2'


def test_email_owned_by_local_account_is_a_conflict(app, client, twitch, storage):
    register(app.test_client(), 'localuser', email='streamer@example.com')
    state = start(client)
    response = client.get(f'/api/auth/twitch/callback?code=c&state={state}')
    assert response.status_code == 400
    assert storage.get_user_by_twitch_id('4242') is None
    assert client.get('/api/user').status_code == 401


def test_missing_state_is_rejected_before_token_exchange(client, twitch):
    response = client.get('/api/auth/twitch/callback?code=c&state=whatever')
    assert response.status_code == 400
    assert response.get_json() == {'message': 'Invalid OAuth state'}
    assert twitch['exchange'] == []


def test_mismatched_state_is_rejected_before_token_exchange(client, twitch):
    start(client)
    response = client.get('/api/auth/twitch/callback?code=c&state=forged-state')
    assert response.status_code == 400
    assert twitch['exchange'] == []


def test_non_ascii_state_is_a_mismatch(client, twitch):
    start(client)
    response = client.get('/api/auth/twitch/callback?code=c&state=%C3%A9')
    assert response.status_code == 400
    assert response.get_json() == {'message': 'Invalid OAuth state'}
    assert twitch['exchange'] == []


def test_state_cannot_be_replayed(client, twitch):
    state = start(client)
    assert client.get(f'/api/auth/twitch/callback?code=c&state={state}').status_code == 302
    assert client.get(f'/api/auth/twitch/callback?code=c&state={state}').status_code == 400
    assert len(twitch['exchange']) == 1


def test_provider_denial_is_a_bad_request(client, twitch):
    state = start(client)
    response = client.get(f'/api/auth/twitch/callback?error=access_denied&state={state}')
    assert response.status_code == 400
    assert twitch['exchange'] == []


def test_rejected_code_is_a_bad_request(client, twitch):
    twitch['state']['exchange_error'] = http_error(400)
    state = start(client)
    assert client.get(f'/api/auth/twitch/callback?code=stale&state={state}').status_code == 400


def test_unreachable_twitch_is_a_server_error(client, twitch):
    twitch['state']['exchange_error'] = requests.ConnectionError('connection refused')
    state = start(client)
    response = client.get(f'/api/auth/twitch/callback?code=c&state={state}')
    assert response.status_code == 500
    assert twitch['profile'] == []


def test_profile_outage_is_a_server_error(client, twitch):
    twitch['state']['profile_error'] = http_error(503)
    state = start(client)
    assert client.get(f'/api/auth/twitch/callback?code=c&state={state}').status_code == 500


def test_unconfigured_client_cannot_start(app, client):
    app.config['TWITCH_CLIENT_ID'] = ''
    response = client.get('/api/auth/twitch')
    assert response.status_code == 500
    assert response.get_json() == {'message': 'Twitch login is not configured'}


def test_flow_records_the_failure_state(app, storage):
    flow = TwitchLogin(TwitchClient.from_config(app.config), storage)
    with app.test_request_context('/api/auth/twitch/callback'):
        with pytest.raises(TwitchOAuthError) as exc:
            flow.complete({}, {'code': 'c', 'state': 's'})
    assert flow.state is OAuthState.STATE_MISMATCH
    assert exc.value.state is OAuthState.STATE_MISMATCH
    assert exc.value.status_code == 400


def test_flow_refuses_out_of_order_transitions(app, storage):
    flow = TwitchLogin(TwitchClient.from_config(app.config), storage)
    with pytest.raises(RuntimeError):
        flow._advance(OAuthState.SESSION_ESTABLISHED)
    assert flow.state is OAuthState.IDLE
