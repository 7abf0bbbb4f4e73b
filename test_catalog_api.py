import pytest

STARTER = {
    'name': 'Starter',
    'description': 'Perfect for new streamers.',
    'price': 1900,
    'maxViewers': 50,
    'features': ['Up to 50 Viewers', 'Email Support'],
    'stripePriceId': 'price_starter',
}

HOME_SEO = {
    'pageSlug': 'home',
    'title': 'TwitchViewer.com',
    'description': 'Grow your channel.',
    'focusKeyword': 'twitch viewers',
    'cornerstoneContent': True,
}


@pytest.fixture()
def package(admin_client):
    response = admin_client.post('/api/packages', json=STARTER)
    assert response.status_code == 201
    return response.get_json()


def test_package_list_is_public(client, package):
    response = client.get('/api/packages')
    assert response.status_code == 200
    assert response.get_json() == [package]


def test_created_package_uses_camel_case(package):
    assert package['maxViewers'] == 50
    assert package['stripePriceId'] == 'price_starter'
    assert package['features'] == ['Up to 50 Viewers', 'Email Support']
    assert isinstance(package['id'], int)


def test_get_single_package(client, package):
    assert client.get(f"/api/packages/{package['id']}").get_json() == package
    missing = client.get('/api/packages/999')
    assert missing.status_code == 404
    assert missing.get_json() == {'message': 'Package not found'}


def test_anonymous_write_is_unauthorized(client):
    assert client.post('/api/packages', json=STARTER).status_code == 401


def test_non_admin_write_is_forbidden(user_client):
    response = user_client.post('/api/packages', json=STARTER)
    assert response.status_code == 403
    assert response.get_json() == {'message': 'Not authorized'}


def test_moderator_is_not_an_admin(user_client, storage):
    viewer = storage.get_user_by_username('viewer')
    storage.update_user_role(viewer['id'], 'moderator')
    assert user_client.post('/api/packages', json=STARTER).status_code == 403


@pytest.mark.parametrize('payload, message', [
    (dict(STARTER, color='red'), 'Unknown field: color'),
    (dict(STARTER, price='19.00'), 'price must be an integer'),
    (dict(STARTER, features='lots'), 'features must be a list'),
    ({k: v for k, v in STARTER.items() if k != 'name'}, 'name is required'),
])
def test_invalid_package_payloads(admin_client, payload, message):
    response = admin_client.post('/api/packages', json=payload)
    assert response.status_code == 400
    assert response.get_json() == {'message': message}


def test_body_must_be_a_json_object(admin_client):
    response = admin_client.post('/api/packages', json=['not', 'an', 'object'])
    assert response.status_code == 400


def test_patch_merges_fields(admin_client, package):
    response = admin_client.patch(f"/api/packages/{package['id']}", json={'price': 2900})
    assert response.status_code == 200
    body = response.get_json()
    assert body['price'] == 2900
    assert body['name'] == 'Starter'
    assert body['features'] == package['features']


def test_patch_ignores_id_in_body(admin_client, package):
    response = admin_client.patch(f"/api/packages/{package['id']}", json={'id': 77, 'name': 'Starter Plus'})
    assert response.get_json()['id'] == package['id']


def test_patch_unknown_package(admin_client):
    assert admin_client.patch('/api/packages/999', json={'price': 1}).status_code == 404


def test_delete_package(admin_client, client, package):
    assert admin_client.delete(f"/api/packages/{package['id']}").status_code == 204
    assert client.get(f"/api/packages/{package['id']}").status_code == 404
    assert admin_client.delete(f"/api/packages/{package['id']}").status_code == 404


def test_seo_settings_by_page_slug(admin_client, client):
    created = admin_client.post('/api/seo', json=HOME_SEO)
    assert created.status_code == 201

    response = client.get('/api/seo/home')
    assert response.status_code == 200
    assert response.get_json()['focusKeyword'] == 'twitch viewers'
    assert client.get('/api/seo/unknown-page').status_code == 404


def test_duplicate_seo_slug(admin_client):
    admin_client.post('/api/seo', json=HOME_SEO)
    response = admin_client.post('/api/seo', json=HOME_SEO)
    assert response.status_code == 400
    assert response.get_json() == {'message': 'SEO settings for this page already exist'}


def test_seo_listing_is_admin_only(admin_client, user_client, client):
    admin_client.post('/api/seo', json=HOME_SEO)
    assert client.get('/api/seo').status_code == 401
    assert user_client.get('/api/seo').status_code == 403
    assert [s['pageSlug'] for s in admin_client.get('/api/seo').get_json()] == ['home']


def test_update_and_delete_seo_settings(admin_client, client):
    settings_id = admin_client.post('/api/seo', json=HOME_SEO).get_json()['id']

    response = admin_client.patch(f'/api/seo/{settings_id}', json={'title': 'New title'})
    assert response.status_code == 200
    assert client.get('/api/seo/home').get_json()['title'] == 'New title'

    assert admin_client.delete(f'/api/seo/{settings_id}').status_code == 204
    assert client.get('/api/seo/home').status_code == 404
