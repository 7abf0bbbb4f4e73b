import pytest


@pytest.fixture()
def packages(storage):
    for name, price_id in [('Starter', 'price_starter'), ('Professional', 'price_professional')]:
        storage.create_package({
            'name': name, 'description': name, 'price': 1900, 'max_viewers': 50,
            'features': [], 'stripe_price_id': price_id,
        })


def checkout(client, price_id='price_starter'):
    return client.post('/api/create-checkout-session', json={'priceId': price_id})


def test_checkout_requires_login(client, packages):
    assert checkout(client).status_code == 401


def test_checkout_requires_verified_email(user_client, packages):
    response = checkout(user_client)
    assert response.status_code == 403
    assert response.get_json() == {'message': 'Email not verified'}


def test_mock_checkout_creates_subscription(admin_client, packages, storage):
    response = checkout(admin_client)
    assert response.status_code == 200
    body = response.get_json()
    assert body['success'] is True
    assert body['subscriptionId'].startswith('sub_mock_')

    user = storage.get_user_by_username('admin')
    assert user['stripe_subscription_id'] == body['subscriptionId']
    assert user['stripe_customer_id'].startswith('cus_mock_')


def test_customer_id_is_reused(admin_client, packages, storage):
    checkout(admin_client)
    customer_id = storage.get_user_by_username('admin')['stripe_customer_id']
    checkout(admin_client, 'price_professional')
    assert storage.get_user_by_username('admin')['stripe_customer_id'] == customer_id


def test_unknown_price_is_rejected(admin_client, packages, storage):
    response = checkout(admin_client, 'price_nonexistent')
    assert response.status_code == 400
    assert storage.get_user_by_username('admin')['stripe_subscription_id'] is None


def test_missing_price_is_rejected(admin_client, packages):
    response = admin_client.post('/api/create-checkout-session', json={})
    assert response.status_code == 400
    assert response.get_json() == {'message': 'priceId is required'}


def test_subscription_status(admin_client, packages):
    assert admin_client.get('/api/subscription').get_json() == {'hasSubscription': False}
    subscription_id = checkout(admin_client).get_json()['subscriptionId']
    assert admin_client.get('/api/subscription').get_json() == {
        'hasSubscription': True,
        'subscriptionId': subscription_id,
    }


def test_subscription_requires_login(client):
    assert client.get('/api/subscription').status_code == 401
