from datetime import datetime, timedelta

import pytest

from config import TestingConfig
from twitchviewer import create_app
from twitchviewer.seed import seed_default_content
from twitchviewer.storage import DatabaseStorage, DuplicateKeyError, MemStorage
from twitchviewer.storage.base import hash_reset_token


class SqliteConfig(TestingConfig):
    STORAGE_BACKEND = 'database'


@pytest.fixture(params=['memory', 'database'])
def backend(request):
    """Each contract test runs against both storage backends."""
    if request.param == 'memory':
        yield MemStorage()
        return
    app = create_app(SqliteConfig)
    with app.app_context():
        yield DatabaseStorage()


def make_user(backend, username='alice', email=None, **extra):
    values = {'username': username, 'email': email or f'{username}@example.com', 'password': 'hash'}
    values.update(extra)
    return backend.create_user(values)


def make_package(backend, name='Starter', price_id='price_starter'):
    return backend.create_package({
        'name': name,
        'description': f'{name} package',
        'price': 1900,
        'max_viewers': 50,
        'features': ['Up to 50 Viewers'],
        'stripe_price_id': price_id,
    })


def test_create_user_fills_model_defaults(backend):
    user = make_user(backend)
    assert user['id'] == 1
    assert user['role'] == 'user'
    assert user['email_verified'] is False
    assert user['remember_session'] is False
    assert user['stripe_subscription_id'] is None
    assert isinstance(user['created_at'], datetime)
    assert backend.get_user(user['id']) == user


def test_username_and_email_are_unique_ignoring_case(backend):
    make_user(backend, 'alice', 'alice@example.com')

    with pytest.raises(DuplicateKeyError) as exc:
        make_user(backend, 'ALICE', 'other@example.com')
    assert exc.value.field == 'username'

    with pytest.raises(DuplicateKeyError) as exc:
        make_user(backend, 'bob', 'Alice@Example.com')
    assert exc.value.field == 'email'

    assert backend.count_users() == 1


def test_lookup_by_username_ignores_case(backend):
    user = make_user(backend, 'Streamer')
    assert backend.get_user_by_username('streamer')['id'] == user['id']
    assert backend.get_user_by_email('STREAMER@example.com')['id'] == user['id']


def test_update_merges_only_supplied_fields(backend):
    user = make_user(backend)
    updated = backend.update_user(user['id'], {'role': 'moderator'})
    assert updated['role'] == 'moderator'
    assert updated['username'] == 'alice'
    assert updated['email'] == 'alice@example.com'


def test_update_of_unknown_record_returns_none(backend):
    assert backend.update_user(42, {'role': 'admin'}) is None
    assert backend.update_package(42, {'price': 1}) is None


def test_update_cannot_steal_another_users_username(backend):
    make_user(backend, 'alice')
    bob = make_user(backend, 'bob')
    with pytest.raises(DuplicateKeyError):
        backend.update_user(bob['id'], {'username': 'Alice'})
    # renaming to your own name is not a conflict
    assert backend.update_user(bob['id'], {'username': 'bob'})['username'] == 'bob'


def test_seo_page_slug_is_unique(backend):
    values = {'page_slug': 'home', 'title': 't', 'description': 'd', 'focus_keyword': 'k'}
    backend.create_seo_settings(values)
    with pytest.raises(DuplicateKeyError):
        backend.create_seo_settings(values)


def test_reset_token_lookup_only_finds_unexpired_tokens(backend):
    now = datetime.utcnow()
    user = make_user(backend, reset_token=hash_reset_token('tok'), reset_token_expires=now + timedelta(hours=1))

    assert backend.get_user_by_reset_token('tok')['id'] == user['id']
    assert backend.get_user_by_reset_token('other') is None
    assert backend.get_user_by_reset_token('') is None
    assert backend.get_user_by_reset_token('tok', now=now + timedelta(hours=2)) is None


def test_stripe_info_and_verification_helpers(backend):
    user = make_user(backend)
    backend.update_user_stripe_info(user['id'], 'cus_1', 'sub_1')
    backend.verify_user_email(user['id'])
    stored = backend.get_user(user['id'])
    assert stored['stripe_customer_id'] == 'cus_1'
    assert stored['stripe_subscription_id'] == 'sub_1'
    assert stored['email_verified'] is True


def test_delete_package_detaches_its_offers(backend):
    package = make_package(backend)
    now = datetime.utcnow()
    offer = backend.create_record('limited_time_offer', {
        'title': 'Sale', 'description': 'Half off', 'discount_percent': 50,
        'package_id': package['id'], 'start_date': now, 'end_date': now + timedelta(days=1),
    })

    assert backend.delete_package(package['id']) is True
    assert backend.get_package(package['id']) is None
    assert backend.get_record('limited_time_offer', offer['id'])['package_id'] is None
    assert backend.delete_package(package['id']) is False


def test_package_lookup_by_price_id(backend):
    make_package(backend, 'Starter', 'price_starter')
    pro = make_package(backend, 'Professional', 'price_professional')
    assert backend.get_package_by_price_id('price_professional')['id'] == pro['id']
    assert backend.get_package_by_price_id('price_missing') is None


def test_delete_faq_category_removes_its_items(backend):
    general = backend.create_record('faq_category', {'name': 'General', 'slug': 'general'})
    billing = backend.create_record('faq_category', {'name': 'Billing', 'slug': 'billing'})
    for category in (general, billing):
        backend.create_record('faq_item', {'category_id': category['id'], 'question': 'Q?', 'answer': 'A.'})

    assert backend.delete_faq_category(general['id']) is True
    assert backend.get_faq_items_by_category(general['id']) == []
    assert len(backend.get_faq_items_by_category(billing['id'])) == 1
    assert backend.delete_faq_category(general['id']) is False


def test_public_filters_hide_inactive_rows_and_sort(backend):
    backend.create_record('statistic', {'name': 'Second', 'value': 2, 'icon': 'x', 'sort_order': 2})
    backend.create_record('statistic', {'name': 'Hidden', 'value': 0, 'icon': 'x', 'is_active': False})
    backend.create_record('statistic', {'name': 'First', 'value': 1, 'icon': 'x', 'sort_order': 1})

    assert [s['name'] for s in backend.get_active_statistics()] == ['First', 'Second']
    assert backend.count_records('statistic') == 3


def test_published_blog_posts_newest_first(backend):
    now = datetime.utcnow()
    for slug, days_ago, published in [('old', 5, True), ('new', 1, True), ('draft', 0, False)]:
        backend.create_record('blog_post', {
            'title': slug, 'slug': slug, 'excerpt': 'e', 'content': 'c',
            'publish_date': now - timedelta(days=days_ago), 'is_published': published,
        })

    assert [p['slug'] for p in backend.get_published_blog_posts()] == ['new', 'old']
    assert backend.get_blog_post_by_slug('draft')['is_published'] is False


def test_limited_time_offers_respect_their_window(backend):
    now = datetime.utcnow()
    window = {'description': 'd', 'discount_percent': 10}
    backend.create_record('limited_time_offer', dict(window, title='live',
                          start_date=now - timedelta(days=1), end_date=now + timedelta(days=1)))
    backend.create_record('limited_time_offer', dict(window, title='expired',
                          start_date=now - timedelta(days=3), end_date=now - timedelta(days=2)))
    backend.create_record('limited_time_offer', dict(window, title='paused', is_active=False,
                          start_date=now - timedelta(days=1), end_date=now + timedelta(days=1)))

    assert [o['title'] for o in backend.get_active_limited_time_offers(now)] == ['live']


def test_seed_fills_empty_kinds_once(backend):
    created = seed_default_content(backend)
    assert created > 0
    assert [p['name'] for p in backend.get_packages()] == ['Starter', 'Professional', 'Enterprise']
    assert backend.get_seo_settings('home')['cornerstone_content'] is True
    assert len(backend.get_faq_categories()) == 3

    offer = backend.get_active_limited_time_offers()[0]
    assert offer['package_id'] == backend.get_package_by_price_id('price_professional')['id']

    assert seed_default_content(backend) == 0
    assert backend.count_records('package') == 3
