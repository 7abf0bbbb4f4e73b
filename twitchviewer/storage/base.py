"""Storage contract shared by the in-memory and database backends.

Records travel as plain dicts keyed by snake_case column names with a
synthetic integer ``id``. Subclasses implement the ``_``-prefixed primitives;
everything else (uniqueness checks, defaults, partial-update merging and the
named per-entity helpers) lives here so both backends behave identically.
"""

import hashlib
from abc import ABC, abstractmethod
from datetime import datetime

from twitchviewer.models import MODELS


class DuplicateKeyError(Exception):
    """Raised when a create or update would break a unique key."""

    def __init__(self, kind, field):
        self.kind = kind
        self.field = field
        super().__init__(f"{kind}.{field} already exists")


# kind -> [(field, case_insensitive)]
UNIQUE_FIELDS = {
    'user': [('username', True), ('email', True), ('twitch_id', False)],
    'seo_settings': [('page_slug', False)],
    'faq_category': [('slug', False)],
    'blog_post': [('slug', False)],
}


def hash_reset_token(token):
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def column_names(kind):
    return [c.key for c in MODELS[kind].__table__.columns]


def column_defaults(kind):
    """Defaults declared on the model, evaluated now (callables included)."""
    defaults = {}
    for column in MODELS[kind].__table__.columns:
        if column.primary_key:
            continue
        default = column.default
        if default is None:
            defaults[column.key] = None
        elif default.is_callable:
            defaults[column.key] = default.arg(None)
        else:
            defaults[column.key] = default.arg
    return defaults


def _sorted(records, key='sort_order'):
    return sorted(records, key=lambda r: (r.get(key) or 0, r['id']))


class Storage(ABC):

    # --- primitives -------------------------------------------------------

    @abstractmethod
    def _get(self, kind, record_id):
        ...

    @abstractmethod
    def _find(self, kind, field, value, ignore_case=False):
        ...

    @abstractmethod
    def _list(self, kind):
        ...

    @abstractmethod
    def _count(self, kind):
        ...

    @abstractmethod
    def _insert(self, kind, values):
        ...

    @abstractmethod
    def _update(self, kind, record_id, changes):
        ...

    @abstractmethod
    def _delete(self, kind, record_id):
        ...

    # --- generic CRUD -----------------------------------------------------

    def get_record(self, kind, record_id):
        return self._get(kind, record_id)

    def find_record(self, kind, field, value):
        ignore_case = dict(UNIQUE_FIELDS.get(kind, [])).get(field, False)
        return self._find(kind, field, value, ignore_case=ignore_case)

    def list_records(self, kind):
        return self._list(kind)

    def count_records(self, kind):
        return self._count(kind)

    def create_record(self, kind, values):
        values = self._known_fields(kind, values)
        self._check_unique(kind, values)
        record = column_defaults(kind)
        record.update(values)
        return self._insert(kind, record)

    def update_record(self, kind, record_id, changes):
        """Merges ``changes`` into the record; fields not supplied stay as they are."""
        if self._get(kind, record_id) is None:
            return None
        changes = self._known_fields(kind, changes)
        self._check_unique(kind, changes, exclude_id=record_id)
        if not changes:
            return self._get(kind, record_id)
        return self._update(kind, record_id, changes)

    def delete_record(self, kind, record_id):
        return self._delete(kind, record_id)

    def _known_fields(self, kind, values):
        allowed = set(column_names(kind)) - {'id'}
        return {k: v for k, v in values.items() if k in allowed}

    def _check_unique(self, kind, values, exclude_id=None):
        for field, ignore_case in UNIQUE_FIELDS.get(kind, []):
            value = values.get(field)
            if value is None:
                continue
            existing = self._find(kind, field, value, ignore_case=ignore_case)
            if existing is not None and existing['id'] != exclude_id:
                raise DuplicateKeyError(kind, field)

    # --- users ------------------------------------------------------------

    def get_user(self, user_id):
        return self._get('user', user_id)

    def get_user_by_username(self, username):
        return self.find_record('user', 'username', username)

    def get_user_by_email(self, email):
        return self.find_record('user', 'email', email)

    def get_user_by_twitch_id(self, twitch_id):
        return self.find_record('user', 'twitch_id', str(twitch_id))

    def get_user_by_reset_token(self, token, now=None):
        if not token:
            return None
        user = self._find('user', 'reset_token', hash_reset_token(token))
        if user is None:
            return None
        expires = user.get('reset_token_expires')
        if expires is None or expires < (now or datetime.utcnow()):
            return None
        return user

    def list_users(self):
        return self._list('user')

    def count_users(self):
        return self._count('user')

    def create_user(self, values):
        return self.create_record('user', values)

    def update_user(self, user_id, changes):
        return self.update_record('user', user_id, changes)

    def verify_user_email(self, user_id):
        return self.update_record('user', user_id, {'email_verified': True})

    def update_user_role(self, user_id, role):
        return self.update_record('user', user_id, {'role': role})

    def update_user_stripe_info(self, user_id, stripe_customer_id, stripe_subscription_id):
        return self.update_record('user', user_id, {
            'stripe_customer_id': stripe_customer_id,
            'stripe_subscription_id': stripe_subscription_id,
        })

    # --- packages ---------------------------------------------------------

    def get_packages(self):
        return self._list('package')

    def get_package(self, package_id):
        return self._get('package', package_id)

    def get_package_by_price_id(self, stripe_price_id):
        return self._find('package', 'stripe_price_id', stripe_price_id)

    def create_package(self, values):
        return self.create_record('package', values)

    def update_package(self, package_id, changes):
        return self.update_record('package', package_id, changes)

    def delete_package(self, package_id):
        for offer in self._list('limited_time_offer'):
            if offer.get('package_id') == package_id:
                self._update('limited_time_offer', offer['id'], {'package_id': None})
        return self._delete('package', package_id)

    # --- SEO settings -----------------------------------------------------

    def get_seo_settings(self, page_slug):
        return self.find_record('seo_settings', 'page_slug', page_slug)

    def get_seo_settings_by_id(self, settings_id):
        return self._get('seo_settings', settings_id)

    def get_all_seo_settings(self):
        return self._list('seo_settings')

    def create_seo_settings(self, values):
        return self.create_record('seo_settings', values)

    def update_seo_settings(self, settings_id, changes):
        return self.update_record('seo_settings', settings_id, changes)

    def delete_seo_settings(self, settings_id):
        return self._delete('seo_settings', settings_id)

    # --- public content filters --------------------------------------------

    def get_active_statistics(self):
        return _sorted(r for r in self._list('statistic') if r['is_active'])

    def get_visible_success_stories(self):
        return _sorted(r for r in self._list('success_story') if r['is_visible'])

    def get_faq_categories(self):
        return _sorted(self._list('faq_category'))

    def get_faq_items_by_category(self, category_id):
        return _sorted(r for r in self._list('faq_item') if r['category_id'] == category_id)

    def delete_faq_category(self, category_id):
        if self._get('faq_category', category_id) is None:
            return False
        for item in self._list('faq_item'):
            if item['category_id'] == category_id:
                self._delete('faq_item', item['id'])
        return self._delete('faq_category', category_id)

    def get_published_blog_posts(self):
        posts = [r for r in self._list('blog_post') if r['is_published']]
        return sorted(posts, key=lambda r: r.get('publish_date') or datetime.min, reverse=True)

    def get_blog_post_by_slug(self, slug):
        return self._find('blog_post', 'slug', slug)

    def get_active_security_badges(self):
        return _sorted(r for r in self._list('security_badge') if r['is_active'])

    def get_active_limited_time_offers(self, now=None):
        now = now or datetime.utcnow()
        return [
            r for r in self._list('limited_time_offer')
            if r['is_active'] and r['start_date'] <= now <= r['end_date']
        ]
