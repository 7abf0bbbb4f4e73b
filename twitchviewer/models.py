from database import db
from datetime import datetime


ROLES = ('user', 'moderator', 'admin')


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)  # scrypt hash, never the plain password
    email_verified = db.Column(db.Boolean, default=False, nullable=False)
    role = db.Column(db.String(20), default='user', nullable=False)
    stripe_customer_id = db.Column(db.String(255))
    stripe_subscription_id = db.Column(db.String(255))

    # SHA-256 digest of the emailed token, not the token itself
    reset_token = db.Column(db.String(64), index=True)
    reset_token_expires = db.Column(db.DateTime)

    twitch_id = db.Column(db.String(64), unique=True)
    twitch_login = db.Column(db.String(64))
    twitch_access_token = db.Column(db.String(255))
    twitch_refresh_token = db.Column(db.String(255))

    remember_session = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<User {self.username}>'


class Package(db.Model):
    __tablename__ = 'packages'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=False)
    price = db.Column(db.Integer, nullable=False)  # in cents
    max_viewers = db.Column(db.Integer, nullable=False)
    features = db.Column(db.JSON, nullable=False)
    stripe_price_id = db.Column(db.String(255), nullable=False)

    def __repr__(self):
        return f'<Package {self.name}>'


class SeoSettings(db.Model):
    __tablename__ = 'seo_settings'
    id = db.Column(db.Integer, primary_key=True)
    page_slug = db.Column(db.String(128), unique=True, nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    focus_keyword = db.Column(db.String(255), nullable=False)
    cornerstone_content = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self):
        return f'<SeoSettings {self.page_slug}>'


class Statistic(db.Model):
    __tablename__ = 'statistics'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    value = db.Column(db.Integer, nullable=False)
    icon = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)


class SuccessStory(db.Model):
    __tablename__ = 'success_stories'
    id = db.Column(db.Integer, primary_key=True)
    streamer_name = db.Column(db.String(128), nullable=False)
    streamer_avatar = db.Column(db.String(512))
    platform_type = db.Column(db.String(32), default='twitch', nullable=False)
    before_count = db.Column(db.Integer, nullable=False)
    after_count = db.Column(db.Integer, nullable=False)
    growth_percent = db.Column(db.Integer, nullable=False)
    testimonial = db.Column(db.Text, nullable=False)
    is_verified = db.Column(db.Boolean, default=False, nullable=False)
    is_visible = db.Column(db.Boolean, default=True, nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)


class FaqCategory(db.Model):
    __tablename__ = 'faq_categories'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    slug = db.Column(db.String(128), unique=True, nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    items = db.relationship('FaqItem', backref='category', lazy=True, cascade='all, delete-orphan')


class FaqItem(db.Model):
    __tablename__ = 'faq_items'
    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey('faq_categories.id'), nullable=False)
    question = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    is_schema_faq = db.Column(db.Boolean, default=False, nullable=False)  # emitted as FAQPage structured data
    sort_order = db.Column(db.Integer, default=0, nullable=False)


class BlogPost(db.Model):
    __tablename__ = 'blog_posts'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False)
    excerpt = db.Column(db.Text, nullable=False)
    content = db.Column(db.Text, nullable=False)
    featured_image = db.Column(db.String(512))
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    tags = db.Column(db.JSON)
    publish_date = db.Column(db.DateTime)
    meta_title = db.Column(db.String(255))
    meta_description = db.Column(db.Text)
    is_published = db.Column(db.Boolean, default=False, nullable=False)


class MediaFile(db.Model):
    __tablename__ = 'media_files'
    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    stored_name = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(512), nullable=False)
    mime_type = db.Column(db.String(128), nullable=False)
    size = db.Column(db.Integer, nullable=False)
    width = db.Column(db.Integer)
    height = db.Column(db.Integer)
    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow)


class SecurityBadge(db.Model):
    __tablename__ = 'security_badges'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    icon = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)


class LimitedTimeOffer(db.Model):
    __tablename__ = 'limited_time_offers'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    discount_percent = db.Column(db.Integer, nullable=False)
    package_id = db.Column(db.Integer, db.ForeignKey('packages.id'), nullable=True)
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    coupon_code = db.Column(db.String(64))
    is_active = db.Column(db.Boolean, default=True, nullable=False)


# Storage kind -> model. Both storage backends read column names and defaults from here.
MODELS = {
    'user': User,
    'package': Package,
    'seo_settings': SeoSettings,
    'statistic': Statistic,
    'success_story': SuccessStory,
    'faq_category': FaqCategory,
    'faq_item': FaqItem,
    'blog_post': BlogPost,
    'media_file': MediaFile,
    'security_badge': SecurityBadge,
    'limited_time_offer': LimitedTimeOffer,
}
