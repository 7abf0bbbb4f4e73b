"""
Default marketing content for a fresh install.

``seed_default_content`` is idempotent per kind: any kind that already has
rows is left alone, so it is safe to run on every start.
"""

import logging
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

DEFAULT_PACKAGES = [
    {
        'name': 'Starter',
        'description': 'Perfect for new streamers looking to grow their audience.',
        'price': 1900,
        'max_viewers': 50,
        'features': ['Up to 50 Viewers', 'Basic Analytics', 'Email Support'],
        'stripe_price_id': 'price_starter',
    },
    {
        'name': 'Professional',
        'description': 'For established streamers wanting to reach the next level.',
        'price': 4900,
        'max_viewers': 200,
        'features': ['Up to 200 Viewers', 'Advanced Analytics', 'Priority Support', 'Channel Optimization'],
        'stripe_price_id': 'price_professional',
    },
    {
        'name': 'Enterprise',
        'description': 'For serious streamers and professional content creators.',
        'price': 9900,
        'max_viewers': 500,
        'features': ['Up to 500 Viewers', 'Premium Analytics', '24/7 Priority Support', 'Custom Solutions'],
        'stripe_price_id': 'price_enterprise',
    },
]

DEFAULT_SEO_SETTINGS = [
    {
        'page_slug': 'home',
        'title': 'TwitchViewer.com - Boost Your Twitch Channel with Real Viewers',
        'description': 'Grow your channel naturally using our automated Twitch viewer system. '
                       'Increase your visibility and reach more followers.',
        'focus_keyword': 'twitch viewers, twitch growth, boost twitch channel',
        'cornerstone_content': True,
    },
    {
        'page_slug': 'features',
        'title': 'Features - TwitchViewer.com',
        'description': 'Discover all the features that make TwitchViewer the best solution to grow your Twitch channel.',
        'focus_keyword': 'twitch viewer features, twitch growth tools',
        'cornerstone_content': False,
    },
    {
        'page_slug': 'pricing',
        'title': 'Pricing - TwitchViewer.com',
        'description': 'Affordable packages to boost your Twitch channel growth with real viewers.',
        'focus_keyword': 'twitch viewer pricing, twitch viewers cost',
        'cornerstone_content': False,
    },
    {
        'page_slug': 'viewer-bot',
        'title': 'Twitch Viewer Bot Service | Boost Your Stream Views',
        'description': 'Premium Twitch viewer bot service to boost your stream views. Real-looking viewers, '
                       'analytics, and 24/7 support. Start growing your channel today!',
        'focus_keyword': 'twitch viewer bot',
        'cornerstone_content': False,
    },
    {
        'page_slug': 'chat-bot',
        'title': 'Twitch Chat Bot Service | Engage Your Stream Audience',
        'description': 'Premium Twitch chat bot service to enhance stream engagement. Customizable messages, '
                       'moderation, interactive commands, and AI-powered responses.',
        'focus_keyword': 'twitch chat bot',
        'cornerstone_content': False,
    },
]

DEFAULT_STATISTICS = [
    {'name': 'Active Viewers', 'value': 15462, 'icon': 'users',
     'description': 'Currently online viewers across all platforms', 'sort_order': 1},
    {'name': 'Successful Streams', 'value': 27849, 'icon': 'video',
     'description': 'Streams successfully boosted last month', 'sort_order': 2},
    {'name': 'Average Growth', 'value': 284, 'icon': 'trending-up',
     'description': 'Average viewer increase per stream', 'sort_order': 3},
    {'name': 'Client Satisfaction', 'value': 98, 'icon': 'heart',
     'description': 'Percentage of satisfied customers', 'sort_order': 4},
]

DEFAULT_SUCCESS_STORIES = [
    {
        'streamer_name': 'GameMasterX',
        'streamer_avatar': 'https://i.pravatar.cc/150?img=1',
        'platform_type': 'twitch',
        'before_count': 45,
        'after_count': 312,
        'growth_percent': 593,
        'testimonial': 'TwitchViewer completely changed my streaming career! I went from having just a few '
                       'viewers to hundreds in just two weeks!',
        'is_verified': True,
        'sort_order': 1,
    },
    {
        'streamer_name': 'EpicStreamQueen',
        'streamer_avatar': 'https://i.pravatar.cc/150?img=5',
        'platform_type': 'twitch',
        'before_count': 27,
        'after_count': 189,
        'growth_percent': 600,
        'testimonial': "I was about to quit streaming until I found TwitchViewer. Now I'm partnered and making "
                       "a living from my streams!",
        'is_verified': True,
        'sort_order': 2,
    },
    {
        'streamer_name': 'ProGamerLife',
        'streamer_avatar': 'https://i.pravatar.cc/150?img=3',
        'platform_type': 'youtube',
        'before_count': 68,
        'after_count': 437,
        'growth_percent': 542,
        'testimonial': "The most reliable viewer service I've ever used. Consistent results and excellent support team!",
        'is_verified': True,
        'sort_order': 3,
    },
]

# (category, [(question, answer), ...])
DEFAULT_FAQ = [
    ({'name': 'General Questions', 'slug': 'general', 'sort_order': 1}, [
        ('What is TwitchViewer.com?',
         "TwitchViewer.com is a professional service that helps Twitch streamers grow their audience by boosting "
         "viewer counts, which improves channel visibility and ranking in Twitch's recommendation algorithm."),
        ("Is using TwitchViewer against Twitch's Terms of Service?",
         "Our service provides genuine viewer traffic to help you grow naturally. We focus on boosting your "
         "initial viewership to help you become more discoverable to genuine viewers who will enjoy your content."),
    ]),
    ({'name': 'Technical Information', 'slug': 'technical', 'sort_order': 2}, [
        ('How do I set up TwitchViewer for my channel?',
         "Setting up is simple! Just create an account, choose your package, and enter your channel name. Our "
         "system will automatically start generating viewers for your streams within minutes."),
        ('Will the viewers interact with my channel?',
         "Our service focuses on providing viewer count. While our viewers don't typically chat, the increased "
         "viewer count will attract real users who will engage with your content."),
    ]),
    ({'name': 'Billing & Payments', 'slug': 'billing', 'sort_order': 3}, [
        ('Are there any long-term contracts?',
         "No, all our packages are subscription-based with monthly billing. You can cancel anytime without "
         "penalties or hidden fees."),
        ('What payment methods do you accept?',
         "We accept all major credit cards, PayPal, and cryptocurrency payments including Bitcoin and Ethereum "
         "for maximum privacy and convenience."),
    ]),
]

DEFAULT_SECURITY_BADGES = [
    {'name': '256-bit SSL Encryption', 'icon': 'lock',
     'description': 'All data is securely transmitted with 256-bit SSL encryption', 'sort_order': 1},
    {'name': 'PCI DSS Compliant', 'icon': 'credit-card',
     'description': 'Payment processing meets PCI DSS Level 1 requirements', 'sort_order': 2},
    {'name': 'GDPR Compliant', 'icon': 'shield',
     'description': 'Your data is handled in compliance with GDPR regulations', 'sort_order': 3},
    {'name': '24/7 Fraud Monitoring', 'icon': 'eye',
     'description': 'Continuous monitoring for suspicious activities', 'sort_order': 4},
]

WELCOME_POST_CONTENT = """
# 5 Proven Strategies to Grow Your Twitch Audience

Growing your audience on Twitch requires a combination of consistency, quality content, and smart promotion.

## 1. Stream Consistently

Create a regular streaming schedule and stick to it. When viewers know when to expect your streams, they're more
likely to come back regularly.

## 2. Optimize Your Stream Quality

Invest in a decent microphone, proper lighting, a stable internet connection and tuned encoding settings.

## 3. Engage With Your Audience

Interact with your viewers through chat. Acknowledge new followers and subscribers.

## 4. Network With Other Streamers

Collaborate with streamers of similar size to cross-promote each other's channels.

## 5. Leverage Social Media

Share highlights, announce upcoming streams, and engage with your audience outside of Twitch.
"""


def _seed_kind(storage, kind, rows):
    if storage.count_records(kind) > 0:
        logger.info(f"{kind}: already has rows, skipping")
        return []
    created = [storage.create_record(kind, row) for row in rows]
    logger.info(f"{kind}: seeded {len(created)} rows")
    return created


def seed_default_content(storage, now=None):
    """Fills every empty content kind with the default rows. Returns the number of rows created."""
    now = now or datetime.utcnow()
    created = 0

    packages = _seed_kind(storage, 'package', DEFAULT_PACKAGES)
    created += len(packages)
    created += len(_seed_kind(storage, 'seo_settings', DEFAULT_SEO_SETTINGS))
    created += len(_seed_kind(storage, 'statistic', DEFAULT_STATISTICS))
    created += len(_seed_kind(storage, 'success_story', DEFAULT_SUCCESS_STORIES))
    created += len(_seed_kind(storage, 'security_badge', DEFAULT_SECURITY_BADGES))

    if storage.count_records('faq_category') == 0:
        for category_values, items in DEFAULT_FAQ:
            category = storage.create_record('faq_category', category_values)
            created += 1
            for order, (question, answer) in enumerate(items, start=1):
                storage.create_record('faq_item', {
                    'category_id': category['id'],
                    'question': question,
                    'answer': answer,
                    'is_schema_faq': True,
                    'sort_order': order,
                })
                created += 1
        logger.info("faq: seeded default categories and items")

    professional = storage.get_package_by_price_id('price_professional')
    created += len(_seed_kind(storage, 'limited_time_offer', [{
        'title': 'Launch Special: 30% Off Professional Plan',
        'description': 'Get our Professional plan with 30% discount for your first 3 months. Limited time offer!',
        'discount_percent': 30,
        'package_id': professional['id'] if professional else None,
        'start_date': now,
        'end_date': now + timedelta(days=7),
        'coupon_code': 'LAUNCH30',
    }]))

    created += len(_seed_kind(storage, 'blog_post', [{
        'title': '5 Proven Strategies to Grow Your Twitch Audience',
        'slug': '5-proven-strategies-grow-twitch-audience',
        'excerpt': 'Learn the top strategies that successful Twitch streamers use to grow their audiences and '
                   'build engaged communities.',
        'content': WELCOME_POST_CONTENT.strip(),
        'featured_image': 'https://images.unsplash.com/photo-1603481588273-2f908a9a7a1b?auto=format&fit=crop&w=1350&q=80',
        'tags': ['growth', 'twitch', 'streaming', 'audience'],
        'publish_date': now,
        'meta_title': '5 Proven Strategies to Grow Your Twitch Audience | TwitchViewer.com',
        'meta_description': 'Discover five proven strategies that successful streamers use to grow their Twitch '
                            'audience and build engaged communities.',
        'is_published': True,
    }]))

    logger.info(f"Default content seeding finished: {created} rows created")
    return created
