"""
Validation of CMS blocks, one serializer per structured content key.

Keys without a serializer (home_hero, home_footer, announcement_bar) take
any JSON object.
"""
from rest_framework import serializers

HOME_HERO = 'home_hero'
HOME_FOOTER = 'home_footer'
ANNOUNCEMENT_BAR = 'announcement_bar'
CONTENT_ABOUT = 'content_about'
SETTINGS_GLOBAL = 'settings_global'
POLICY_PRIVACY = 'policy_privacy'
POLICY_TERMS = 'policy_terms'
POLICY_SHIPPING = 'policy_shipping'
POLICY_RETURN = 'policy_return'
CONTENT_FAQ = 'content_faq'

POLICY_KEYS = (POLICY_PRIVACY, POLICY_TERMS, POLICY_SHIPPING, POLICY_RETURN)

CONTENT_KEYS = (
    HOME_HERO, HOME_FOOTER, ANNOUNCEMENT_BAR, CONTENT_ABOUT, SETTINGS_GLOBAL,
) + POLICY_KEYS + (CONTENT_FAQ,)


def _text(max_length=255):
    return serializers.CharField(max_length=max_length, required=False, allow_blank=True)


# Global settings
class BrandingSerializer(serializers.Serializer):
    siteName = _text(100)
    tagline = _text()
    logoUrl = _text(500)
    faviconUrl = _text(500)
    primaryColor = serializers.RegexField(r'^#(?:[0-9a-fA-F]{3}){1,2}$', required=False,
                                          error_messages={'invalid': 'Enter a hex color such as #000000.'})


class ContactAddressSerializer(serializers.Serializer):
    line1 = _text()
    line2 = _text()
    city = _text(100)
    zip = _text(20)
    country = _text(100)
    mapUrl = _text(1000)


class ContactSerializer(serializers.Serializer):
    supportEmail = serializers.EmailField(required=False, allow_blank=True)
    salesEmail = serializers.EmailField(required=False, allow_blank=True)
    phonePrimary = _text(30)
    phoneSecondary = _text(30)
    address = ContactAddressSerializer(required=False)


class SocialsSerializer(serializers.Serializer):
    facebook = _text(500)
    instagram = _text(500)
    tiktok = _text(500)
    youtube = _text(500)


class SeoSerializer(serializers.Serializer):
    defaultMetaTitle = _text()
    defaultMetaDescription = _text(500)
    defaultOgImage = _text(500)


class GlobalSettingsSerializer(serializers.Serializer):
    branding = BrandingSerializer(required=False)
    contact = ContactSerializer(required=False)
    socials = SocialsSerializer(required=False)
    seo = SeoSerializer(required=False)


# About page
ABOUT_BLOCK_TEXT = 'text'
ABOUT_BLOCK_IMAGE_SPLIT = 'image_split'
ABOUT_BLOCK_STATS = 'stats'


class AboutHeroSerializer(serializers.Serializer):
    title = _text()
    subtitle = _text(500)
    imageUrl = _text(500)


class AboutStatsItemSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=100)
    value = serializers.CharField(max_length=50)


class AboutBlockSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[ABOUT_BLOCK_TEXT, ABOUT_BLOCK_IMAGE_SPLIT, ABOUT_BLOCK_STATS])
    heading = _text()
    body = serializers.CharField(required=False, allow_blank=True)
    position = serializers.ChoiceField(choices=['left', 'right'], required=False)
    imageUrl = _text(500)
    caption = _text()
    items = AboutStatsItemSerializer(many=True, required=False)

    def validate(self, data):
        block_type = data['type']
        if block_type == ABOUT_BLOCK_STATS and not data.get('items'):
            raise serializers.ValidationError({'items': 'A stats block needs at least one item.'})
        if block_type == ABOUT_BLOCK_IMAGE_SPLIT and not data.get('imageUrl'):
            raise serializers.ValidationError({'imageUrl': 'An image block needs an image.'})
        return data


class AboutPageSerializer(serializers.Serializer):
    hero = AboutHeroSerializer(required=False)
    blocks = AboutBlockSerializer(many=True, required=False, default=list)


# Policies
class PolicySectionSerializer(serializers.Serializer):
    heading = serializers.CharField(max_length=255)
    content = serializers.CharField(required=False, allow_blank=True)
    listItems = serializers.ListField(child=serializers.CharField(max_length=1000), required=False)


class PolicyPageSerializer(serializers.Serializer):
    sections = PolicySectionSerializer(many=True)
    lastUpdated = serializers.CharField(required=False, allow_blank=True)


# FAQ
class FAQItemSerializer(serializers.Serializer):
    question = serializers.CharField(max_length=500)
    answer = serializers.CharField()
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default='General')


class FAQPageSerializer(serializers.Serializer):
    items = FAQItemSerializer(many=True)


CONTENT_SERIALIZERS = {
    SETTINGS_GLOBAL: GlobalSettingsSerializer,
    CONTENT_ABOUT: AboutPageSerializer,
    POLICY_PRIVACY: PolicyPageSerializer,
    POLICY_TERMS: PolicyPageSerializer,
    POLICY_SHIPPING: PolicyPageSerializer,
    POLICY_RETURN: PolicyPageSerializer,
    CONTENT_FAQ: FAQPageSerializer,
}


def get_content_serializer(key):
    return CONTENT_SERIALIZERS.get(key)
