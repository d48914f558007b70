"""
Django management command to verify the backend API and cache configuration.

Usage:
    python manage.py check_backend
"""
from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand, CommandError

from storefront.core.api_client import BackendClient, get_api_url
from storefront.core.exceptions import BackendAPIError


class Command(BaseCommand):
    help = 'Check that the backend API is reachable and the cache is working'

    def handle(self, *args, **options):
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("Storefront Configuration Check"))
        self.stdout.write("=" * 60)

        self.stdout.write(f"\n1. Backend API: {get_api_url('/')}")
        self.stdout.write(f"2. Cache Backend: {settings.CACHES['default']['BACKEND']}")
        self.stdout.write(f"3. Cache Location: {settings.CACHES['default'].get('LOCATION', 'N/A')}")

        self.stdout.write("\n4. Testing Cache Operations:")
        self.stdout.write("-" * 60)
        cache.set('check_backend_key', 'ok', 60)
        if cache.get('check_backend_key') == 'ok':
            self.stdout.write(self.style.SUCCESS("Cache SET/GET: Success"))
        else:
            self.stdout.write(self.style.ERROR("Cache SET/GET: Failed"))
        cache.delete('check_backend_key')

        self.stdout.write("\n5. Pinging Backend:")
        self.stdout.write("-" * 60)
        try:
            with BackendClient(max_retries=0) as client:
                enums = client.get('/config/enums') or {}
        except BackendAPIError as e:
            self.stdout.write(self.style.ERROR(f"Backend check failed: {e}"))
            self.stdout.write(self.style.WARNING("\nTroubleshooting:"))
            self.stdout.write("   1. Check BACKEND_API_URL in .env file")
            self.stdout.write("   2. Verify the backend service is running and reachable")
            raise CommandError('Backend API is not reachable')

        zones = (enums.get('shippingZones') or []) if isinstance(enums, dict) else []
        self.stdout.write(self.style.SUCCESS(f"Backend reachable ({len(zones)} shipping zones configured)"))
        self.stdout.write("\n" + "=" * 60)
