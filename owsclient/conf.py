from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

_originals = {}

# -- caching

# The number of fetched documents (capabilities, feature type descriptions, ...)
# that are kept in memory. Endpoints with the same URL share a cached document.
OWSCLIENT_CACHE_SIZE = getattr(settings, "OWSCLIENT_CACHE_SIZE", 100)

# -- fetching

# Total timeout in seconds for fetching a single document.
OWSCLIENT_FETCH_TIMEOUT = getattr(settings, "OWSCLIENT_FETCH_TIMEOUT", 30)

# The User-Agent header to send with each request.
OWSCLIENT_USER_AGENT = getattr(settings, "OWSCLIENT_USER_AGENT", "django-owsclient")

# -- parsing

# WMS 1.3.0 follows the axis order of the CRS, so EPSG:4326 bounding boxes
# are written in latitude/longitude order. When enabled, these are rewritten
# into x/y ordering, so WMS 1.1.1 and 1.3.0 documents give the same results.
OWSCLIENT_FORCE_XY_BOUNDING_BOXES = getattr(settings, "OWSCLIENT_FORCE_XY_BOUNDING_BOXES", True)


@receiver(setting_changed)
def _on_settings_change(setting, value, enter, **kwargs):
    if not setting.startswith("OWSCLIENT_"):
        return

    conf_module = globals()
    if value is None and not enter:
        # override_settings().disable() returns what the django settings module had.
        # Revert to our defaults here instead.
        value = _originals.get(setting)
    else:
        # Track defaults of this file for reverting to them
        _originals.setdefault(setting, conf_module[setting])

    conf_module[setting] = value
