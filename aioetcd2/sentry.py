import os
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

def setup_sentry() -> bool:
    dsn = os.environ.get('AIOETCD2_SENTRY_DSN', '')
    if dsn:
        sentry_sdk.init(
            dsn=dsn,
            integrations=[AioHttpIntegration()],
            traces_sample_rate=1.0
        )
        return True
    return False

def endpoint_failed(endpoint: str, error: Exception) -> None:
    sentry_sdk.add_breadcrumb(
        category='etcd',
        message='etcd endpoint {} failed'.format(endpoint),
        level='warning',
        data={'error': str(error),
              'error_type': error.__class__.__name__})
