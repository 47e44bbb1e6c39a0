import logging

from supabase import create_client, Client

logger = logging.getLogger(__name__)


def create_supabase_client(config) -> Client:
    """
    Build the one Supabase client a process should use.

    `config` is a Config class or a Flask config mapping. With MOCK_DB the
    in-memory MockSupabaseClient is returned instead.
    """
    get = config.get if isinstance(config, dict) else lambda k, d=None: getattr(config, k, d)

    if get("MOCK_DB", False):
        from yugen.mock_supabase import MockSupabaseClient
        logger.info("MOCK_DB enabled, using in-memory Supabase client")
        return MockSupabaseClient()

    url = get("SUPABASE_URL")
    key = get("SUPABASE_KEY")
    if not url or not key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set (or MOCK_DB=true)")

    return create_client(url, key)
