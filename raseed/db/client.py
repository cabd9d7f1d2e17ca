"""
Supabase client factory for background workers.

Pipeline workers act on behalf of many users (they process events, not user
requests), so they use a service-role client created from the project's
secret key. The request layer keeps using per-user RLS clients.

RULES:
1. Create the client once per worker process and inject it
2. NEVER log the secret key
3. Ownership is carried explicitly in every record's user_id column
"""

import logging

from supabase import Client, create_client

from raseed.config import Settings

logger = logging.getLogger(__name__)


def get_service_role_client(settings: Settings) -> Client:
    """
    Create a Supabase client with service_role privileges.

    WARNING: This bypasses RLS. It is ONLY meant for the pipeline workers,
    which must read and write records for whichever user an event names.

    Args:
        settings: Worker settings with SUPABASE_URL and SUPABASE_SECRET_KEY.

    Returns:
        A Supabase client with service_role privileges.

    Raises:
        ValueError: If the Supabase URL or secret key is not configured.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_SECRET_KEY:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_SECRET_KEY must be configured "
            "to run the pipeline workers."
        )

    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_SECRET_KEY,
    )

    logger.debug("Created service-role Supabase client for pipeline workers")

    return client
