"""
Superuser credential elevation for SQL Ops.
"""

import logging
from typing import Optional

from .models import ConnectionSpec


def elevate(
    spec: ConnectionSpec,
    superuser: Optional[str] = None,
    superuser_password: Optional[str] = None
) -> ConnectionSpec:
    """Derive a server-level connection spec using superuser credentials.

    The returned spec has no database selected. A configured superuser
    replaces the username; a non-empty superuser password replaces the
    password, otherwise the password is dropped so the client reads it from
    its own credential file. With nothing configured the spec is returned
    as is. The input spec is never modified.
    """
    if superuser is None and not superuser_password:
        return spec

    changes = {'database': ""}
    if superuser is not None:
        changes['username'] = superuser
    if superuser_password:
        changes['password'] = superuser_password
    elif superuser is not None:
        changes['password'] = None

    logging.debug(f"Elevating connection to superuser '{changes.get('username', spec.username)}'")
    return spec.derive(**changes)
