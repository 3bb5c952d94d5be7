"""Credential acquisition, kept apart from the session lifecycle.

The ``SessionManager`` only ever receives already-resolved ``Credentials``.
Where they come from (command-line flags, environment variables, Vault, or an
interactive prompt) is decided here and by the CLI.
"""

from __future__ import annotations

import dataclasses
import getpass
import logging
import os
from typing import Callable, Mapping

from wug_client.errors import CredentialError

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


@dataclasses.dataclass(frozen=True)
class Credentials:
    """Username/password pair for the password grant."""

    username: str
    password: str = dataclasses.field(repr=False)


def _prompt_username(label: str) -> str:
    return input(label)


def _prompt_password(label: str) -> str:
    return getpass.getpass(label)


def resolve_credentials(
    credentials: Credentials | None = None,
    username: str | None = None,
    password: str | None = None,
    *,
    prompt_username: Prompt = _prompt_username,
    prompt_password: Prompt = _prompt_password,
) -> Credentials:
    """Resolve credentials using a fixed priority order.

    1. An explicit ``Credentials`` object wins outright.
    2. An explicit *username* prompts for the password (unless *password* is
       also given).
    3. An explicit *password* prompts for the username.
    4. Otherwise both are prompted for.

    Raises ``CredentialError`` if either part ends up empty.
    """
    if credentials is not None:
        resolved = credentials
    else:
        if not username:
            username = prompt_username("  Username: ").strip()
        if not password:
            password = prompt_password("  Password: ")
        resolved = Credentials(username=username, password=password)

    if not resolved.username or not resolved.password:
        raise CredentialError("Username and password are required")
    return resolved


def credentials_from_env(
    prefix: str = "WUG_",
    environ: Mapping[str, str] | None = None,
) -> Credentials | None:
    """Read ``<prefix>USERNAME`` and ``<prefix>PASSWORD`` from the environment.

    Returns ``None`` unless both are set and non-empty.
    """
    env = os.environ if environ is None else environ
    username = env.get(f"{prefix}USERNAME")
    password = env.get(f"{prefix}PASSWORD")
    if not username or not password:
        logger.debug("No credentials found in %sUSERNAME/%sPASSWORD", prefix, prefix)
        return None
    return Credentials(username=username, password=password)
