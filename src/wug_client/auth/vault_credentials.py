"""API credentials stored in HashiCorp Vault.

Operators who do not want the monitoring server's API password on the command
line or in the environment can keep it in a KV v2 secret.  The secret must
hold two keys, ``username`` and ``password``.  The Vault token itself comes
from the usual places (``VAULT_TOKEN`` or ``~/.vault-token``) unless one is
passed explicitly.
"""

from __future__ import annotations

import logging

import hvac

from wug_client.auth.credentials import Credentials
from wug_client.errors import CredentialError

logger = logging.getLogger(__name__)


class VaultCredentialSource:
    """Reads monitoring API credentials from a Vault KV v2 secret."""

    def __init__(
        self,
        vault_addr: str,
        mount_point: str = "secret",
        path: str = "wug/api",
        token: str | None = None,
    ) -> None:
        self._vault_addr = vault_addr
        self._mount_point = mount_point
        self._path = path
        self._client = hvac.Client(url=vault_addr, token=token)

    def fetch(self) -> Credentials:
        """Return the stored credentials.

        Raises ``CredentialError`` if Vault refuses the read or the secret is
        missing either key.
        """
        try:
            response = self._client.secrets.kv.v2.read_secret_version(
                path=self._path,
                mount_point=self._mount_point,
                raise_on_deleted_version=True,
            )
        except hvac.exceptions.VaultError as exc:
            raise CredentialError(
                f"Vault read failed for {self._mount_point}/{self._path}: {exc}"
            ) from exc

        secret = response["data"]["data"]
        username = secret.get("username")
        password = secret.get("password")
        if not username or not password:
            raise CredentialError(
                f"Vault secret {self._mount_point}/{self._path} must contain "
                "'username' and 'password'"
            )

        logger.info(
            "Loaded API credentials for %s from Vault (%s/%s)",
            username,
            self._mount_point,
            self._path,
        )
        return Credentials(username=username, password=password)
