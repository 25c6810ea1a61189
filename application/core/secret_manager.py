import logging

from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

logger = logging.getLogger(__name__)


class SecretManager:
    """Reads deployment secrets (JWT signing key) from an Azure Key Vault."""

    def __init__(self, key_vault_name: str):
        vault_url = f"https://{key_vault_name}.vault.azure.net"
        self.client = SecretClient(vault_url=vault_url, credential=DefaultAzureCredential())

    def get_secret(self, name: str) -> str:
        logger.debug(f"Loading secret '{name}' from key vault")
        return self.client.get_secret(name).value
