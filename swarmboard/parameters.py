# parameters.py - AWS SSM Parameter Store access

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import SecretsError

logger = logging.getLogger(__name__)

# settings.secrets key -> parameter name below SSM_PREFIX
SECRET_PARAMETERS = {
    "secret_key": "secret_key",
    "db_password": "db/password",
    "api_key": "api_key",
}


def ssm_client(region):
    return boto3.client("ssm", region_name=region)


def get_parameter(client, name):
    response = client.get_parameter(Name=name, WithDecryption=True)
    return response["Parameter"]["Value"]


def load_secrets(settings, client=None):
    """Startup stage: fetch every secret or fail.

    Stores the values on settings.secrets and returns them. Any failure
    raises SecretsError; the caller decides to exit.
    """
    client = client or ssm_client(settings.aws_region)
    logger.info("Loading secrets from Parameter Store (%s)...", settings.ssm_prefix)
    secrets = {}
    for key, suffix in SECRET_PARAMETERS.items():
        name = f"{settings.ssm_prefix}/{suffix}"
        try:
            secrets[key] = get_parameter(client, name)
        except (BotoCoreError, ClientError, KeyError) as e:
            raise SecretsError(f"Failed to load secret {name}: {e}") from e
        logger.info("%s loaded", key)
    settings.secrets = secrets
    return secrets


def lookup_parameter(name, region, client=None):
    """Best-effort single lookup; None when the parameter can't be read."""
    try:
        client = client or ssm_client(region)
        return get_parameter(client, name)
    except (BotoCoreError, ClientError, KeyError) as e:
        logger.warning("Parameter %s not available: %s", name, e)
        return None
