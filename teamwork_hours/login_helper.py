"""login_helper

Credential handling for the Teamwork company id and API token.

- Environment variables ``TEAMWORK_COMPANY_ID`` / ``TEAMWORK_TOKEN`` (a ``.env``
  file is honoured, the CLI calls ``load_dotenv``) win over stored values.
- Otherwise the OS keyring (service ``teamwork-hours``) is consulted.
- ``ensure_credentials`` prompts for whatever is still missing and stores it.

Nothing here touches ``os.environ``: the resulting Credentials value is passed
explicitly to whoever needs it.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .errors import AuthenticationError
from .models import Credentials

logger = logging.getLogger(__name__)

SERVICE = "teamwork-hours"
COMPANY_KEY = "TEAMWORK_COMPANY_ID"
TOKEN_KEY = "TEAMWORK_TOKEN"


def prompt_visible(prompt: str) -> str:
    try:
        return input(f"{prompt}: ").strip()
    except EOFError:
        return ""


def _from_keyring(key: str) -> Optional[str]:
    try:
        return keyring.get_password(SERVICE, key)
    except KeyringError as e:  # pragma: no cover - backend specific
        logger.warning("Could not access keyring: %s", e)
        return None


def load_stored_credentials() -> Optional[Credentials]:
    """Credentials from the environment or the keyring, or None."""
    company = os.environ.get(COMPANY_KEY)
    token = os.environ.get(TOKEN_KEY)
    if company and token:
        logger.debug("Using credentials from environment")
        return Credentials(company_id=company, token=token)

    company = company or _from_keyring(COMPANY_KEY)
    token = token or _from_keyring(TOKEN_KEY)
    if company and token:
        logger.debug("Using credentials from keyring")
        return Credentials(company_id=company, token=token)
    return None


def save_credentials(credentials: Credentials) -> bool:
    """Store credentials in the keyring. Returns False if the backend refused."""
    try:
        keyring.set_password(SERVICE, COMPANY_KEY, credentials.company_id)
        keyring.set_password(SERVICE, TOKEN_KEY, credentials.token)
    except KeyringError as e:
        print(f"Could not save credentials to keyring: {e}")
        return False
    return True


def clear_stored_credentials() -> None:
    """Clear stored credentials from keyring. Useful for switching accounts."""
    for key in (COMPANY_KEY, TOKEN_KEY):
        try:
            keyring.delete_password(SERVICE, key)
        except PasswordDeleteError:
            logger.debug("No %s stored in keyring", key)
        except KeyringError as e:  # pragma: no cover - backend specific
            print(f"Could not clear credentials: {e}")
            return
    print("Stored credentials cleared from keyring.")


def ensure_credentials(
    force_login: bool = False,
    ask: Callable[[str], str] = prompt_visible,
    store: bool = True,
) -> Credentials:
    """Return usable Credentials, prompting for any missing part.

    If ``force_login`` is True, stored values are ignored and both values are
    asked again. Prompted values are saved to the keyring when ``store`` is set.
    Raises AuthenticationError if the user leaves a value empty.
    """
    if not force_login:
        stored = load_stored_credentials()
        if stored:
            return stored

    print("Please enter your Teamwork credentials:")
    company = ask("company id (subdomain)").strip()
    token = ask("api token").strip()
    if not company or not token:
        raise AuthenticationError("Company id and token are both required")

    credentials = Credentials(company_id=company, token=token)
    if store and save_credentials(credentials):
        print("Credentials saved to keyring.")
    return credentials
