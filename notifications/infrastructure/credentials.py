import base64
import binascii
import json
from enum import StrEnum
from typing import Any, Dict

import firebase_admin
import google.auth
from firebase_admin import credentials
from google.auth.exceptions import DefaultCredentialsError
from loguru import logger
from pydantic import dataclasses

from config.base import Settings
from core.domain.exceptions import CredentialError

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class CredentialMode(StrEnum):
    """Where the Firebase service credential came from, in resolution order."""

    FILE = "file"
    INLINE = "inline"
    PROJECT_DEFAULT = "project_default"
    DEFAULT = "default"


@dataclasses.dataclass(frozen=True)
class ResolvedCredential:
    """Credential and project id ready to hand to `firebase_admin.initialize_app`.

    Attributes
    ----------
    mode : CredentialMode
        Source the credential was resolved from.
    credential : credentials.Base
        Firebase credential object.
    project_id : str | None
        Project the messages are sent under.
    """

    mode: CredentialMode
    credential: Any
    project_id: str | None = None

    @property
    def options(self) -> Dict[str, Any]:
        return {"projectId": self.project_id} if self.project_id else {}


def _load_service_account(raw: str, source: str) -> Dict[str, Any]:
    try:
        service_account = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CredentialError(f"{source} is not valid JSON: {e.msg}") from e

    if not isinstance(service_account, dict):
        raise CredentialError(f"{source} must contain a JSON object")

    return service_account


def _certificate(service_account: Dict[str, Any], source: str):
    try:
        return credentials.Certificate(service_account)
    except ValueError as e:
        raise CredentialError(f"{source} was rejected: {e}") from e


def _from_file(settings: Settings) -> ResolvedCredential:
    path = settings.google_application_credentials
    if not path.is_file():
        raise CredentialError(f"Credential file {path} does not exist")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CredentialError(f"Credential file {path} is unreadable: {e}") from e

    service_account = _load_service_account(raw, f"Credential file {path}")
    return ResolvedCredential(
        mode=CredentialMode.FILE,
        credential=_certificate(service_account, f"Credential file {path}"),
        project_id=service_account.get("project_id") or settings.firebase_project_id,
    )


def _from_inline(settings: Settings) -> ResolvedCredential:
    source = "FIREBASE_SERVICE_ACCOUNT_B64"
    try:
        raw = base64.b64decode(
            settings.firebase_service_account_b64, validate=True
        ).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise CredentialError(f"{source} is not valid base64: {e}") from e

    service_account = _load_service_account(raw, source)
    return ResolvedCredential(
        mode=CredentialMode.INLINE,
        credential=_certificate(service_account, source),
        project_id=service_account.get("project_id") or settings.firebase_project_id,
    )


def _from_application_default(settings: Settings) -> ResolvedCredential:
    try:
        _, detected_project = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    except DefaultCredentialsError as e:
        raise CredentialError(
            f"No Application Default Credentials available: {e}"
        ) from e

    project_id = settings.firebase_project_id or detected_project
    if not project_id:
        raise CredentialError(
            "Application Default Credentials carry no project id; "
            "set FIREBASE_PROJECT_ID"
        )

    mode = (
        CredentialMode.PROJECT_DEFAULT
        if settings.firebase_project_id
        else CredentialMode.DEFAULT
    )
    return ResolvedCredential(
        mode=mode,
        credential=credentials.ApplicationDefault(),
        project_id=project_id,
    )


def resolve_credentials(settings: Settings) -> ResolvedCredential:
    """Resolve the Firebase service credential once, in a fixed priority order.

    1. Service account file (`GOOGLE_APPLICATION_CREDENTIALS`).
    2. Inline base64 service account (`FIREBASE_SERVICE_ACCOUNT_B64`).
    3. Application Default Credentials with a project id from the environment.
    4. Application Default Credentials alone.

    Parameters
    ----------
    settings : Settings
        Application settings.

    Returns
    -------
    ResolvedCredential
        Credential, project id, and the mode that produced them.

    Raises
    ------
    CredentialError
        If the selected source is unusable. Lower-priority sources are not
        tried once a higher one is configured.
    """
    if settings.google_application_credentials:
        return _from_file(settings)

    if settings.firebase_service_account_b64:
        return _from_inline(settings)

    return _from_application_default(settings)


def initialize_firebase_app(settings: Settings) -> firebase_admin.App:
    """Create the named Firebase app used for all sends in this process.

    Parameters
    ----------
    settings : Settings
        Application settings.

    Returns
    -------
    firebase_admin.App
        Initialized app handle, named after `settings.app_name`.

    Raises
    ------
    CredentialError
        If credentials cannot be resolved or the SDK refuses them.
    """
    resolved = resolve_credentials(settings)

    try:
        app = firebase_admin.initialize_app(
            credential=resolved.credential,
            options=resolved.options,
            name=settings.app_name,
        )
    except ValueError as e:
        raise CredentialError(f"Firebase initialization failed: {e}") from e

    logger.info(
        f"🔑 Firebase initialized from {resolved.mode} credentials "
        f"(project: {resolved.project_id or 'unknown'})"
    )
    return app


def close_firebase_app(app: firebase_admin.App) -> None:
    """Release the Firebase app created by `initialize_firebase_app`."""
    firebase_admin.delete_app(app)
    logger.debug(f"🔧 Firebase app '{app.name}' deleted")
