import base64
import json
from types import SimpleNamespace

import firebase_admin
import google.auth
import pytest
from fastapi.testclient import TestClient
from firebase_admin import credentials
from google.auth.exceptions import DefaultCredentialsError

from config.base import Settings
from core.domain.exceptions import CredentialError
from main import create_app
from notifications.infrastructure.credentials import (
    CredentialMode,
    initialize_firebase_app,
    resolve_credentials,
)

from conftest import make_settings

SERVICE_ACCOUNT = {
    "type": "service_account",
    "project_id": "bigg-boss-vote",
    "private_key_id": "abc123",
    "client_email": "relay@bigg-boss-vote.iam.gserviceaccount.com",
}


class FakeCertificate:
    def __init__(self, service_account):
        self.service_account = service_account


@pytest.fixture(autouse=True)
def fake_certificates(monkeypatch):
    monkeypatch.setattr(credentials, "Certificate", FakeCertificate)
    monkeypatch.setattr(credentials, "ApplicationDefault", lambda: "application-default")


@pytest.fixture
def credential_file(tmp_path):
    path = tmp_path / "service-account.json"
    path.write_text(json.dumps(SERVICE_ACCOUNT), encoding="utf-8")
    return path


def encode(payload: str) -> str:
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def adc(monkeypatch, project=None, error=None):
    def fake_default(scopes=None, **kwargs):
        if error is not None:
            raise error
        return object(), project

    monkeypatch.setattr(google.auth, "default", fake_default)


def test_credential_file_is_used(credential_file):
    resolved = resolve_credentials(
        make_settings(google_application_credentials=credential_file)
    )

    assert resolved.mode == CredentialMode.FILE
    assert resolved.project_id == "bigg-boss-vote"
    assert resolved.credential.service_account == SERVICE_ACCOUNT


def test_credential_file_takes_priority_over_inline(credential_file):
    other_account = {**SERVICE_ACCOUNT, "project_id": "other-project"}

    resolved = resolve_credentials(
        make_settings(
            google_application_credentials=credential_file,
            firebase_service_account_b64=encode(json.dumps(other_account)),
        )
    )

    assert resolved.mode == CredentialMode.FILE
    assert resolved.project_id == "bigg-boss-vote"


def test_missing_credential_file_is_fatal(tmp_path):
    with pytest.raises(CredentialError, match="does not exist"):
        resolve_credentials(
            make_settings(google_application_credentials=tmp_path / "missing.json")
        )


def test_inline_service_account_is_used():
    resolved = resolve_credentials(
        make_settings(firebase_service_account_b64=encode(json.dumps(SERVICE_ACCOUNT)))
    )

    assert resolved.mode == CredentialMode.INLINE
    assert resolved.project_id == "bigg-boss-vote"
    assert resolved.options == {"projectId": "bigg-boss-vote"}


@pytest.mark.parametrize(
    "value, reason",
    [
        ("not base64 at all!", "not valid base64"),
        (encode("{not json"), "not valid JSON"),
        (encode('["a", "list"]'), "must contain a JSON object"),
    ],
)
def test_bad_inline_service_account_is_fatal(value, reason):
    with pytest.raises(CredentialError, match=reason):
        resolve_credentials(make_settings(firebase_service_account_b64=value))


def test_rejected_certificate_is_fatal(monkeypatch):
    def reject(service_account):
        raise ValueError("Invalid service account certificate.")

    monkeypatch.setattr(credentials, "Certificate", reject)

    with pytest.raises(CredentialError, match="Invalid service account certificate"):
        resolve_credentials(
            make_settings(firebase_service_account_b64=encode(json.dumps(SERVICE_ACCOUNT)))
        )


def test_application_default_with_project_id(monkeypatch):
    adc(monkeypatch, project="detected-project")

    resolved = resolve_credentials(make_settings(firebase_project_id="bigg-boss-vote"))

    assert resolved.mode == CredentialMode.PROJECT_DEFAULT
    assert resolved.project_id == "bigg-boss-vote"
    assert resolved.credential == "application-default"


def test_application_default_alone(monkeypatch):
    adc(monkeypatch, project="detected-project")

    resolved = resolve_credentials(make_settings())

    assert resolved.mode == CredentialMode.DEFAULT
    assert resolved.project_id == "detected-project"


def test_application_default_without_project_is_fatal(monkeypatch):
    adc(monkeypatch, project=None)

    with pytest.raises(CredentialError, match="no project id"):
        resolve_credentials(make_settings())


def test_no_credentials_at_all_is_fatal(monkeypatch):
    adc(monkeypatch, error=DefaultCredentialsError("Could not automatically determine credentials."))

    with pytest.raises(CredentialError, match="No Application Default Credentials"):
        resolve_credentials(make_settings())


def test_project_id_read_from_google_cloud_project(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "bigg-boss-vote")

    assert Settings(_env_file=None).firebase_project_id == "bigg-boss-vote"


def test_initialize_firebase_app_uses_named_app(monkeypatch, credential_file):
    captured = {}

    def fake_initialize_app(credential=None, options=None, name=None):
        captured.update(credential=credential, options=options, name=name)
        return "firebase-app"

    monkeypatch.setattr(firebase_admin, "initialize_app", fake_initialize_app)

    app = initialize_firebase_app(
        make_settings(google_application_credentials=credential_file)
    )

    assert app == "firebase-app"
    assert captured["name"] == "notification-relay"
    assert captured["options"] == {"projectId": "bigg-boss-vote"}
    assert isinstance(captured["credential"], FakeCertificate)


def test_sdk_refusal_is_a_credential_error(monkeypatch, credential_file):
    def refuse(credential=None, options=None, name=None):
        raise ValueError('The default Firebase app already exists.')

    monkeypatch.setattr(firebase_admin, "initialize_app", refuse)

    with pytest.raises(CredentialError, match="Firebase initialization failed"):
        initialize_firebase_app(
            make_settings(google_application_credentials=credential_file)
        )


def test_server_refuses_to_start_without_credentials(monkeypatch):
    adc(monkeypatch, error=DefaultCredentialsError("Could not automatically determine credentials."))
    app = create_app(settings=make_settings(notification_provider="firebase"))

    with pytest.raises(CredentialError):
        with TestClient(app):
            pass


def test_server_starts_with_firebase_provider(monkeypatch, credential_file):
    firebase_app = SimpleNamespace(name="notification-relay")
    deleted = []
    monkeypatch.setattr(
        firebase_admin,
        "initialize_app",
        lambda credential=None, options=None, name=None: firebase_app,
    )
    monkeypatch.setattr(firebase_admin, "delete_app", deleted.append)

    app = create_app(
        settings=make_settings(
            notification_provider="firebase",
            google_application_credentials=credential_file,
        )
    )

    with TestClient(app) as client:
        assert client.app.state.push_provider.name == "firebase"
        assert client.app.state.push_provider.app is firebase_app
        assert client.get("/health").status_code == 200

    assert deleted == [firebase_app]


def test_dry_run_provider_needs_no_credentials():
    app = create_app(settings=make_settings(notification_provider="log"))

    with TestClient(app) as client:
        response = client.post(
            "/api/send-notification", json={"title": "Vote now", "message": "Cast your vote!"}
        )

    assert response.status_code == 200
    assert response.json()["messageId"].startswith("test-")
