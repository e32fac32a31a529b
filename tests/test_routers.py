"""HTTP tests for the profile and organization routers."""

import pytest
from urllib.parse import unquote
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt

from partner_portal.auth.dependencies import init_auth_services
from partner_portal.organization.dependencies import get_organization_service
from partner_portal.profile.dependencies import (
    get_completeness_policies,
    get_file_store,
    get_profile_repository,
    get_profile_validator,
    get_staging_service,
)
from partner_portal.profile.models import AttachmentRef, PendingSelection
from partner_portal.profile.policy import build_policies
from partner_portal.profile.sections import ALL_SECTIONS
from partner_portal.profile.services.file_store import GridFSFileStore
from partner_portal.profile.validator import ProfileValidator
from partner_portal.routers import organization_router, profile_router

SECRET = "test-secret"


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


def _token(**claims):
    return jwt.encode({"sub": str(ObjectId()), **claims}, SECRET, algorithm="HS256")


@pytest.fixture
def partner_headers(sample_partner_id):
    return {"Authorization": f"Bearer {_token(partnerId=sample_partner_id)}"}


@pytest.fixture
def mock_bucket():
    bucket = MagicMock()
    bucket.upload_from_stream = AsyncMock(side_effect=lambda *args, **kwargs: ObjectId())
    bucket.open_download_stream = AsyncMock()
    bucket.delete = AsyncMock()
    return bucket


@pytest.fixture
def repository():
    repo = AsyncMock()
    repo.commit = AsyncMock(side_effect=lambda draft: draft)
    return repo


@pytest.fixture
def staging_service():
    return AsyncMock()


@pytest.fixture
def organization_service():
    service = AsyncMock()
    service.get_partner_sections = AsyncMock(return_value=list(ALL_SECTIONS))
    return service


@pytest.fixture
def client(repository, staging_service, organization_service, mock_bucket):
    init_auth_services(secret=SECRET)

    app = FastAPI()
    app.include_router(profile_router, prefix="/api/v1")
    app.include_router(organization_router, prefix="/api/v1")

    app.dependency_overrides[get_profile_repository] = lambda: repository
    app.dependency_overrides[get_file_store] = lambda: GridFSFileStore(mock_bucket)
    app.dependency_overrides[get_staging_service] = lambda: staging_service
    app.dependency_overrides[get_organization_service] = lambda: organization_service
    app.dependency_overrides[get_profile_validator] = lambda: ProfileValidator()
    app.dependency_overrides[get_completeness_policies] = lambda: build_policies(["name"])

    return TestClient(app)


# ─────────────────────────────────────────────────────────────────
# Auth
# ─────────────────────────────────────────────────────────────────


class TestAuth:
    def test_missing_token(self, client):
        response = client.get("/api/v1/partners/profile")

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    def test_bad_signature(self, client, sample_partner_id):
        token = jwt.encode({"sub": "u1", "partnerId": sample_partner_id}, "other", algorithm="HS256")

        response = client.get(
            "/api/v1/partners/profile",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "INVALID_TOKEN"

    def test_non_partner_forbidden(self, client, sample_organization_id):
        headers = {"Authorization": f"Bearer {_token(organizationId=sample_organization_id)}"}

        response = client.get("/api/v1/partners/profile", headers=headers)

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "PARTNER_REQUIRED"


# ─────────────────────────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────────────────────────


class TestProfileRoutes:
    def test_get_profile_links_stored_attachments(
        self, client, repository, make_draft, stored_document, partner_headers,
    ):
        repository.load.return_value = make_draft(documents=[stored_document])

        response = client.get("/api/v1/partners/profile", headers=partner_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        document = data["profile"]["attachments"]["documents"][0]
        assert document["filename"] == "annual_report.pdf"
        assert document["url"].endswith(f"/api/v1/partners/profile/attachments/{stored_document.id}")
        assert not any(data["sections"].values())

    def test_failed_save_returns_errors_and_pending_selections(
        self, client, repository, staging_service, make_draft, partner_headers, mock_bucket,
    ):
        repository.load.return_value = make_draft()
        staging_service.stage.return_value = ("tok-1", [
            PendingSelection(
                staging_id=str(ObjectId()),
                slot="documents",
                filename="document1.md",
                content_type="text/markdown",
                size=3,
            ),
        ])

        response = client.post(
            "/api/v1/partners/profile",
            headers=partner_headers,
            data={"website": "", "no_social_media_presence": ["0"], "intent": "save_progress"},
            files=[("documents", ("document1.md", b"# 1", "text/markdown"))],
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "PROFILE_INVALID"
        assert detail["details"]["fullMessages"] == [
            "No social media presence must be checked if you have not provided any of "
            "Website, Twitter, Facebook, or Instagram."
        ]
        assert detail["details"]["expandedSections"] == ["media_information"]
        assert detail["details"]["stagingToken"] == "tok-1"
        assert detail["details"]["pendingSelections"][0]["filename"] == "document1.md"

        staged = staging_service.stage.call_args[0][1]
        assert [(slot, upload.filename) for slot, upload in staged] == [("documents", "document1.md")]
        repository.commit.assert_not_called()
        mock_bucket.upload_from_stream.assert_not_called()

    def test_save_and_review_redirects(self, client, repository, make_draft, partner_headers):
        repository.load.return_value = make_draft()

        response = client.post(
            "/api/v1/partners/profile",
            headers=partner_headers,
            data={"city": "Topeka", "intent": "save_and_review"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Details were successfully updated."
        assert body["data"]["redirect"] == "/partners/profile"
        assert body["data"]["profile"]["status"] == "awaiting_review"
        assert body["data"]["profile"]["fields"]["city"] == "Topeka"

    def test_unknown_intent(self, client, partner_headers):
        response = client.post(
            "/api/v1/partners/profile",
            headers=partner_headers,
            data={"intent": "publish"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_INTENT"

    def test_download_attachment(
        self, client, repository, stored_document, partner_headers, mock_bucket,
    ):
        repository.find_attachment.return_value = stored_document
        stream = MagicMock()
        stream.read = AsyncMock(return_value=b"%PDF report")
        mock_bucket.open_download_stream.return_value = stream

        response = client.get(
            f"/api/v1/partners/profile/attachments/{stored_document.id}",
            headers=partner_headers,
        )

        assert response.status_code == 200
        assert response.content == b"%PDF report"
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="annual_report.pdf"' in response.headers["content-disposition"]

    @pytest.mark.parametrize("filename, encoded, fallback", [
        ("年度报告.pdf", "%E5%B9%B4%E5%BA%A6%E6%8A%A5%E5%91%8A.pdf", ".pdf"),
        ("résumé.pdf", "r%C3%A9sum%C3%A9.pdf", "rsum.pdf"),
        ('board "final".pdf', "board%20%22final%22.pdf", "board final.pdf"),
    ])
    def test_download_non_ascii_filename(
        self, client, repository, partner_headers, mock_bucket, filename, encoded, fallback,
    ):
        ref = AttachmentRef(id=str(ObjectId()), filename=filename, content_type="application/pdf", size=4)
        repository.find_attachment.return_value = ref
        stream = MagicMock()
        stream.read = AsyncMock(return_value=b"%PDF")
        mock_bucket.open_download_stream.return_value = stream

        response = client.get(
            f"/api/v1/partners/profile/attachments/{ref.id}",
            headers=partner_headers,
        )

        assert response.status_code == 200
        assert response.content == b"%PDF"
        disposition = response.headers["content-disposition"]
        assert disposition == f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"
        assert unquote(disposition.split("UTF-8''")[1]) == filename

    def test_download_unknown_attachment(self, client, repository, partner_headers):
        repository.find_attachment.return_value = None

        response = client.get(
            f"/api/v1/partners/profile/attachments/{ObjectId()}",
            headers=partner_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ATTACHMENT_NOT_FOUND"


# ─────────────────────────────────────────────────────────────────
# Organization
# ─────────────────────────────────────────────────────────────────


class TestOrganizationRoutes:
    def test_list_users(self, client, organization_service, sample_organization_id):
        organization_service.get_users.return_value = [
            {"id": "1", "email": "admin@dbk.org", "name": "Admin"},
        ]
        headers = {"Authorization": f"Bearer {_token(organizationId=sample_organization_id)}"}

        response = client.get("/api/v1/organization/users", headers=headers)

        assert response.status_code == 200
        assert response.json()["count"] == 1
        organization_service.get_users.assert_awaited_once_with(sample_organization_id)

    def test_settings_require_admin(self, client, organization_service, sample_organization_id):
        headers = {"Authorization": f"Bearer {_token(organizationId=sample_organization_id, role='org_user')}"}

        response = client.patch(
            "/api/v1/organization/settings",
            headers=headers,
            json={"reminderDay": 5},
        )

        assert response.status_code == 403
        organization_service.update_settings.assert_not_called()

    def test_settings_partial_update(self, client, organization_service, sample_organization_id):
        organization_service.update_settings.return_value = {"id": sample_organization_id}
        headers = {"Authorization": f"Bearer {_token(organizationId=sample_organization_id, role='org_admin')}"}

        response = client.patch(
            "/api/v1/organization/settings",
            headers=headers,
            json={"reminderDay": 5, "enableIndividualRequests": False},
        )

        assert response.status_code == 200
        organization_service.update_settings.assert_awaited_once_with(
            sample_organization_id,
            {"reminderDay": 5, "enableIndividualRequests": False},
        )

    def test_empty_logo_rejected(self, client, organization_service, sample_organization_id):
        headers = {"Authorization": f"Bearer {_token(organizationId=sample_organization_id, role='org_admin')}"}

        response = client.put(
            "/api/v1/organization/logo",
            headers=headers,
            files={"logo": ("logo.png", b"", "image/png")},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "EMPTY_FILE"
        organization_service.update_logo.assert_not_called()
