"""Tests for document and report tags."""

import pytest

from researchhub.db.models import DEFAULT_TAG_COLOR, DocumentTag, ReportTag
from researchhub.errors import ApiErrorCode, ForbiddenError, InvalidRequestError, NotFoundError
from researchhub.services import tags as tags_service
from researchhub.services.tags import normalize_color, normalize_tag_name
from tests.factories import create_test_document, create_test_report, create_test_user
from tests.helpers import auth_headers


@pytest.fixture
def owned_document(db_session):
    user = create_test_user(db_session)
    report = create_test_report(db_session, user.id)
    document = create_test_document(db_session, report.id)
    return user, report, document


class TestNormalization:
    def test_name_is_trimmed(self):
        assert normalize_tag_name("  urgent ") == "urgent"

    @pytest.mark.parametrize("name", ["", "   ", "x" * 51])
    def test_invalid_names(self, name):
        with pytest.raises(InvalidRequestError) as exc_info:
            normalize_tag_name(name)
        assert exc_info.value.code == ApiErrorCode.E_TAG_INVALID

    def test_color_lowercased(self):
        assert normalize_color("#FFAA00") == "#ffaa00"

    def test_missing_color_passes_through(self):
        assert normalize_color(None) is None

    @pytest.mark.parametrize("color", ["red", "#fff", "#12345g", "123456"])
    def test_invalid_colors(self, color):
        with pytest.raises(InvalidRequestError):
            normalize_color(color)


class TestDocumentTags:
    def test_add_uses_default_color(self, db_session, owned_document):
        user, _, document = owned_document

        tag = tags_service.add_document_tag(db_session, user.id, document.id, "source")

        assert tag.name == "source"
        assert tag.color == DEFAULT_TAG_COLOR

    def test_readding_updates_color_only(self, db_session, owned_document):
        """Re-adding an existing name recolors it instead of duplicating it."""
        user, _, document = owned_document
        first = tags_service.add_document_tag(db_session, user.id, document.id, "source")

        second = tags_service.add_document_tag(
            db_session, user.id, document.id, " source ", color="#22C55E"
        )

        assert second.id == first.id
        assert second.color == "#22c55e"
        assert len(tags_service.list_document_tags(db_session, user.id, document.id)) == 1

    def test_readding_without_color_keeps_color(self, db_session, owned_document):
        user, _, document = owned_document
        tags_service.add_document_tag(db_session, user.id, document.id, "hot", color="#ef4444")

        tag = tags_service.add_document_tag(db_session, user.id, document.id, "hot")

        assert tag.color == "#ef4444"

    def test_list_sorted_by_name(self, db_session, owned_document):
        user, _, document = owned_document
        for name in ("zeta", "alpha", "mid"):
            tags_service.add_document_tag(db_session, user.id, document.id, name)

        names = [t.name for t in tags_service.list_document_tags(db_session, user.id, document.id)]

        assert names == ["alpha", "mid", "zeta"]

    def test_remove(self, db_session, owned_document):
        user, _, document = owned_document
        tags_service.add_document_tag(db_session, user.id, document.id, "gone")

        tags_service.remove_document_tag(db_session, user.id, document.id, "gone")

        assert tags_service.list_document_tags(db_session, user.id, document.id) == []

    def test_remove_missing_tag(self, db_session, owned_document):
        user, _, document = owned_document

        with pytest.raises(NotFoundError) as exc_info:
            tags_service.remove_document_tag(db_session, user.id, document.id, "nope")

        assert exc_info.value.code == ApiErrorCode.E_TAG_NOT_FOUND

    def test_non_owner_cannot_tag(self, db_session, owned_document):
        _, _, document = owned_document
        other = create_test_user(db_session)

        with pytest.raises(ForbiddenError):
            tags_service.add_document_tag(db_session, other.id, document.id, "mine")

    def test_add_recolors_tag_committed_after_load(self, db_session, owned_document):
        """A name inserted by another request after the tags were loaded is updated."""
        user, _, document = owned_document
        assert document.tags == []
        db_session.add(DocumentTag(document_id=document.id, name="urgent"))
        db_session.commit()

        tag = tags_service.add_document_tag(
            db_session, user.id, document.id, "urgent", color="#FF0000"
        )

        assert tag.color == "#ff0000"
        listed = tags_service.list_document_tags(db_session, user.id, document.id)
        assert [(t.name, t.color) for t in listed] == [("urgent", "#ff0000")]


class TestReportTags:
    def test_add_list_remove(self, db_session):
        user = create_test_user(db_session)
        report = create_test_report(db_session, user.id)

        tags_service.add_report_tag(db_session, user.id, report.id, "energy", color="#3B82F6")
        tags_service.add_report_tag(db_session, user.id, report.id, "draft")
        listed = tags_service.list_report_tags(db_session, user.id, report.id)

        assert [(t.name, t.color) for t in listed] == [
            ("draft", DEFAULT_TAG_COLOR),
            ("energy", "#3b82f6"),
        ]

        tags_service.remove_report_tag(db_session, user.id, report.id, "draft")
        assert [t.name for t in tags_service.list_report_tags(db_session, user.id, report.id)] == [
            "energy"
        ]

    def test_tags_are_scoped_to_their_report(self, db_session):
        user = create_test_user(db_session)
        first = create_test_report(db_session, user.id, name="First")
        second = create_test_report(db_session, user.id, name="Second")

        tags_service.add_report_tag(db_session, user.id, first.id, "shared")
        tags_service.add_report_tag(db_session, user.id, second.id, "shared")

        assert len(tags_service.list_report_tags(db_session, user.id, first.id)) == 1
        assert len(tags_service.list_report_tags(db_session, user.id, second.id)) == 1

    def test_add_recolors_tag_committed_after_load(self, db_session):
        user = create_test_user(db_session)
        report = create_test_report(db_session, user.id)
        assert report.tags == []
        db_session.add(ReportTag(report_id=report.id, name="review"))
        db_session.commit()

        tag = tags_service.add_report_tag(db_session, user.id, report.id, "review")

        assert tag.name == "review"
        assert tag.color == DEFAULT_TAG_COLOR
        assert len(tags_service.list_report_tags(db_session, user.id, report.id)) == 1


class TestTagRoutes:
    def test_report_tag_round(self, auth_client, test_user_id):
        headers = auth_headers(test_user_id)
        report = auth_client.post("/reports", json={"name": "Tagged"}, headers=headers).json()[
            "data"
        ]
        url = f"/reports/{report['id']}/tags"

        response = auth_client.post(url, json={"name": "q4", "color": "#AABBCC"}, headers=headers)
        assert response.status_code == 201
        assert response.json()["data"]["color"] == "#aabbcc"

        fetched = auth_client.get(f"/reports/{report['id']}", headers=headers).json()["data"]
        assert [t["name"] for t in fetched["tags"]] == ["q4"]

        assert auth_client.delete(f"{url}/q4", headers=headers).status_code == 204
        assert auth_client.get(url, headers=headers).json()["data"] == []

    def test_document_tag_invalid_color(self, auth_client, test_user_id):
        headers = auth_headers(test_user_id)
        report = auth_client.post("/reports", json={"name": "R"}, headers=headers).json()["data"]
        document = auth_client.post(
            f"/reports/{report['id']}/documents",
            files={"file": ("a.txt", b"tag me", "text/plain")},
            headers=headers,
        ).json()["data"]

        response = auth_client.post(
            f"/documents/{document['id']}/tags",
            json={"name": "x", "color": "blue"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_TAG_INVALID"

    def test_remove_unknown_document_tag(self, auth_client, test_user_id):
        headers = auth_headers(test_user_id)
        report = auth_client.post("/reports", json={"name": "R"}, headers=headers).json()["data"]
        document = auth_client.post(
            f"/reports/{report['id']}/documents",
            files={"file": ("a.txt", b"untagged", "text/plain")},
            headers=headers,
        ).json()["data"]

        response = auth_client.delete(f"/documents/{document['id']}/tags/missing", headers=headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E_TAG_NOT_FOUND"
