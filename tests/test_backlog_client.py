"""Tests for the Backlog API client using httpx.MockTransport."""

from urllib.parse import parse_qs

import httpx
import pytest

from webprod.backlog import (
    BacklogAPIError,
    BacklogAuthError,
    BacklogClient,
    BacklogProject,
    issue_type_id,
    priority_id,
)


def _client(handler) -> BacklogClient:
    return BacklogClient("myspace", "key-123", transport=httpx.MockTransport(handler))


class TestIdMaps:
    @pytest.mark.parametrize(
        "issue_type,expected", [("task", 1), ("bug", 2), ("request", 3), ("other", 4), ("??", 1)]
    )
    def test_issue_type(self, issue_type, expected):
        assert issue_type_id(issue_type) == expected

    @pytest.mark.parametrize("priority,expected", [("high", 1), ("normal", 2), ("low", 3), ("", 2)])
    def test_priority(self, priority, expected):
        assert priority_id(priority) == expected


class TestGetMyself:
    def test_success(self):
        def handler(request):
            assert request.url.host == "myspace.backlog.jp"
            assert request.url.path == "/api/v2/users/myself"
            assert request.url.params["apiKey"] == "key-123"
            return httpx.Response(200, json={"id": 7, "name": "山田"})

        user = _client(handler).get_myself()
        assert (user.id, user.name) == (7, "山田")

    def test_invalid_api_key(self):
        client = _client(lambda request: httpx.Response(401, text="unauthorized"))
        with pytest.raises(BacklogAuthError, match="APIキーが無効です") as exc_info:
            client.get_myself()
        assert exc_info.value.status_code == 401

    def test_unknown_space(self):
        client = _client(lambda request: httpx.Response(404, text="not found"))
        with pytest.raises(BacklogAPIError, match="スペース名が見つかりません"):
            client.get_myself()

    def test_other_status(self):
        client = _client(lambda request: httpx.Response(503, text="down"))
        with pytest.raises(BacklogAPIError, match="Backlog API error: 503"):
            client.get_myself()

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(BacklogAPIError, match="timeout"):
            _client(handler).get_myself()

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BacklogAPIError, match="request failed"):
            _client(handler).get_myself()


class TestListProjects:
    def test_maps_fields(self):
        payload = [
            {"id": 1, "projectKey": "WEB", "name": "Web", "archived": False},
            {"id": 2, "projectKey": "OLD", "name": "Old", "archived": True},
        ]
        projects = _client(lambda request: httpx.Response(200, json=payload)).list_projects()
        assert projects == [
            BacklogProject(1, "WEB", "Web", False),
            BacklogProject(2, "OLD", "Old", True),
        ]
        assert projects[0].to_dict() == {"id": 1, "projectKey": "WEB", "name": "Web", "archived": False}


class TestCreateIssue:
    def test_form_encoded_post(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["api_key"] = request.url.params["apiKey"]
            seen["content_type"] = request.headers["content-type"]
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(201, json={"issueKey": "WEB-42"})

        client = _client(handler)
        key = client.create_issue("100", "件名", "詳細", issue_type="bug", priority="high", assignee_id="9")

        assert key == "WEB-42"
        assert seen["method"] == "POST"
        assert seen["path"] == "/api/v2/issues"
        assert seen["api_key"] == "key-123"
        assert seen["content_type"].startswith("application/x-www-form-urlencoded")
        assert seen["form"] == {
            "projectId": ["100"],
            "summary": ["件名"],
            "description": ["詳細"],
            "issueTypeId": ["2"],
            "priorityId": ["1"],
            "assigneeId": ["9"],
        }

    def test_assignee_omitted_when_empty(self):
        seen = {}

        def handler(request):
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(201, json={"issueKey": "WEB-1"})

        _client(handler).create_issue("100", "s", "d")
        assert "assigneeId" not in seen["form"]
        assert seen["form"]["issueTypeId"] == ["1"]
        assert seen["form"]["priorityId"] == ["2"]

    def test_error_body_in_message(self):
        client = _client(lambda request: httpx.Response(400, text='{"errors":[{"message":"bad"}]}'))
        with pytest.raises(BacklogAPIError, match="bad") as exc_info:
            client.create_issue("100", "s", "d")
        assert exc_info.value.status_code == 400

    def test_missing_issue_key(self):
        client = _client(lambda request: httpx.Response(201, json={}))
        with pytest.raises(BacklogAPIError, match="issueKey"):
            client.create_issue("100", "s", "d")

    def test_issue_url(self):
        client = _client(lambda request: httpx.Response(200))
        assert client.issue_url("WEB-42") == "https://myspace.backlog.jp/view/WEB-42"


class TestConstruction:
    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            BacklogClient("", "key")

    def test_custom_domain(self):
        client = BacklogClient("acme", "k", domain="backlog.com")
        assert client.issue_url("A-1") == "https://acme.backlog.com/view/A-1"
        client.close()
