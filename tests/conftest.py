"""Shared test fixtures and fake collaborators."""

import pytest

from webprod.account import AccountSession, BacklogSettings, FileAccountStore
from webprod.backlog import CreatedIssue, IssueSubmitter, SubmissionError
from webprod.generation import GeneratedIssue, GenerationError, IssueGenerator
from webprod.template import default_template, template_from_dict

SMALL_TEMPLATE = {
    "version": "test-1",
    "name": "Test template",
    "sections": [
        {
            "id": "basic",
            "title": "基本",
            "items": [
                {"id": "name", "label": "名前", "type": "text", "required": True},
                {"id": "notes", "label": "備考", "type": "textarea"},
            ],
        },
        {
            "id": "choices",
            "title": "選択",
            "items": [
                {"id": "size", "label": "規模", "type": "select", "options": ["S", "M", "L"]},
                {
                    "id": "features",
                    "label": "機能",
                    "type": "checkbox",
                    "options": ["検索", "ログイン", "決済"],
                },
            ],
        },
    ],
}

# Values satisfying every required item of the bundled template
REQUIRED_VALUES = {
    "project-name": "Acme Redesign",
    "client-name": "Acme株式会社",
    "site-objective": "リード獲得",
    "page-list": "トップ\n会社概要\nお問い合わせ",
}


class FakeGenerator(IssueGenerator):
    """Records requests; returns a fixed issue or raises."""

    def __init__(self, issue: GeneratedIssue | None = None, error: Exception | None = None):
        self.issue = issue or GeneratedIssue(
            summary="【Acme Redesign】コーポレートサイトリニューアル",
            description="## 概要\n・案件名: Acme Redesign",
        )
        self.error = error
        self.requests = []

    def generate(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.issue


class FakeSubmitter(IssueSubmitter):
    """Records requests; returns a fixed result or raises."""

    def __init__(self, created: CreatedIssue | None = None, error: Exception | None = None):
        self.created = created or CreatedIssue(
            issue_key="WEBPROD-42", issue_url="https://space.example/view/WEBPROD-42"
        )
        self.error = error
        self.requests = []
        self.sessions = []

    def create_issue(self, request, session):
        self.requests.append(request)
        self.sessions.append(session)
        if self.error is not None:
            raise self.error
        return self.created


@pytest.fixture
def template():
    return default_template()


@pytest.fixture
def small_template():
    return template_from_dict(SMALL_TEMPLATE)


@pytest.fixture
def account_session():
    return AccountSession(user_id="user-1", access_token="token-abc")


@pytest.fixture
def store(tmp_path, account_session):
    return FileAccountStore(tmp_path / "data", session=account_session)


@pytest.fixture
def connected_settings():
    return BacklogSettings(
        space_identifier="myspace",
        api_key="key-123",
        default_project_id="100",
        is_connected=True,
        last_verified_at="2025-10-07T00:00:00Z",
    )


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def failing_generator():
    return FakeGenerator(error=GenerationError("upstream 500"))


@pytest.fixture
def submitter():
    return FakeSubmitter()


@pytest.fixture
def failing_submitter():
    return FakeSubmitter(error=SubmissionError("Backlog API error: 500"))


@pytest.fixture
def required_values():
    return dict(REQUIRED_VALUES)
