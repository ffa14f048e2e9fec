"""Tests for the JSON-file account store."""

import json
import threading

import pytest

from webprod.account import (
    AccountSession,
    AuthorizationError,
    BacklogSettings,
    FileAccountStore,
    IssueGenerationRecord,
    require_session,
)


class TestSession:
    def test_require_session(self, store, account_session):
        assert require_session(store) == account_session

    def test_no_session(self, tmp_path):
        with pytest.raises(AuthorizationError):
            require_session(FileAccountStore(tmp_path))

    def test_blank_token_is_invalid(self, tmp_path):
        store = FileAccountStore(tmp_path, session=AccountSession("user-1", ""))
        with pytest.raises(AuthorizationError):
            require_session(store)

    def test_set_session(self, tmp_path, account_session):
        store = FileAccountStore(tmp_path)
        store.set_session(account_session)
        assert require_session(store).authorization_header == "Bearer token-abc"


class TestSettings:
    def test_missing_returns_none(self, store):
        assert store.get_settings("nobody") is None

    def test_round_trip_and_version(self, store, connected_settings):
        first = store.save_settings("user-1", connected_settings)
        second = store.save_settings("user-1", connected_settings)
        assert (first.version, second.version) == (1, 2)
        loaded = store.get_settings("user-1")
        assert loaded == second
        assert loaded.is_connected is True

    def test_last_write_wins(self, store):
        store.save_settings("user-1", BacklogSettings(space_identifier="a", api_key="1"))
        store.save_settings("user-1", BacklogSettings(space_identifier="b", api_key="2"))
        assert store.get_settings("user-1").space_identifier == "b"

    def test_per_user(self, store):
        store.save_settings("user-1", BacklogSettings(space_identifier="a", api_key="1"))
        assert store.get_settings("user-2") is None

    def test_user_ids_differing_in_punctuation_stay_separate(self, store):
        store.save_settings("a.b", BacklogSettings(space_identifier="dotted", api_key="1"))
        store.save_settings("ab", BacklogSettings(space_identifier="plain", api_key="2"))
        store.save_settings("a/b", BacklogSettings(space_identifier="slashed", api_key="3"))

        assert store.get_settings("a.b").space_identifier == "dotted"
        assert store.get_settings("ab").space_identifier == "plain"
        assert store.get_settings("a/b").space_identifier == "slashed"
        assert len(list((store.base_dir / "settings").iterdir())) == 3

    def test_corrupted_file(self, store):
        path = store.base_dir / "settings" / "user-1.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        assert store.get_settings("user-1") is None
        assert store.save_settings("user-1", BacklogSettings()).version == 1

    def test_concurrent_saves_keep_every_version(self, store):
        threads = [
            threading.Thread(
                target=store.save_settings,
                args=("user-1", BacklogSettings(space_identifier="s", api_key=str(i))),
            )
            for i in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert store.get_settings("user-1").version == 8


class TestRecords:
    def test_audit_events_appended(self, store):
        store.record_audit("user-1", "generate_content", "generation", {"itemCount": 3})
        store.record_audit("user-1", "create_issue", "issue")
        events = store.audit_events()
        assert [e["action"] for e in events] == ["generate_content", "create_issue"]
        assert events[0]["details"] == {"itemCount": 3}
        assert events[1]["details"] == {}
        assert events[0]["created_at"].endswith("Z")

    def test_issue_generation_record(self, store):
        record = IssueGenerationRecord(
            template_version="2025-10-07",
            selected_items=[{"itemId": "project-name", "sectionId": "company-basic", "value": "A"}],
            generated_summary="s",
            generated_description="d",
            edited_summary="s2",
            edited_description="d2",
            issue_key="WEB-1",
            issue_url="https://myspace.backlog.jp/view/WEB-1",
        )
        store.record_issue_generation("user-1", record)
        saved = json.loads((store.base_dir / "issue_generations.json").read_text(encoding="utf-8"))
        assert saved[0]["user_id"] == "user-1"
        assert saved[0]["edited_summary"] == "s2"
        assert saved[0]["selected_items"][0]["value"] == "A"
