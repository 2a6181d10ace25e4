"""Tests for the usage ledger."""

import json

import pytest

from window_finder.models import ApplicationItem, HistoryTabItem, WindowItem
from window_finder.usage_ledger import SECONDS_PER_DAY, UsageLedger, signature


@pytest.fixture
def mail():
    return ApplicationItem(title="Mail")


class TestSignature:
    def test_title_and_owner(self):
        window = WindowItem(title="Safari", subtitle="GitHub", owner_name="Safari", handle=1, process_id=2)
        assert signature(window) == "Safari|Safari"

    def test_history_items_have_empty_owner(self):
        item = HistoryTabItem(title="Docs", subtitle="x", page_url="https://a/", browser_name="Safari")
        assert signature(item) == "Docs|"

    def test_stable_across_handles(self):
        one = WindowItem(title="Code", subtitle="a", owner_name="Code", handle=1, process_id=2)
        two = WindowItem(title="Code", subtitle="b", owner_name="Code", handle=9, process_id=3)
        assert signature(one) == signature(two)


class TestPreference:
    def test_unknown_item_scores_zero(self, ledger, mail):
        assert ledger.preference_score(mail) == 0.0

    def test_fresh_selection_gets_full_recency_bonus(self, ledger, mail):
        ledger.record_selection(mail)
        assert ledger.preference_score(mail) == pytest.approx(6.0)

    def test_recency_bonus_decays(self, ledger, clock, mail):
        ledger.record_selection(mail)
        clock.advance(4 * SECONDS_PER_DAY)
        assert ledger.preference_score(mail) == pytest.approx(1 + 3.0)

        clock.advance(30 * SECONDS_PER_DAY)
        assert ledger.preference_score(mail) == pytest.approx(1.0)

    def test_repeat_selection_strictly_increases(self, ledger, clock, mail):
        ledger.record_selection(mail)
        once = ledger.preference_score(mail)
        ledger.record_selection(mail)

        assert ledger.preference_score(mail) > once
        assert ledger.usage_record(mail).count == 2


class TestSearchHistory:
    def test_most_recent_first_without_duplicates(self, ledger):
        for query in ["safari", "mail", "safari"]:
            ledger.record_query(query)

        assert ledger.recent_queries() == ["safari", "mail"]

    def test_whitespace_queries_are_ignored(self, ledger):
        ledger.record_query("")
        ledger.record_query("   ")

        assert ledger.recent_queries() == []

    def test_history_is_capped(self, clock):
        ledger = UsageLedger(history_size=3, clock=clock)
        for query in ["a", "b", "c", "d"]:
            ledger.record_query(query)

        assert ledger.recent_queries() == ["d", "c", "b"]

    def test_suggestions_with_empty_prefix(self, ledger):
        for query in ["1", "2", "3", "4", "5", "6"]:
            ledger.record_query(query)

        assert ledger.suggest_queries("") == ["6", "5", "4", "3", "2"]

    def test_suggestions_prefer_prefix_matches(self, ledger):
        for query in ["my code", "Code review", "xcode", "code"]:
            ledger.record_query(query)

        assert ledger.suggest_queries("cO") == ["code", "Code review", "xcode", "my code"]

    def test_suggestions_are_limited(self, ledger):
        for index in range(10):
            ledger.record_query(f"query {index}")

        assert len(ledger.suggest_queries("query")) == 5


class TestPersistence:
    def test_round_trip_through_file(self, tmp_path, clock, mail):
        path = tmp_path / "data.json"
        ledger = UsageLedger(str(path), clock=clock)
        ledger.record_selection(mail)
        ledger.record_query("mail")

        reloaded = UsageLedger(str(path), clock=clock)

        assert reloaded.usage_record(mail).count == 1
        assert reloaded.recent_queries() == ["mail"]
        data = json.loads(path.read_text())
        assert data["usage"]["Mail|Mail"]["count"] == 1

    def test_corrupt_file_is_ignored(self, tmp_path, clock, mail):
        path = tmp_path / "data.json"
        path.write_text("{not json")

        ledger = UsageLedger(str(path), clock=clock)

        assert ledger.preference_score(mail) == 0.0
        assert ledger.recent_queries() == []

    def test_malformed_records_are_dropped(self, tmp_path, clock):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({
            "usage": {"Mail|Mail": {"count": 3, "last_used": clock.now}, "Bad|": {"count": "x"}},
            "search_history": ["ok", 42],
        }))

        ledger = UsageLedger(str(path), clock=clock)

        assert ledger.usage_record(ApplicationItem(title="Mail")).count == 3
        assert ledger.recent_queries() == ["ok"]

    def test_clear(self, tmp_path, clock, mail):
        path = tmp_path / "data.json"
        ledger = UsageLedger(str(path), clock=clock)
        ledger.record_selection(mail)
        ledger.record_query("mail")

        ledger.clear()

        assert UsageLedger(str(path), clock=clock).recent_queries() == []
        assert ledger.preference_score(mail) == 0.0

    def test_future_last_used_keeps_bonus_capped(self, tmp_path, clock, mail):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({
            "usage": {"Mail|Mail": {"count": 1, "last_used": clock.now + 30 * SECONDS_PER_DAY}},
        }))

        ledger = UsageLedger(str(path), clock=clock)

        assert ledger.preference_score(mail) == 6.0
