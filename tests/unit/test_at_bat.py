"""Tests for the at-bat tracker state machine."""

from __future__ import annotations

from datetime import timedelta

import pytest

from dingerbot.tracking.at_bat import AtBatEvent, AtBatTracker

SUBJECT_ID = 668939
OTHER_BATTER_ID = 641487


@pytest.fixture
def tracker():
    return AtBatTracker(SUBJECT_ID, timeout=timedelta(minutes=10))


class TestEntry:
    def test_enters_when_subject_is_current_batter(self, tracker, clock, feed_factory, play_factory):
        feed = feed_factory(plays=[play_factory(45)])

        transitions = tracker.update(feed, clock())

        assert [t.event for t in transitions] == [AtBatEvent.ENTERED]
        assert transitions[0].at_bat_index == 45
        state = tracker.state
        assert state.active is True
        assert state.current_play_index == 45
        assert state.engaged_since == clock.now

    def test_ignores_other_batters(self, tracker, clock, feed_factory, play_factory):
        feed = feed_factory(plays=[play_factory(45, batter_id=OTHER_BATTER_ID)])
        assert tracker.update(feed, clock()) == []
        assert tracker.engaged is False

    def test_ignores_subject_play_that_already_has_result(self, tracker, clock, feed_factory, play_factory):
        feed = feed_factory(plays=[play_factory(45, event_type="strikeout")])
        assert tracker.update(feed, clock()) == []
        assert tracker.engaged is False

    def test_no_current_play(self, tracker, clock, feed_factory):
        feed = feed_factory(plays=[], current={})
        assert tracker.update(feed, clock()) == []

    def test_repeated_snapshot_does_not_reenter(self, tracker, clock, feed_factory, play_factory):
        feed = feed_factory(plays=[play_factory(45)])
        tracker.update(feed, clock())
        clock.advance(seconds=5)
        assert tracker.update(feed, clock()) == []
        assert tracker.state.current_play_index == 45

    def test_state_is_a_copy(self, tracker, clock, feed_factory, play_factory):
        tracker.update(feed_factory(plays=[play_factory(45)]), clock())
        state = tracker.state
        state.active = False
        assert tracker.engaged is True


class TestExit:
    def test_exit_on_result_fires_once(self, tracker, clock, feed_factory, play_factory):
        """Subject bats at 45, it resolves, the next batter comes up at 46."""
        tracker.update(feed_factory(plays=[play_factory(45)]), clock())

        clock.advance(seconds=5)
        resolved = feed_factory(
            plays=[
                play_factory(45, event_type="single", description="Cal Raleigh singles."),
                play_factory(46, batter_id=OTHER_BATTER_ID),
            ]
        )
        transitions = tracker.update(resolved, clock())

        assert [t.event for t in transitions] == [AtBatEvent.EXITED]
        assert transitions[0].at_bat_index == 45
        assert transitions[0].play.event_type == "single"
        assert tracker.engaged is False

        clock.advance(seconds=15)
        assert tracker.update(resolved, clock()) == []

    def test_timeout_exactly_at_limit_stays_engaged(self, tracker, clock, feed_factory, play_factory):
        feed = feed_factory(plays=[play_factory(45)])
        tracker.update(feed, clock())
        clock.advance(minutes=10)
        assert tracker.update(feed, clock()) == []
        assert tracker.engaged is True

    def test_times_out_after_limit(self, tracker, clock, feed_factory, play_factory):
        feed = feed_factory(plays=[play_factory(45)])
        tracker.update(feed, clock())
        clock.advance(minutes=10, seconds=1)

        transitions = tracker.update(feed, clock())

        assert [t.event for t in transitions] == [AtBatEvent.TIMED_OUT]
        assert transitions[0].reason == "timeout"
        assert tracker.engaged is False

    def test_timed_out_index_is_not_reentered(self, tracker, clock, feed_factory, play_factory):
        stuck = feed_factory(plays=[play_factory(45)])
        tracker.update(stuck, clock())
        clock.advance(minutes=11)
        tracker.update(stuck, clock())

        clock.advance(seconds=5)
        assert tracker.update(stuck, clock()) == []
        assert tracker.engaged is False

    def test_new_plate_appearance_supersedes_unresolved_one(self, tracker, clock, feed_factory, play_factory):
        tracker.update(feed_factory(plays=[play_factory(45)]), clock())
        clock.advance(seconds=5)

        transitions = tracker.update(feed_factory(plays=[play_factory(52)]), clock())

        assert [t.event for t in transitions] == [AtBatEvent.TIMED_OUT, AtBatEvent.ENTERED]
        assert transitions[0].reason == "superseded"
        assert transitions[0].at_bat_index == 45
        assert tracker.state.current_play_index == 52

    def test_exit_and_next_entry_in_same_cycle(self, tracker, clock, feed_factory, play_factory):
        tracker.update(feed_factory(plays=[play_factory(45)]), clock())
        clock.advance(minutes=20)

        feed = feed_factory(
            plays=[play_factory(45, event_type="walk"), play_factory(53)],
        )
        transitions = tracker.update(feed, clock())

        assert [t.event for t in transitions] == [AtBatEvent.EXITED, AtBatEvent.ENTERED]
        assert tracker.state.current_play_index == 53


class TestReset:
    def test_reset_forces_idle(self, tracker, clock, feed_factory, play_factory):
        tracker.update(feed_factory(plays=[play_factory(45)]), clock())

        transition = tracker.reset("fetch_error")

        assert transition.event is AtBatEvent.RESET
        assert transition.at_bat_index == 45
        assert transition.reason == "fetch_error"
        state = tracker.state
        assert state.active is False
        assert state.current_play_index is None
        assert state.engaged_since is None

    def test_reset_when_idle_is_noop(self, tracker):
        assert tracker.reset("fetch_error") is None

    def test_reset_allows_reentry_of_same_index(self, tracker, clock, feed_factory, play_factory):
        feed = feed_factory(plays=[play_factory(45)])
        tracker.update(feed, clock())
        tracker.reset("fetch_error")

        clock.advance(seconds=30)
        transitions = tracker.update(feed, clock())
        assert [t.event for t in transitions] == [AtBatEvent.ENTERED]
        assert tracker.state.engaged_since == clock.now

    def test_finished_index_forgotten_on_reset(self, tracker, clock, feed_factory, play_factory):
        """At-bat indices restart each game; a reset between games allows the same index."""
        tracker.update(feed_factory(plays=[play_factory(30)]), clock())
        clock.advance(seconds=5)
        tracker.update(feed_factory(plays=[play_factory(30, event_type="field_out")]), clock())
        assert tracker.engaged is False

        assert tracker.reset("finished") is None

        clock.advance(hours=3)
        transitions = tracker.update(feed_factory(plays=[play_factory(30)]), clock())
        assert [t.event for t in transitions] == [AtBatEvent.ENTERED]
        assert tracker.state.current_play_index == 30
