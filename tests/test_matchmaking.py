"""
Tests for the waiting queue and first-fit compatibility rules.
"""
from core.matchmaking import (
    WaitingQueue,
    common_interests,
    find_match,
    is_compatible,
    is_gender_compatible,
    passes_interest_filter,
)
from core.models import Participant

from conftest import make_profile


def participant(pid, gender="any", preference="any", interests=None):
    return Participant.from_profile(pid, make_profile(gender, preference, interests))


class TestGenderFilter:
    """Bidirectional gender preference checks."""

    def test_any_matches_everyone(self):
        seeker = participant("s")
        assert is_gender_compatible(seeker, participant("c", gender="male"))
        assert is_gender_compatible(seeker, participant("c", gender="female"))

    def test_male_seeking_female_never_pairs_with_male(self):
        seeker = participant("s", gender="male", preference="female")
        candidate = participant("c", gender="male", preference="any")
        assert not is_gender_compatible(seeker, candidate)

    def test_candidate_preference_must_admit_seeker(self):
        seeker = participant("s", gender="male", preference="any")
        candidate = participant("c", gender="female", preference="female")
        assert not is_gender_compatible(seeker, candidate)

    def test_mutual_preferences(self):
        seeker = participant("s", gender="male", preference="female")
        candidate = participant("c", gender="female", preference="male")
        assert is_gender_compatible(seeker, candidate)

    def test_self_declared_any_only_matches_any_preference(self):
        seeker = participant("s", gender="any", preference="any")
        assert not is_gender_compatible(seeker, participant("c", gender="female", preference="male"))
        assert is_gender_compatible(seeker, participant("c", gender="female", preference="any"))


class TestInterestFilter:
    """Asymmetric interest filter."""

    def test_seeker_without_interests_accepts_candidate_with_interests(self):
        assert passes_interest_filter(participant("s"), participant("c", interests=["music"]))

    def test_no_common_tag_is_rejected(self):
        seeker = participant("s", interests=["music"])
        assert not passes_interest_filter(seeker, participant("c", interests=["gaming"]))

    def test_one_common_tag_is_enough(self):
        seeker = participant("s", interests=["music"])
        assert passes_interest_filter(seeker, participant("c", interests=["music", "art"]))

    def test_open_candidate_admits_seeker_with_interests(self):
        # A waiting participant without interests accepts anyone
        seeker = participant("s", interests=["music"])
        assert passes_interest_filter(seeker, participant("c"))

    def test_candidate_interests_do_not_restrict_open_seeker(self):
        candidate = participant("c", interests=["chess"])
        assert is_compatible(participant("s"), candidate)

    def test_interest_filter_does_not_override_gender(self):
        seeker = participant("s", gender="male", preference="female", interests=["music"])
        candidate = participant("c", gender="male", interests=["music"])
        assert not is_compatible(seeker, candidate)

    def test_common_interests_keep_first_participant_order(self):
        first = participant("a", interests=["art", "music", "chess"])
        second = participant("b", interests=["chess", "music"])
        assert common_interests(first, second) == ["music", "chess"]

    def test_tags_are_normalized_before_comparison(self):
        seeker = participant("s", interests=["  Music "])
        assert passes_interest_filter(seeker, participant("c", interests=["MUSIC"]))


class TestFindMatch:
    def test_first_fit_not_best_fit(self):
        seeker = participant("s", interests=["music", "art"])
        one_tag = participant("p1", interests=["music"])
        two_tags = participant("p2", interests=["music", "art"])
        assert find_match(seeker, [one_tag, two_tags]) is one_tag

    def test_skips_incompatible_candidates(self):
        seeker = participant("s", gender="male", preference="female")
        wrong = participant("p1", gender="male")
        right = participant("p2", gender="female")
        assert find_match(seeker, [wrong, right]) is right

    def test_never_matches_self(self):
        seeker = participant("s")
        assert find_match(seeker, [seeker]) is None

    def test_empty_pool(self):
        assert find_match(participant("s"), []) is None


class TestWaitingQueue:
    """FIFO waiting queue."""

    def test_fifo_fairness(self):
        queue = WaitingQueue()
        first = participant("p1")
        second = participant("p2")
        queue.append(first)
        queue.append(second)
        assert queue.find_match(participant("s")) is first

    def test_participant_appears_at_most_once(self):
        queue = WaitingQueue()
        p = participant("p1")
        assert queue.append(p) is True
        assert queue.append(p) is False
        assert queue.ids() == ["p1"]

    def test_cancel_preserves_order(self):
        queue = WaitingQueue()
        for pid in ("a", "b", "c", "d"):
            queue.append(participant(pid))
        queue.cancel("b")
        assert queue.ids() == ["a", "c", "d"]

    def test_cancel_absent_is_noop(self):
        queue = WaitingQueue()
        queue.append(participant("a"))
        assert queue.cancel("missing") is None
        assert queue.ids() == ["a"]

    def test_requeue_after_cancel_goes_to_tail(self):
        queue = WaitingQueue()
        a, b = participant("a"), participant("b")
        queue.append(a)
        queue.append(b)
        queue.cancel("a")
        queue.append(a)
        assert queue.ids() == ["b", "a"]

    def test_at_most_once_under_mixed_operations(self):
        queue = WaitingQueue()
        people = {pid: participant(pid) for pid in ("a", "b", "c")}
        for pid in ("a", "b", "a", "c", "b", "a"):
            queue.cancel(pid)
            queue.append(people[pid])
        queue.cancel("c")
        queue.append(people["a"])
        ids = queue.ids()
        assert len(ids) == len(set(ids))
        assert sorted(ids) == ["a", "b"]
        assert "c" not in queue
        assert len(queue) == 2
