from datetime import timedelta

from agenda.services.availability.overlap import ConflictIndex, ExclusionSet, overlaps
from agenda.services.availability.timezone import local_day_bounds
from agenda.services.availability.types import Appointment, TimeOff

from conftest import MONDAY, utc


class TestOverlaps:

    def test_overlapping_intervals(self):
        assert overlaps(utc(2030, 3, 4, 10), utc(2030, 3, 4, 11), utc(2030, 3, 4, 10, 30), utc(2030, 3, 4, 12))

    def test_contained_interval(self):
        assert overlaps(utc(2030, 3, 4, 10), utc(2030, 3, 4, 12), utc(2030, 3, 4, 10, 30), utc(2030, 3, 4, 11))

    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(utc(2030, 3, 4, 10), utc(2030, 3, 4, 11), utc(2030, 3, 4, 11), utc(2030, 3, 4, 12))
        assert not overlaps(utc(2030, 3, 4, 11), utc(2030, 3, 4, 12), utc(2030, 3, 4, 10), utc(2030, 3, 4, 11))

    def test_disjoint_intervals(self):
        assert not overlaps(utc(2030, 3, 4, 8), utc(2030, 3, 4, 9), utc(2030, 3, 4, 10), utc(2030, 3, 4, 11))


class TestExclusionSet:

    def setup_method(self):
        self.day = local_day_bounds(MONDAY, 180)  # 03:00 UTC .. 03:00 UTC next day

    def test_interval_covering_the_day_closes_it(self):
        exclusions = ExclusionSet(self.day, [TimeOff(self.day.start, self.day.end)])
        assert exclusions.closes_full_day

    def test_multi_day_interval_closes_the_day(self):
        off = TimeOff(self.day.start - timedelta(days=3), self.day.end + timedelta(days=3))
        assert ExclusionSet(self.day, [off]).closes_full_day

    def test_partial_intervals_do_not_close_the_day(self):
        # two halves together cover the day, but no single interval does
        middle = self.day.start + timedelta(hours=12)
        exclusions = ExclusionSet(self.day, [TimeOff(self.day.start, middle), TimeOff(middle, self.day.end)])
        assert not exclusions.closes_full_day

    def test_intervals_outside_the_day_are_dropped(self):
        before = TimeOff(self.day.start - timedelta(hours=5), self.day.start)
        exclusions = ExclusionSet(self.day, [before])
        assert exclusions.intervals == []

    def test_blocks_overlapping_slot_only(self):
        off = TimeOff(utc(2030, 3, 4, 13, 15), utc(2030, 3, 4, 13, 45))
        exclusions = ExclusionSet(self.day, [off])
        assert exclusions.blocks(utc(2030, 3, 4, 13), utc(2030, 3, 4, 13, 30))
        assert exclusions.blocks(utc(2030, 3, 4, 13, 30), utc(2030, 3, 4, 14))
        assert not exclusions.blocks(utc(2030, 3, 4, 13, 45), utc(2030, 3, 4, 14, 15))
        assert not exclusions.blocks(utc(2030, 3, 4, 12, 45), utc(2030, 3, 4, 13, 15))


class TestConflictIndex:

    def test_buffer_extends_after_end(self):
        index = ConflictIndex([Appointment(utc(2030, 3, 4, 13), utc(2030, 3, 4, 13, 30))], buffer_minutes=15)
        assert index.blocks(utc(2030, 3, 4, 13, 30), utc(2030, 3, 4, 14))
        assert not index.blocks(utc(2030, 3, 4, 13, 45), utc(2030, 3, 4, 14, 15))

    def test_buffer_never_extends_before_start(self):
        index = ConflictIndex([Appointment(utc(2030, 3, 4, 13), utc(2030, 3, 4, 13, 30))], buffer_minutes=60)
        assert not index.blocks(utc(2030, 3, 4, 12, 30), utc(2030, 3, 4, 13))

    def test_no_buffer_allows_back_to_back(self):
        index = ConflictIndex([Appointment(utc(2030, 3, 4, 13), utc(2030, 3, 4, 13, 30))])
        assert not index.blocks(utc(2030, 3, 4, 13, 30), utc(2030, 3, 4, 14))
        assert index.blocks(utc(2030, 3, 4, 13, 15), utc(2030, 3, 4, 13, 45))

    def test_unsorted_input_is_handled(self):
        index = ConflictIndex(
            [
                Appointment(utc(2030, 3, 4, 16), utc(2030, 3, 4, 17)),
                Appointment(utc(2030, 3, 4, 13), utc(2030, 3, 4, 14)),
            ]
        )
        assert index.blocks(utc(2030, 3, 4, 16, 30), utc(2030, 3, 4, 17))
        assert not index.blocks(utc(2030, 3, 4, 14), utc(2030, 3, 4, 16))

    def test_empty_index_blocks_nothing(self):
        assert not ConflictIndex([]).blocks(utc(2030, 3, 4, 13), utc(2030, 3, 4, 14))
