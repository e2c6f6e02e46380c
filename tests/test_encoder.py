"""
Tests for encoding a Model into tracker buffers.
"""

import numpy as np
import pytest

from highslp import (
    AllocationFailure,
    AllocationTracker,
    INFINITY,
    Integrality,
    Model,
    ModelFreedError,
    ValidationError,
    encode,
)
from highslp.allocations import AllocationState
from highslp.encoder import BUFFER_KEYS


LP_KEYS = set(BUFFER_KEYS) - {'integrality'}


class TestEncode:

    def test_lp_layout(self, example_data):
        tracker = AllocationTracker()
        encoded = encode(Model(**example_data), tracker)

        assert (encoded.num_col, encoded.num_row, encoded.num_nz) == (2, 3, 5)
        assert encoded.col_cost.tolist() == [2.0, 3.0]
        assert encoded.col_lower.tolist() == [0.0, 1.0]
        assert encoded.col_upper.tolist() == [3.0, INFINITY]
        assert encoded.ar_start.tolist() == [0, 1, 3]
        assert encoded.ar_index.tolist() == [1, 0, 1, 0, 1]
        assert encoded.ar_value.tolist() == [1.0, 1.0, 2.0, 2.0, 1.0]
        assert encoded.row_lower.tolist() == [-INFINITY, 10.0, 8.0]
        assert encoded.row_upper.tolist() == [6.0, 14.0, INFINITY]
        assert encoded.integrality is None
        assert not encoded.is_mip
        assert set(tracker.keys()) == LP_KEYS

    def test_buffer_dtypes(self, example_data):
        encoded = encode(Model(**example_data), AllocationTracker())

        assert encoded.ar_start.dtype == np.int32
        assert encoded.ar_index.dtype == np.int32
        assert encoded.ar_value.dtype == np.float64
        assert encoded.col_cost.dtype == np.float64

    def test_buffers_are_tracker_owned(self, example_data):
        tracker = AllocationTracker()
        encoded = encode(Model(**example_data), tracker)

        assert tracker.get('col_cost').buffer is encoded.col_cost
        assert tracker.outstanding == len(LP_KEYS)

    def test_mip_layout(self, example_data, integer_flags):
        tracker = AllocationTracker()
        encoded = encode(Model(integrality=integer_flags, **example_data), tracker)

        assert encoded.is_mip
        assert encoded.integrality.dtype == np.int32
        assert encoded.integrality.tolist() == [1, 1]
        assert 'integrality' in tracker

    def test_bounded_rows_encode_the_same(self, example_data, bounded_rows):
        plain = encode(Model(**example_data), AllocationTracker())
        augmented = encode(
            Model.from_bounded_rows(example_data['costs'], example_data['bounds'], bounded_rows),
            AllocationTracker(),
        )

        for name in ('ar_start', 'ar_index', 'ar_value', 'row_lower', 'row_upper'):
            assert getattr(plain, name).tolist() == getattr(augmented, name).tolist()

    def test_lp_args_order(self, example_data):
        encoded = encode(Model(**example_data), AllocationTracker())
        args = encoded.lp_args()

        assert args[:3] == (2, 3, 5)
        assert args[3] is encoded.col_cost
        assert args[6] is encoded.row_lower
        assert args[8] is encoded.ar_start


class TestReencode:

    def test_reencode_replaces_every_buffer(self, example_data):
        tracker = AllocationTracker()
        model = Model(**example_data)
        encode(model, tracker)
        first = {key: tracker.get(key) for key in tracker.keys()}

        encode(model, tracker)

        assert tracker.replacements == len(LP_KEYS)
        assert tracker.outstanding == len(LP_KEYS)
        for allocation in first.values():
            assert allocation.state is AllocationState.FREED

    def test_mip_to_lp_drops_integrality(self, example_data, integer_flags):
        tracker = AllocationTracker()
        model = Model(integrality=integer_flags, **example_data)
        encode(model, tracker)
        integrality = tracker.get('integrality')

        model.set_integrality([])
        encoded = encode(model, tracker)

        assert not encoded.is_mip
        assert 'integrality' not in tracker
        assert integrality.state is AllocationState.FREED
        assert tracker.outstanding == len(LP_KEYS)

    def test_reencode_picks_up_new_rows(self, example_data):
        tracker = AllocationTracker()
        model = Model(**example_data)
        encode(model, tracker)

        model.set_rows([[1.0, 1.0]], [0.0], [5.0])
        encoded = encode(model, tracker)

        assert encoded.num_row == 1
        assert encoded.ar_index.tolist() == [0, 1]


class TestEncodeFailures:

    def test_validation_error_allocates_nothing(self, example_data):
        tracker = AllocationTracker()
        model = Model(**dict(example_data, bounds=[(0.0, 1.0)]))

        with pytest.raises(ValidationError):
            encode(model, tracker)

        assert len(tracker) == 0
        assert tracker.allocated == 0

    def test_freed_model_allocates_nothing(self, example_data):
        model = Model(**example_data)
        model.free()

        with pytest.raises(ModelFreedError):
            encode(model, model.tracker)

        assert model.tracker.allocated == 0
        assert len(model.tracker) == 0

    def test_empty_rows_rejected(self):
        tracker = AllocationTracker()
        with pytest.raises(ValidationError, match="rows are empty"):
            encode(Model(costs=[1.0], bounds=[(0.0, 1.0)]), tracker)
        assert tracker.allocated == 0

    def test_allocation_failure_releases_partial_encoding(self, example_data, monkeypatch):
        tracker = AllocationTracker()
        real_allocate = tracker.allocate
        calls = []

        def failing_allocate(count, dtype, key=None):
            calls.append(count)
            if len(calls) == 4:
                raise AllocationFailure("no memory")
            return real_allocate(count, dtype, key)

        monkeypatch.setattr(tracker, "allocate", failing_allocate)

        with pytest.raises(AllocationFailure):
            encode(Model(**example_data), tracker)

        assert len(tracker) == 0
        assert tracker.outstanding == 0

    def test_integrality_values_are_encoded_verbatim(self, example_data):
        flags = [Integrality.ImplicitInteger, Integrality.Continuous]
        encoded = encode(Model(integrality=flags, **example_data), AllocationTracker())
        assert encoded.integrality.tolist() == [2, 0]
