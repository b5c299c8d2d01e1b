"""Tests for the exception hierarchy."""

from __future__ import annotations

import pickle

import pytest

from parallel_harness.errors import (
    HarnessError,
    InvalidConfigError,
    PoolNotRunningError,
    ReductionFailedError,
    TaskFailedError,
    UnresolvedBindingError,
    UnsupportedPlatformError,
)


class TestHierarchy:
    """Every error derives from HarnessError and a matching builtin."""

    @pytest.mark.parametrize(('error_type', 'builtin'), [
        (InvalidConfigError, ValueError),
        (UnsupportedPlatformError, RuntimeError),
        (PoolNotRunningError, RuntimeError),
        (UnresolvedBindingError, NameError),
        (TaskFailedError, HarnessError),
        (ReductionFailedError, HarnessError),
    ])
    def test_bases(self, error_type: type[Exception], builtin: type[Exception]) -> None:
        """Errors can be caught as HarnessError or their builtin base."""
        assert issubclass(error_type, HarnessError)
        assert issubclass(error_type, builtin)


class TestUnresolvedBindingError:
    """Tests for UnresolvedBindingError."""

    def test_names_the_binding(self) -> None:
        """The error keeps and reports the missing name."""
        error = UnresolvedBindingError('offset')
        assert error.name == 'offset'
        assert "'offset'" in str(error)

    def test_survives_pickling(self) -> None:
        """The error crosses a process boundary intact."""
        restored = pickle.loads(pickle.dumps(UnresolvedBindingError('offset')))
        assert isinstance(restored, UnresolvedBindingError)
        assert restored.name == 'offset'


class TestTaskFailedError:
    """Tests for TaskFailedError."""

    def test_message_names_item_and_cause(self) -> None:
        """The message names the failing index and the cause."""
        error = TaskFailedError(7, ValueError('math domain error'))
        assert error.index == 7
        assert error.chunk_id is None
        assert str(error) == 'Task failed on item 7: ValueError: math domain error'

    def test_message_names_chunk(self) -> None:
        """A chunk id is included when present."""
        error = TaskFailedError(3, KeyError('k'), chunk_id=1)
        assert 'item 3 of chunk 1' in str(error)

    def test_survives_pickling_with_cause(self) -> None:
        """Index, chunk and cause survive pickling."""
        error = TaskFailedError(4, UnresolvedBindingError('scale'), chunk_id=2)
        restored = pickle.loads(pickle.dumps(error))
        assert restored.index == 4
        assert restored.chunk_id == 2
        assert isinstance(restored.cause, UnresolvedBindingError)
        assert restored.cause.name == 'scale'


class TestReductionFailedError:
    """Tests for ReductionFailedError."""

    def test_message_names_item_and_cause(self) -> None:
        """The folded index and the accumulate error are reported."""
        error = ReductionFailedError(6, OverflowError('too big'))
        assert error.index == 6
        assert isinstance(error.cause, OverflowError)
        assert str(error) == 'Reduction failed on item 6: OverflowError: too big'
