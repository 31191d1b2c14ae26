"""Tests for the parameter group applier."""

from unittest.mock import MagicMock

import pytest

from neptune_params.exceptions import ParameterApplyError, RetryTimeoutError
from neptune_params.models import Parameter, ParameterDiff
from neptune_params_provisioner.applier import apply_diff
from tests.fixtures.backend import (
    FakeClock,
    FakeNeptuneBackend,
    client_error,
    make_parameters,
    pending_changes_error,
)


@pytest.fixture
def group(backend):
    backend.create_group("test-group", "neptune1", "test")
    backend.calls.clear()
    return "test-group"


def _apply(backend, group, diff, clock=None, **kwargs):
    clock = clock or FakeClock()
    return apply_diff(backend, group, diff, sleep=clock.sleep, clock=clock, **kwargs)


class TestApplyDiff:
    """Tests for applying removals and additions in batches."""

    def test_empty_diff_makes_no_calls(self, backend, group):
        result = _apply(backend, group, ParameterDiff())
        assert result.batches == []
        assert backend.calls == []

    def test_additions_batched_by_twenty(self, backend, group):
        """25 additions go out as one call of 20 and one of 5."""
        diff = ParameterDiff(to_add=tuple(make_parameters(25)))
        result = _apply(backend, group, diff)
        assert [len(names) for names in backend.calls_for("modify")] == [20, 5]
        assert backend.calls_for("reset") == []
        assert result.added == 25
        assert result.batch_sizes("modify") == [20, 5]

    def test_removals_before_additions(self, backend, group):
        """Every reset call is issued before the first modify call."""
        diff = ParameterDiff(
            to_remove=tuple(make_parameters(45, prefix="old")),
            to_add=tuple(make_parameters(30, prefix="new")),
        )
        _apply(backend, group, diff)
        operations = [op for op, _ in backend.calls]
        assert operations == ["reset", "reset", "reset", "modify", "modify"]

    def test_batch_order_preserved(self, backend, group):
        """Parameters are sent in diff order, within and across batches."""
        params = make_parameters(22)
        _apply(backend, group, ParameterDiff(to_add=tuple(params)))
        sent = [name for names in backend.calls_for("modify") for name in names]
        assert sent == [p.name for p in params]

    def test_reset_retried_on_pending_changes(self, backend, group):
        """Two pending-change conflicts then success: no error surfaces."""
        backend.fail("reset", pending_changes_error(), pending_changes_error())
        clock = FakeClock()
        result = _apply(
            backend, group, ParameterDiff(to_remove=(Parameter("a", "1"),)), clock=clock
        )
        assert len(backend.calls_for("reset")) == 3
        assert result.batches[0].attempts == 3
        assert len(clock.sleeps) == 2
        assert clock.now < 30

    def test_reset_gives_up_after_budget(self, backend, group):
        """Conflicts past the 30s budget surface as ParameterApplyError."""
        backend.fail("reset", *[pending_changes_error() for _ in range(100)])
        diff = ParameterDiff(
            to_remove=(Parameter("a", "1"),), to_add=(Parameter("b", "2"),)
        )
        clock = FakeClock()
        with pytest.raises(ParameterApplyError) as exc_info:
            _apply(backend, group, diff, clock=clock, reset_timeout=30)

        assert isinstance(exc_info.value.cause, RetryTimeoutError)
        assert exc_info.value.operation == "reset"
        assert clock.now == pytest.approx(30)
        assert backend.calls_for("modify") == []

    def test_other_reset_error_not_retried(self, backend, group):
        """An unclassified reset error aborts on the first attempt."""
        backend.fail("reset", client_error("InvalidParameterValue", "bad name"))
        diff = ParameterDiff(to_remove=(Parameter("a", "1"),), to_add=(Parameter("b", "2"),))
        with pytest.raises(ParameterApplyError) as exc_info:
            _apply(backend, group, diff)
        assert len(backend.calls_for("reset")) == 1
        assert backend.calls_for("modify") == []
        assert "InvalidParameterValue" in str(exc_info.value)

    def test_invalid_state_without_pending_changes_not_retried(self, backend, group):
        """Only the 'has pending changes' flavour of invalid state is retryable on reset."""
        backend.fail(
            "reset", client_error("InvalidDBParameterGroupState", "group is being deleted")
        )
        with pytest.raises(ParameterApplyError):
            _apply(backend, group, ParameterDiff(to_remove=(Parameter("a", "1"),)))
        assert len(backend.calls_for("reset")) == 1

    def test_modify_not_retried(self, backend, group):
        """Modify failures are never retried, even pending-change conflicts."""
        backend.fail("modify", pending_changes_error())
        with pytest.raises(ParameterApplyError) as exc_info:
            _apply(backend, group, ParameterDiff(to_add=(Parameter("a", "1"),)))
        assert len(backend.calls_for("modify")) == 1
        assert exc_info.value.operation == "modify"

    def test_failure_aborts_remaining_batches(self, backend, group):
        """Batch 3 of 5 failing leaves batches 1-2 applied and 4-5 unsent."""
        params = make_parameters(100)
        backend.groups["test-group"].parameters = {p.name: p.value for p in params}
        backend.fail("reset", None, None, client_error("InternalFailure", "boom"))

        with pytest.raises(ParameterApplyError) as exc_info:
            _apply(backend, group, ParameterDiff(to_remove=tuple(params)))

        error = exc_info.value
        assert error.batch_index == 3
        assert error.batch_count == 5
        assert error.parameters == [p.name for p in params[40:60]]
        assert error.result.removed == 40
        assert len(backend.calls_for("reset")) == 3
        assert len(backend.groups["test-group"].parameters) == 60

    def test_uses_configured_batch_size(self, backend, group):
        _apply(backend, group, ParameterDiff(to_add=tuple(make_parameters(7))), max_params=3)
        assert [len(n) for n in backend.calls_for("modify")] == [3, 3, 1]


class TestApplyDiffWithMockClient:
    """The applier only depends on the backend protocol."""

    def test_calls_backend_with_group_name(self):
        backend = MagicMock(spec=FakeNeptuneBackend)
        diff = ParameterDiff(to_remove=(Parameter("a", "1"),), to_add=(Parameter("b", "2"),))
        _apply(backend, "my-group", diff)
        backend.reset_parameters.assert_called_once_with("my-group", [Parameter("a", "1")])
        backend.modify_parameters.assert_called_once_with("my-group", [Parameter("b", "2")])
