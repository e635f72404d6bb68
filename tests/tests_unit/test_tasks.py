from unittest.mock import Mock

from kron.pattern import Pattern
from kron.tasks import ExecutionContext, NullExecutionContext, SimpleTask, Task, TaskDefinition


class ReportingTask(Task):
    @property
    def supports_status_tracking(self) -> bool:
        return True

    @property
    def supports_completeness_tracking(self) -> bool:
        return True

    def execute(self, context: ExecutionContext) -> None:
        context.update_status("halfway")
        context.update_completeness(0.5)
        if context.has_stop_been_requested():
            return
        context.pause_if_requested()
        context.update_completeness(1.0)


def test_simple_task() -> None:
    target = Mock()
    task = Task.simple(target)

    assert isinstance(task, SimpleTask)
    assert not task.can_be_stopped
    assert not task.can_be_paused
    assert not task.supports_status_tracking
    assert not task.supports_completeness_tracking

    task.execute(NullExecutionContext())
    target.assert_called_once_with()


def test_from_callable() -> None:
    target = Mock()

    Task.from_callable(target).execute(NullExecutionContext())

    target.assert_called_once_with()


def test_simple_task_repr() -> None:
    def nightly_report() -> None:
        pass

    assert repr(SimpleTask(nightly_report)) == "SimpleTask(test_simple_task_repr.<locals>.nightly_report)"


def test_null_context() -> None:
    context = NullExecutionContext()

    assert not context.has_stop_been_requested()
    assert context.pause_if_requested() is None
    context.update_completeness(0.3)
    context.update_status("ignored")


def test_task_uses_context() -> None:
    context = Mock(spec=ExecutionContext)
    context.has_stop_been_requested.return_value = False
    task = ReportingTask()

    assert task.supports_status_tracking
    assert not task.can_be_stopped

    task.execute(context)

    context.update_status.assert_called_once_with("halfway")
    assert [c.args[0] for c in context.update_completeness.call_args_list] == [0.5, 1.0]
    context.pause_if_requested.assert_called_once_with()


def test_task_stops_when_requested() -> None:
    context = Mock(spec=ExecutionContext)
    context.has_stop_been_requested.return_value = True

    ReportingTask().execute(context)

    context.pause_if_requested.assert_not_called()
    assert [c.args[0] for c in context.update_completeness.call_args_list] == [0.5]


def test_task_definition_unpacks() -> None:
    pattern = Pattern.parse("0 * * * *")
    task = Task.simple(Mock())

    task_id, unpacked_pattern, unpacked_task = TaskDefinition("id", pattern, task)

    assert task_id == "id"
    assert unpacked_pattern is pattern
    assert unpacked_task is task
    assert TaskDefinition("id", pattern, task) == TaskDefinition("id", pattern, task)
