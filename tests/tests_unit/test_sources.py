from collections.abc import Callable

from kron.pattern import Pattern
from kron.sources import AggregateTaskSource, SimpleTaskSource, aggregate
from kron.tasks import Task

EVERY_MINUTE = Pattern.parse("* * * * *")


def _noop() -> None:
    pass


def test_add_and_remove() -> None:
    source = SimpleTaskSource("reports")
    task = Task.simple(_noop)

    task_id = source.add(EVERY_MINUTE, task)

    assert task_id.startswith("reports")
    assert task_id in source
    assert source.size() == 1
    (definition,) = source.scheduled_tasks()
    assert definition.id == task_id
    assert definition.pattern is EVERY_MINUTE
    assert definition.task is task

    assert source.remove(task_id)
    assert not source.remove(task_id)
    assert source.size() == 0
    assert task_id not in source


def test_identifiers_are_unique() -> None:
    source = SimpleTaskSource()
    task = Task.simple(_noop)

    ids = {source.add(EVERY_MINUTE, task) for _ in range(100)}

    assert len(ids) == 100
    assert source.size() == 100
    assert all(task_id.startswith("<simple>") for task_id in ids)


def test_remove_unknown_is_noop() -> None:
    source = SimpleTaskSource()
    source.add(EVERY_MINUTE, Task.simple(_noop))

    assert not source.remove("not-a-task")
    assert source.size() == 1


def test_snapshot_is_not_affected_by_changes() -> None:
    source = SimpleTaskSource()
    first = source.add(EVERY_MINUTE, Task.simple(_noop))

    snapshot = source.scheduled_tasks()
    source.add(EVERY_MINUTE, Task.simple(_noop))
    source.remove(first)

    assert [d.id for d in snapshot] == [first]


def test_aggregate(make_task: Callable[..., Task]) -> None:
    a = SimpleTaskSource("a")
    b = SimpleTaskSource("b")
    a_id = a.add(EVERY_MINUTE, make_task())
    b_ids = [b.add(EVERY_MINUTE, make_task()) for _ in range(2)]

    combined = AggregateTaskSource([a, b])

    assert combined.name() == "Aggregate [a,b]"
    assert combined.size() == 3
    assert sorted(d.id for d in combined.scheduled_tasks()) == sorted([a_id, *b_ids])
    assert combined.members == (a, b)

    # Changes to members are seen on the next call
    a.remove(a_id)
    assert combined.size() == 2
    assert sorted(d.id for d in combined.scheduled_tasks()) == sorted(b_ids)

    # Members are never modified
    assert a.size() == 0
    assert b.size() == 2


def test_aggregate_name_base() -> None:
    combined = AggregateTaskSource([SimpleTaskSource("x")], name_base="All")

    assert combined.name() == "All [x]"


def test_empty_aggregate() -> None:
    combined = AggregateTaskSource([])

    assert combined.name() == "Aggregate []"
    assert combined.size() == 0
    assert list(combined.scheduled_tasks()) == []


def test_aggregate_helper() -> None:
    a = SimpleTaskSource("a")
    b = SimpleTaskSource("b")

    assert aggregate(a) is a
    combined = aggregate(a, b)
    assert isinstance(combined, AggregateTaskSource)
    assert combined.members == (a, b)


def test_nested_aggregates() -> None:
    a = SimpleTaskSource("a")
    b = SimpleTaskSource("b")
    c = SimpleTaskSource("c")
    for source in (a, b, c):
        source.add(EVERY_MINUTE, Task.simple(_noop))

    nested = aggregate(aggregate(a, b), c)

    assert nested.name() == "Aggregate [Aggregate [a,b],c]"
    assert nested.size() == 3
    assert len(nested.scheduled_tasks()) == 3


def test_repr() -> None:
    source = SimpleTaskSource("reports")
    source.add(EVERY_MINUTE, Task.simple(_noop))

    assert repr(source) == "<SimpleTaskSource 'reports' with 1 tasks>"
