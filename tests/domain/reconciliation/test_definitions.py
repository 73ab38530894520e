from __future__ import annotations

from bibsync.domain.reconciliation import (
    DefinitionAdded,
    DefinitionContentChanged,
    DefinitionRemoved,
    DefinitionRenamed,
)
from bibsync.domain.reconciliation.definitions import reconcile_definitions
from tests.helpers.bibliography import make_definition


def test_no_definitions_on_either_side() -> None:
    assert reconcile_definitions([make_definition("x", "1")], [], []) == []


def test_unchanged_definitions_produce_nothing() -> None:
    definitions = [make_definition("x", "1"), make_definition("y", "2")]

    assert reconcile_definitions(definitions, definitions, definitions) == []


def test_same_content_under_new_name_is_a_rename() -> None:
    baseline = make_definition("x", "1")
    external = make_definition("y", "1")
    memory = make_definition("x", "1")

    (change,) = reconcile_definitions([memory], [baseline], [external])

    assert isinstance(change, DefinitionRenamed)
    assert (change.old_name, change.new_name) == ("x", "y")
    assert change.memory is memory


def test_rename_without_memory_counterpart_is_still_reported() -> None:
    (change,) = reconcile_definitions([], [make_definition("x", "1")], [make_definition("y", "1")])

    assert isinstance(change, DefinitionRenamed)
    assert change.memory is None


def test_changed_content_under_same_name() -> None:
    memory = make_definition("jcp", "J. Chem. Phys.")

    (change,) = reconcile_definitions(
        [memory],
        [make_definition("jcp", "J. Chem. Phys.")],
        [make_definition("jcp", "Journal of Chemical Physics")],
    )

    assert isinstance(change, DefinitionContentChanged)
    assert change.name == "jcp"
    assert change.external.content == "Journal of Chemical Physics"
    assert change.memory is memory


def test_removal_requires_memory_counterpart() -> None:
    baseline = [make_definition("x", "1")]

    assert reconcile_definitions([], baseline, []) == []

    memory = make_definition("x", "local")
    (change,) = reconcile_definitions([memory], baseline, [])
    assert change == DefinitionRemoved(baseline=baseline[0], memory=memory)


def test_new_external_definition_is_added() -> None:
    added = make_definition("z", "3")

    changes = reconcile_definitions([], [make_definition("x", "1")], [make_definition("x", "1"), added])

    assert changes == [DefinitionAdded(external=added)]


def test_each_external_definition_backs_one_change() -> None:
    # both baseline entries could be renamed to "z"; only the first one is
    baseline = [make_definition("x", "same"), make_definition("y", "same")]
    external = [make_definition("z", "same")]
    memory = [make_definition("x", "same"), make_definition("y", "same")]

    changes = reconcile_definitions(memory, baseline, external)

    assert [type(change) for change in changes] == [DefinitionRenamed, DefinitionRemoved]
    renamed, removed = changes
    assert isinstance(renamed, DefinitionRenamed)
    assert renamed.old_name == "x"
    assert renamed.memory is memory[0]
    assert isinstance(removed, DefinitionRemoved)
    assert removed.memory is memory[1]
