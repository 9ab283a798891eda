"""
actiongraph Compiler Tests

Graph literal -> ActionTree: node identity, paths, outputs and flags.
"""

import copy
import functools
from types import MappingProxyType

import pytest

from actiongraph.compiler import (
    ActionNode,
    ActionRegistry,
    GraphCompiler,
    action,
    compile_graph,
    graph_compiler,
)


def first(args, store):
    pass


def second(args, store, completion):
    completion()


def third(args, store):
    pass


def fourth(args, store):
    pass


def fifth(args, store):
    pass


# =============================================================================
# Registry
# =============================================================================

class TestActionRegistry:
    """Identity-based action registration."""

    def test_register_dedups_by_identity(self):
        registry = ActionRegistry()

        assert registry.register(first) == 0
        assert registry.register(second) == 1
        assert registry.register(first) == 0
        assert len(registry) == 2
        assert registry.names == ["first", "second"]

    def test_equal_but_distinct_callables_get_own_slots(self):
        registry = ActionRegistry()
        a = functools.partial(first)
        b = functools.partial(first)

        assert registry.register(a) == 0
        assert registry.register(b) == 1

    def test_display_name_from_decorator(self):
        @action(name="load_user")
        def fn(args, store):
            pass

        registry = ActionRegistry()
        index = registry.register(fn)

        assert registry.name_of(index) == "load_user"

    def test_display_name_of_partial(self):
        registry = ActionRegistry()
        index = registry.register(functools.partial(third))

        assert registry.name_of(index) == "third"

    def test_action_decorator_sets_default_output(self):
        @action(default_output="success")
        def fn(args, store, completion):
            pass

        assert fn.default_output == "success"
        assert not hasattr(fn, "action_name")


# =============================================================================
# Compiler
# =============================================================================

class TestGraphCompiler:
    """Compilation of graph literals."""

    def test_sequential_graph(self):
        tree = compile_graph([first, third])

        assert len(tree.branches) == 2
        assert all(isinstance(entry, ActionNode) for entry in tree.branches)
        assert [n.name for n in tree.branches] == ["first", "third"]
        assert tree.actions == (first, third)
        assert tree.names == ("first", "third")

    def test_empty_graph(self):
        tree = compile_graph([])

        assert tree.branches == ()
        assert tree.node_count == 0

    def test_nested_list_is_concurrent_group(self):
        tree = compile_graph([first, [second, third], fourth])

        group = tree.branches[1]
        assert isinstance(group, tuple)
        assert [n.name for n in group] == ["second", "third"]
        assert all(n.is_async for n in group)
        assert not tree.branches[0].is_async
        assert not tree.branches[2].is_async

    def test_outputs_map_is_captured_not_a_sibling(self):
        tree = compile_graph([second, {"success": [third], "error": [fourth]}, fifth])

        assert len(tree.branches) == 2
        node = tree.branches[0]
        assert node.output_names == ("success", "error")
        assert [n.name for n in node.outputs["success"]] == ["third"]
        assert [n.name for n in node.outputs["error"]] == ["fourth"]
        assert tree.branches[1].name == "fifth"

    def test_outputs_map_is_read_only(self):
        tree = compile_graph([second, {"success": [third]}])
        outputs = tree.branches[0].outputs

        assert isinstance(outputs, MappingProxyType)
        with pytest.raises(TypeError):
            outputs["other"] = ()

    def test_outputs_inside_concurrent_group(self):
        tree = compile_graph([[second, {"success": [third]}, fourth, {"success": [fifth]}]])

        group = tree.branches[0]
        assert [n.name for n in group] == ["second", "fourth"]
        assert group[0].outputs["success"][0].name == "third"
        assert group[1].outputs["success"][0].name == "fifth"

    def test_output_branches_restart_sequential(self):
        tree = compile_graph([[second, {"success": [third, [fourth]]}]])

        member = tree.branches[0][0]
        branch = member.outputs["success"]
        assert member.is_async
        assert not branch[0].is_async
        assert branch[1][0].is_async

    def test_list_inside_group_is_sequence(self):
        tree = compile_graph([[first, [third, fourth]]])

        group = tree.branches[0]
        sequence = group[1]
        assert isinstance(sequence, tuple)
        assert [n.name for n in sequence] == ["third", "fourth"]
        assert not any(n.is_async for n in sequence)

    def test_paths(self):
        tree = compile_graph([first, [third, second, {"ok": [fourth]}], fifth])

        nodes = {n.name: n for n in tree.iter_nodes()}
        assert nodes["first"].path == (0,)
        assert nodes["third"].path == (1, 0)
        assert nodes["second"].path == (1, 1)
        assert nodes["fourth"].path == (1, 1, "outputs", "ok", 0)
        assert nodes["fifth"].path == (2,)

    def test_repeated_action_shares_registry_slot(self):
        tree = compile_graph([first, first, [first]])

        nodes = list(tree.iter_nodes())
        assert tree.actions == (first,)
        assert len(nodes) == 3
        assert {n.action_index for n in nodes} == {0}
        assert nodes[0] is not nodes[1]
        assert tree.action_for(nodes[2]) is first

    def test_compiling_twice_is_structurally_equal(self):
        graph = [first, [second, {"success": [third]}, fourth], fifth]

        one = graph_compiler.compile(graph)
        two = GraphCompiler().compile(graph)

        nodes_one = list(one.iter_nodes())
        nodes_two = list(two.iter_nodes())
        assert one.node_count == two.node_count == 5
        assert [n.name for n in nodes_one] == [n.name for n in nodes_two]
        assert [n.path for n in nodes_one] == [n.path for n in nodes_two]
        assert [n.output_names for n in nodes_one] == [n.output_names for n in nodes_two]
        assert all(a is not b for a, b in zip(nodes_one, nodes_two))

    def test_graph_literal_is_not_mutated(self):
        graph = [first, [second, {"success": [third]}], fourth, {"x": [fifth]}]
        snapshot = copy.deepcopy(graph)

        compile_graph(graph)

        assert graph == snapshot

    def test_non_list_output_kept_uncompiled(self):
        tree = compile_graph([second, {"success": third}])

        assert tree.branches[0].outputs["success"] is third

    def test_stray_mapping_becomes_a_node(self):
        mapping = {"success": [third]}
        tree = compile_graph([[first], mapping])

        assert len(tree.branches) == 2
        assert tree.action_for(tree.branches[1]) is mapping

    def test_tuples_are_accepted(self):
        tree = compile_graph((first, (second, third)))

        assert isinstance(tree.branches[1], tuple)
        assert tree.node_count == 3

    def test_reset_clears_node_state(self):
        tree = compile_graph([first, [second, {"success": [third]}]])
        for node in tree.iter_nodes():
            node.has_executed = True
            node.output_path = "success"
            node.args = {"a": 1}

        tree.reset()

        for node in tree.iter_nodes():
            assert node.has_executed is False
            assert node.output_path is None
            assert node.args == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
