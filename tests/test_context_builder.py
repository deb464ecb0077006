import pytest

from topicpilot.context import ContextBuilder, estimate
from topicpilot.tree import TopicTree, resolve


def test_digest_for_leaf(lamp):
    digest = ContextBuilder().build(lamp)

    assert digest == (
        "Topic: home/bedroom/lamp\n"
        "Value: ON\n"
        "Retained: true\n"
        "\n"
        "Related Topics (1):\n"
        "  home/bedroom/sensor: 22.5\n"
        "\n"
        "Messages: 4"
    )


def test_digest_for_structural_node(root):
    digest = ContextBuilder().build(resolve("home", root))

    assert digest.startswith("Topic: home\n")
    assert "Value:" not in digest
    assert "Messages:" not in digest
    assert digest.endswith("Subtopics: 2")


def test_digest_for_root(root):
    assert ContextBuilder().build(root).startswith("Topic: (root)")


def test_value_is_escaped_to_one_line():
    tree = TopicTree()
    node = tree.publish("notes/a", 'line1\nsay "hi"')

    digest = ContextBuilder().build(node)
    value_line = [line for line in digest.split("\n") if line.startswith("Value: ")][0]

    assert value_line == 'Value: line1\\nsay \\"hi\\"'


def test_no_neighbors_omits_related_section():
    tree = TopicTree()
    node = tree.publish("solo", "1")

    assert ContextBuilder().build(node) == "Topic: solo\nValue: 1\n\nMessages: 1"


def test_related_priority_order():
    tree = TopicTree()
    tree.publish("x", "P")
    focus = tree.publish("x/y", "Y")
    tree.publish("x/z", "Z")
    tree.publish("x/y/c", "C")
    tree.publish("x/y/c/g", "G")
    tree.publish("x/z/q", "Q")

    assert ContextBuilder().related(focus) == [
        "  x: P",
        "  x/z: Z",
        "  x/y/c: C",
        "  x/y/c/g: G",
        "  x/z/q: Q",
    ]


def test_related_skips_nodes_without_value():
    tree = TopicTree()
    focus = tree.publish("a/b", "1")
    tree.ensure("a/empty")
    tree.publish("a/c", None)

    assert ContextBuilder().related(focus) == []


def test_first_misfit_ends_tier_but_not_walk():
    tree = TopicTree()
    focus = tree.publish("p/a", "1")
    tree.publish("p/b", "x" * 200)
    tree.publish("p/c", "2")
    tree.publish("p/a/k", "v")

    # p/b costs more than the whole budget; p/c is never tried
    assert ContextBuilder(neighbor_token_limit=20).related(focus) == ["  p/a/k: v"]

    related = ContextBuilder().related(focus)
    assert related[0].startswith("  p/b: ")
    assert related[1:] == ["  p/c: 2", "  p/a/k: v"]


def test_neighbor_values_are_truncated_per_entry():
    tree = TopicTree()
    focus = tree.publish("p/a", "1")
    tree.publish("p/b", "x" * 500)

    entry = ContextBuilder().related(focus)[0]

    assert entry.endswith("…[TRUNCATED]")
    assert len(entry) == len("  p/b: ") + 30 * 4


def test_related_total_stays_within_limit():
    tree = TopicTree()
    focus = tree.publish("site/focus", "f")
    for i in range(40):
        tree.publish(f"site/n{i}", f"value-{i}" * 5)
        tree.publish(f"site/focus/c{i}", i)

    for limit in (10, 50, 120, 500):
        related = ContextBuilder(neighbor_token_limit=limit).related(focus)
        assert sum(estimate(entry) for entry in related) <= limit


def test_neighbor_limit_must_be_positive():
    with pytest.raises(ValueError):
        ContextBuilder(neighbor_token_limit=0)


def test_quick_suggestions(lamp, root):
    assert ContextBuilder.quick_suggestions(lamp) == [
        "Explain this data structure",
        "What does this value mean?",
        "Analyze message patterns",
        "What can I do with this topic?",
    ]
    assert ContextBuilder.quick_suggestions(resolve("home", root)) == [
        "Summarize all subtopics",
        "What can I do with this topic?",
    ]
    assert ContextBuilder.quick_suggestions(None) == ["What can I do with this topic?"]


def test_paths_are_escaped_to_one_line():
    tree = TopicTree()
    node = tree.publish(["a", "line\nbreak"], "v")
    tree.publish(["a", "tab\there"], "w")

    digest = ContextBuilder().build(node)
    lines = digest.split("\n")

    assert lines[0] == "Topic: a/line\\nbreak"
    assert "  a/tab\\there: w" in lines
