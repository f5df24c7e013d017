import conslist as cl


def test_render_matches_traversal_order():
    lst = cl.new().prepend(1).prepend(2).prepend(3)
    assert cl.render(lst) == "[3, 2, 1]"
    assert str(lst) == "[3, 2, 1]"
    assert str(cl.new()) == "[]"


def test_render_uses_element_str():
    lst = cl.List.from_iterable(["a", 1.5, None])
    assert str(lst) == "[a, 1.5, None]"
    assert repr(lst) == "List(['a', 1.5, None])"


def test_render_custom_tokens():
    lst = cl.List.from_iterable([1, 2])
    assert cl.render(lst, sep=" ", open="(", close=")") == "(1 2)"


def test_render_debug_shows_shared_counts():
    l1 = cl.List.from_iterable([3, 2, 1])
    l2 = l1.tail()
    assert cl.render_debug(l1) == "(3 rc=1) -> (2 rc=2) -> (1 rc=1) -> nil"
    assert cl.render_debug(l2) == "(2 rc=2) -> (1 rc=1) -> nil"
    assert cl.render_debug(cl.new()) == "nil"
    l1.drop()
    assert cl.render_debug(l1) == "<released>"
    assert cl.render_debug(l2) == "(2 rc=1) -> (1 rc=1) -> nil"
