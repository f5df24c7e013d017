import gc

import pytest

import conslist as cl


def _always_guard():
    return cl.GuardConfig(guards_enabled_fn=lambda: True)


def test_arena_init_reserves_null_row():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4))
    stats = arena.stats()
    assert stats.capacity == 4
    assert stats.live_count == 0
    assert stats.free_count == 3
    assert int(arena.refcount[cl.NULL_NODE]) == 0


def test_alloc_hands_out_lowest_ids_first():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4))
    a = arena.alloc("a")
    b = arena.alloc("b", a)
    c = arena.alloc("c", b)
    assert (a, b, c) == (1, 2, 3)
    assert int(arena.refcount[a]) == 2
    assert arena.node(a).is_shared
    assert not arena.node(c).is_shared
    assert int(arena.next[c]) == b
    assert arena.node(c) == cl.Node(id=3, elem="c", next=2, refcount=1)


def test_arena_grows_by_doubling_and_keeps_slots():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=2))
    lst = cl.List.from_iterable(range(7), arena=arena)
    assert arena.capacity == 8
    assert list(lst) == list(range(7))
    lst.drop()
    assert arena.stats().free_count == 7
    again = cl.List.from_iterable(range(7), arena=arena)
    assert arena.capacity == 8
    assert list(again) == list(range(7))


def test_freed_slots_are_reused():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4))
    first = cl.new(arena).prepend(1)
    slot = first.head_id
    first.drop()
    second = cl.new(arena).prepend(2)
    assert second.head_id == slot
    assert second.head() == 2
    assert arena.elems[slot] == 2


def test_exhausted_arena_is_fatal_and_leaves_list_intact():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4, max_capacity=4))
    lst = cl.List.from_iterable([1, 2, 3], arena=arena)
    with pytest.raises(cl.ConsArenaExhaustedError) as excinfo:
        lst.prepend(0)
    assert isinstance(excinfo.value, MemoryError)
    assert "max_capacity=4" in str(excinfo.value)
    assert list(lst) == [1, 2, 3]
    cl.require_audit_ok(arena, [lst])


def test_free_slot_guard_raises_corrupt():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4, guard_cfg=_always_guard()))
    with pytest.raises(cl.ConsArenaCorruptError):
        arena.retain(2)
    with pytest.raises(cl.ConsArenaCorruptError):
        arena.elem(cl.NULL_NODE)
    with pytest.raises(cl.ConsArenaCorruptError):
        arena.next_of(99)


def test_guards_can_be_disabled():
    arena = cl.NodeArena(
        cl.ArenaConfig(
            initial_capacity=4,
            guard_cfg=cl.GuardConfig(guards_enabled_fn=lambda: False),
        )
    )
    assert arena.elem(2) is None


def test_release_shared_rejects_unique_slot():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4, guard_cfg=_always_guard()))
    node = arena.alloc("x")
    with pytest.raises(cl.ConsArenaCorruptError):
        arena.release_shared(node)


def test_free_rejects_linked_slot():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4, guard_cfg=_always_guard()))
    tail = arena.alloc("t")
    head = arena.alloc("h", tail)
    with pytest.raises(cl.ConsArenaCorruptError):
        arena.free(head)
    assert arena.take_next(head) == tail
    assert arena.free(head) == "h"
    # The caller now holds the share head had on tail.
    assert int(arena.refcount[tail]) == 2


def test_walk_yields_chain_ids():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=8))
    lst = cl.List.from_iterable("xyz", arena=arena)
    ids = list(arena.walk(lst.head_id))
    assert len(ids) == 3
    assert [arena.elem(i) for i in ids] == ["x", "y", "z"]


class _CycleHolder:
    pass


def test_slot_freed_during_growth_stays_on_free_stack(monkeypatch):
    from cons_core import alloc as alloc_mod

    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4))
    victim = cl.new(arena).prepend("v")
    keep = cl.List.from_iterable([1, 2], arena=arena)
    assert arena.stats().free_count == 0
    real_free_stack_for = alloc_mod._free_stack_for

    def free_stack_dropping_victim(start, stop, capacity):
        victim.drop()
        return real_free_stack_for(start, stop, capacity)

    monkeypatch.setattr(alloc_mod, "_free_stack_for", free_stack_dropping_victim)
    grown = keep.prepend(0)
    stats = arena.stats()
    assert stats.capacity == 8
    assert stats.live_count == 3
    assert stats.live_count + stats.free_count == stats.capacity - 1
    # The slot released mid-growth is handed out first.
    assert grown.head_id == 1
    cl.require_audit_ok(arena, [keep, grown])


def test_cycle_collected_handles_during_growth_leak_no_slots():
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=4))
    base = cl.new(arena)
    was_enabled = gc.isenabled()
    gc.disable()
    for _ in range(3):
        holder = _CycleHolder()
        holder.me = holder
        holder.lst = base.prepend(1)
    del holder
    assert arena.stats().free_count == 0
    threshold = gc.get_threshold()
    gc.set_threshold(1)
    gc.enable()
    try:
        lists = [base.prepend(i) for i in range(50)]
    finally:
        gc.set_threshold(*threshold)
        if not was_enabled:
            gc.disable()
    gc.collect()
    stats = arena.stats()
    assert stats.live_count == 50
    assert stats.live_count + stats.free_count == stats.capacity - 1
    cl.require_audit_ok(arena, lists)
