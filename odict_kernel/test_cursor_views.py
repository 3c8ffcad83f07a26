"""
Ordered Map Kernel -- Cursor and View Tests

Covers:
  - Cursor state machine (CREATED -> ADVANCING -> ENDED) and defaults
  - Strict invalidation on ANY structural mutation, appends included
  - set_value on an existing key keeps cursors valid
  - Read-only key / value views and their membership semantics

Run:  py -3 -m odict_kernel.test_cursor_views
"""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from odict_kernel.cursor import CursorState, MapCursor
from odict_kernel.errors import (
    CollectionModifiedError,
    IndexOutOfRangeError,
    InvalidOperationError,
    ReadOnlyViewError,
)
from odict_kernel.ordered_map import OrderedMap


_pass = 0
_fail = 0


def _test(name, fn):
    global _pass, _fail
    try:
        fn()
        print(f"  [PASS] {name}")
        _pass += 1
    except Exception as exc:
        print(f"  [FAIL] {name}: {exc}")
        _fail += 1


def _sample() -> OrderedMap:
    return OrderedMap([("a", 1), ("b", 2), ("c", 3)])


def _expect(exc_type, fn, *args):
    try:
        fn(*args)
    except exc_type as exc:
        return exc
    raise AssertionError(f"Expected {exc_type.__name__}")


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------

def test_cursor_state_machine():
    omap = _sample()
    cur = omap.cursor()

    assert cur.state is CursorState.CREATED
    assert cur.position == -1
    assert cur.current is None
    assert cur.key is None and cur.value is None

    seen = []
    while cur.advance():
        assert cur.state is CursorState.ADVANCING
        seen.append(cur.current)
    assert seen == [("a", 1), ("b", 2), ("c", 3)]

    assert cur.state is CursorState.ENDED
    assert cur.position == 3
    assert cur.current is None
    assert cur.advance() is False
    assert cur.position == 3


def test_cursor_key_value_accessors():
    omap = _sample()
    cur = omap.cursor()
    cur.advance()
    cur.advance()
    assert cur.key == "b"
    assert cur.value == 2


def test_cursor_empty_map_ends_immediately():
    cur = OrderedMap().cursor()
    assert cur.advance() is False
    assert cur.state is CursorState.ENDED
    assert cur.position == 0


def test_cursor_reset():
    omap = _sample()
    cur = omap.cursor()
    cur.advance()
    cur.advance()
    cur.reset()
    assert cur.state is CursorState.CREATED
    assert cur.current is None
    assert cur.advance() is True
    assert cur.current == ("a", 1)


def test_cursor_invalidated_by_each_structural_mutation():
    mutations = [
        ("insert_at", lambda m: m.insert_at(0, "z", 0)),
        ("append via set_value", lambda m: m.set_value("z", 0)),
        ("add", lambda m: m.add("z", 0)),
        ("remove_at", lambda m: m.remove_at(2)),
        ("remove_key", lambda m: m.remove_key("a")),
        ("clear", lambda m: m.clear()),
        ("move", lambda m: m.move(0, 2)),
        ("load_persisted", lambda m: m.load_persisted(["a"], [1])),
    ]
    for label, mutate in mutations:
        omap = _sample()
        cur = omap.cursor()
        cur.advance()
        mutate(omap)

        exc = _expect(CollectionModifiedError, cur.advance)
        assert isinstance(exc, InvalidOperationError), label
        assert exc.expected == cur.version, label
        _expect(CollectionModifiedError, cur.reset)


def test_cursor_invalidated_before_first_advance():
    omap = _sample()
    cur = omap.cursor()
    omap.add("d", 4)
    _expect(CollectionModifiedError, cur.advance)


def test_cursor_survives_value_replacement():
    omap = _sample()
    cur = omap.cursor()
    cur.advance()
    omap.set_value("b", 200)
    omap["a"] = 100

    assert cur.advance() is True
    assert cur.current == ("b", 200)
    cur.reset()
    assert cur.advance() is True
    assert cur.current == ("a", 100)


def test_cursor_failed_mutation_keeps_cursor_valid():
    omap = _sample()
    cur = omap.cursor()
    try:
        omap.insert_at(0, "a", 0)
    except ValueError:
        pass
    assert omap.remove_key("missing") is False
    assert cur.advance() is True


def test_for_loop_mutation_raises():
    omap = _sample()
    try:
        for key, _ in omap:
            if key == "a":
                omap.add("d", 4)
        raise AssertionError("Expected CollectionModifiedError")
    except CollectionModifiedError:
        pass


def test_items_and_iteration():
    omap = _sample()
    assert list(omap) == [("a", 1), ("b", 2), ("c", 3)]
    assert list(omap.items()) == list(omap)
    assert isinstance(iter(omap), MapCursor)
    assert dict(omap) == {"a": 1, "b": 2, "c": 3}


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

def test_key_view_read_surface():
    omap = _sample()
    keys = omap.keys()

    assert len(keys) == 3
    assert keys[0] == "a" and keys[2] == "c"
    assert list(keys) == ["a", "b", "c"]
    assert "b" in keys
    assert "z" not in keys
    assert None not in keys
    assert keys.index_of("c") == 2
    assert keys.index_of("z") == -1
    _expect(IndexOutOfRangeError, keys.__getitem__, 3)
    assert omap.keys() is keys


def test_view_negative_index_and_slice():
    omap = _sample()
    keys = omap.keys()
    values = omap.values()

    assert keys[-1] == "c"
    assert values[-3] == 1
    assert keys[1:] == ["b", "c"]
    assert values[::-1] == [3, 2, 1]
    assert keys[5:] == []
    exc = _expect(IndexOutOfRangeError, keys.__getitem__, -4)
    assert exc.index == -4
    assert isinstance(exc, IndexError)
    assert keys.index("b") == 1


def test_value_view_read_surface():
    omap = OrderedMap([("a", 1), ("b", 1), ("c", [3])])
    values = omap.values()

    assert len(values) == 3
    assert list(values) == [1, 1, [3]]
    assert 1 in values
    assert [3] in values
    assert 9 not in values
    assert values.index_of(1) == 0
    assert values.index_of([3]) == 2
    assert values.index_of(9) == -1


def test_views_track_owner_live():
    omap = _sample()
    keys = omap.keys()
    values = omap.values()
    omap.insert_at(0, "z", 0)
    omap.set_value("c", 30)

    assert keys.to_list() == ["z", "a", "b", "c"]
    assert values.to_list() == [0, 1, 2, 30]
    assert len(keys) == len(values) == len(omap)


def test_view_mutation_rejected():
    omap = _sample()
    before = omap.to_persisted()
    version = omap.version
    for view in (omap.keys(), omap.values()):
        _expect(ReadOnlyViewError, view.append, "x")
        _expect(ReadOnlyViewError, view.add, "x")
        _expect(ReadOnlyViewError, view.extend, ["x"])
        _expect(ReadOnlyViewError, view.insert, 0, "x")
        _expect(ReadOnlyViewError, view.remove, "a")
        _expect(ReadOnlyViewError, view.pop)
        _expect(ReadOnlyViewError, view.clear)
        _expect(ReadOnlyViewError, view.__setitem__, 0, "x")
        exc = _expect(InvalidOperationError, view.__delitem__, 0)
        assert exc.operation == "__delitem__"
    assert omap.to_persisted() == before
    assert omap.version == version


def test_view_iteration_is_versioned():
    omap = _sample()
    it = iter(omap.values())
    assert next(it) == 1
    omap.remove_at(0)
    _expect(CollectionModifiedError, next, it)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def main():
    tests = [
        ("Cursor: state machine", test_cursor_state_machine),
        ("Cursor: key/value accessors", test_cursor_key_value_accessors),
        ("Cursor: empty map", test_cursor_empty_map_ends_immediately),
        ("Cursor: reset", test_cursor_reset),
        ("Cursor: invalidated by structural mutation", test_cursor_invalidated_by_each_structural_mutation),
        ("Cursor: invalidated before first advance", test_cursor_invalidated_before_first_advance),
        ("Cursor: survives value replacement", test_cursor_survives_value_replacement),
        ("Cursor: failed mutation keeps it valid", test_cursor_failed_mutation_keeps_cursor_valid),
        ("Cursor: for-loop mutation", test_for_loop_mutation_raises),
        ("Items and iteration", test_items_and_iteration),
        ("KeyView: read surface", test_key_view_read_surface),
        ("Views: negative index and slice", test_view_negative_index_and_slice),
        ("ValueView: read surface", test_value_view_read_surface),
        ("Views: live tracking", test_views_track_owner_live),
        ("Views: mutation rejected", test_view_mutation_rejected),
        ("Views: versioned iteration", test_view_iteration_is_versioned),
    ]

    print(f"\nRunning {len(tests)} tests...\n")
    for name, fn in tests:
        _test(name, fn)

    print(f"\n{'='*60}")
    print(f"  {_pass} passed, {_fail} failed out of {_pass + _fail}")
    print(f"{'='*60}")

    if _fail > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
