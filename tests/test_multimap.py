from trafficsim.multimap import MultiTreeMap


def _filled() -> MultiTreeMap[int, str]:
    m: MultiTreeMap[int, str] = MultiTreeMap()
    for key, value in [(3, "c1"), (0, "a1"), (3, "c2"), (1, "b1"), (0, "a2")]:
        m.put_value(key, value)
    return m


def test_values_ordered_by_key_then_insertion() -> None:
    assert _filled().values_list() == ["a1", "a2", "b1", "c1", "c2"]


def test_keys_ascending() -> None:
    assert list(_filled()) == [0, 1, 3]


def test_get() -> None:
    m = _filled()
    assert m.get(3) == ("c1", "c2")
    assert m.get(2) == ()


def test_values_from() -> None:
    m = _filled()
    assert m.values_from(1) == ["b1", "c1", "c2"]
    assert m.values_from(2) == ["c1", "c2"]
    assert m.values_from(4) == []


def test_items() -> None:
    assert list(_filled().items()) == [(0, ("a1", "a2")), (1, ("b1",)), (3, ("c1", "c2"))]


def test_len_contains_clear() -> None:
    m = _filled()
    assert len(m) == 5
    assert 1 in m and 2 not in m
    m.clear()
    assert len(m) == 0
    assert m.values_list() == []
