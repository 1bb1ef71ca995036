from exitnode.grouping import group_by_country


def test_group_by_country_partitions(make_candidate):
    candidates = [
        make_candidate("US1", "US", 10),
        make_candidate("CH1", "CH", 20),
        make_candidate("US2", "US", 30),
        make_candidate("SE1", "SE", 40),
    ]
    groups = group_by_country(candidates)

    assert [g.country_code for g in groups] == ["US", "CH", "SE"]
    assert [c.id for c in groups[0].candidates] == ["US1", "US2"]
    assert [c.id for c in groups[1].candidates] == ["CH1"]


def test_group_by_country_preserves_relative_order(make_candidate):
    candidates = [make_candidate(f"US{i}", "US", i) for i in range(5)]
    groups = group_by_country(candidates)
    assert [c.id for c in groups[0].candidates] == [f"US{i}" for i in range(5)]
    assert groups[0].representative.id == "US0"


def test_group_by_country_is_deterministic(make_candidate):
    candidates = [
        make_candidate("A", "DE"),
        make_candidate("B", "FR"),
        make_candidate("C", "DE"),
    ]
    first = group_by_country(candidates)
    second = group_by_country(candidates)
    assert [(g.country_code, [c.id for c in g.candidates]) for g in first] == [
        (g.country_code, [c.id for c in g.candidates]) for g in second
    ]


def test_group_by_country_does_not_touch_input(make_candidate):
    candidates = [make_candidate("A", "DE"), make_candidate("B", "FR")]
    snapshot = list(candidates)
    group_by_country(candidates)
    assert candidates == snapshot


def test_group_starts_unmeasured(make_candidate):
    groups = group_by_country([make_candidate("A", "DE")])
    assert groups[0].measured is False
    assert groups[0].country == "DE"


def test_group_by_country_empty():
    assert group_by_country([]) == []
