"""Tests for CacheSimulator: record handling, counters and the reference scenarios."""

import random

import pytest
from csim.core.cache import Cache, Outcome
from csim.core.simulator import CacheSimulator
from csim.data.stats_export import Statistics
from csim.data.trace import AccessKind, AccessRecord

L, S, M, I = AccessKind.LOAD, AccessKind.STORE, AccessKind.MODIFY, AccessKind.INSTRUCTION


def _run(s, E, b, records):
    sim = CacheSimulator(Cache(set_bits=s, associativity=E, block_bits=b))
    sim.load_sequence(records)
    stats = sim.run_all()
    return stats.hits, stats.misses, stats.evictions


def _loads(*addresses):
    return [AccessRecord(L, a, 1) for a in addresses]


@pytest.mark.parametrize('s,E,b,records,expected', [
    # single direct-mapped line, same address three times
    (0, 1, 0, _loads(0, 0, 0), (2, 1, 0)),
    # single line, different tags: second access evicts the first
    (0, 1, 0, _loads(0, 16), (0, 2, 1)),
    # two sets, no contention
    (1, 1, 0, _loads(0, 1), (0, 2, 0)),
    # modify on an empty 2-way cache: load misses, store hits
    (0, 2, 0, [AccessRecord(M, 4, 1)], (1, 1, 0)),
    # 2-way LRU: 0 is reused so 16 is evicted by 32
    (0, 2, 0, _loads(0, 16, 0, 32), (1, 3, 1)),
])
def test_reference_scenarios(s, E, b, records, expected):
    assert _run(s, E, b, records) == expected


def test_lru_scenario_evicts_sixteen():
    cache = Cache(set_bits=0, associativity=2, block_bits=0)
    sim = CacheSimulator(cache)
    sim.load_sequence(_loads(0, 16, 0, 32))
    sim.run_all()
    assert cache.sets[0].tags() == [32, 0]


def test_yi_trace_known_result():
    # the classic yi.trace with s=4 E=1 b=4
    records = [
        AccessRecord(L, 0x10, 1), AccessRecord(M, 0x20, 1), AccessRecord(L, 0x22, 1),
        AccessRecord(S, 0x18, 1), AccessRecord(L, 0x110, 1), AccessRecord(L, 0x210, 1),
        AccessRecord(M, 0x12, 1),
    ]
    assert _run(4, 1, 4, records) == (4, 5, 3)


def test_instruction_records_are_ignored():
    sim = CacheSimulator(Cache(set_bits=0, associativity=1, block_bits=0))
    assert sim.process(AccessRecord(I, 0x400, 4)) == []
    assert sim.stats.accesses == 0
    assert sim.cache.occupancy() == 0
    assert sim.stats.records == {'I': 1}


def test_modify_is_load_then_store_to_same_line():
    sim = CacheSimulator(Cache(set_bits=0, associativity=1, block_bits=0))
    assert sim.process(AccessRecord(M, 8, 4)) == [Outcome.MISS, Outcome.HIT]
    assert sim.process(AccessRecord(M, 8, 4)) == [Outcome.HIT, Outcome.HIT]
    assert sim.process(AccessRecord(M, 9, 4)) == [Outcome.MISS_EVICTION, Outcome.HIT]


def test_counter_conservation_and_determinism():
    # Input: 1000 random records of all four kinds on a small 2-set 2-way cache.
    # Expected: hits + misses == 1*L + 1*S + 2*M, evictions <= misses, and the
    # same sequence on a fresh cache gives identical counters.
    rng = random.Random(42)
    kinds = [L, S, M, I]
    records = [AccessRecord(rng.choice(kinds), rng.randrange(0, 256), 4) for _ in range(1000)]
    expected_accesses = sum({L: 1, S: 1, M: 2, I: 0}[r.kind] for r in records)

    first = _run(1, 2, 2, records)
    hits, misses, evictions = first
    assert hits + misses == expected_accesses
    assert evictions <= misses
    assert _run(1, 2, 2, records) == first


def test_step_reports_record_and_running_stats():
    sim = CacheSimulator(Cache(set_bits=0, associativity=2, block_bits=0))
    sim.load_sequence([AccessRecord(L, 0, 1), AccessRecord(M, 0, 1)])
    info = sim.step()
    assert info['record'] == AccessRecord(L, 0, 1)
    assert info['outcomes'] == [Outcome.MISS]
    assert info['stats']['misses'] == 1
    info = sim.step()
    assert info['outcomes'] == [Outcome.HIT, Outcome.HIT]
    assert info['stats']['hits'] == 2
    assert sim.step() is None


def test_run_all_invokes_callback_per_record():
    seen = []
    sim = CacheSimulator(Cache(set_bits=1, associativity=1, block_bits=1))
    sim.load_sequence(_loads(0, 2, 4))
    stats = sim.run_all(callback=seen.append)
    assert len(seen) == 3
    assert stats is sim.stats


def test_sequence_is_consumed_once():
    sim = CacheSimulator(Cache(set_bits=0, associativity=1, block_bits=0))
    sim.load_sequence(r for r in _loads(0, 0))
    sim.run_all()
    sim.run_all()
    assert sim.stats.accesses == 2


def test_reset_clears_stats_and_cache():
    stats = Statistics()
    sim = CacheSimulator(Cache(set_bits=0, associativity=1, block_bits=0), stats=stats)
    sim.load_sequence(_loads(0, 0))
    sim.run_all()
    assert stats.hits == 1
    sim.reset()
    assert (stats.hits, stats.misses, stats.evictions) == (0, 0, 0)
    assert sim.cache.occupancy() == 0
    assert sim.step() is None
