import pytest

from sysprojects.memory import MIN_RUNNING_FRAMES, ContiguousMemory, PageFrames
from sysprojects.process import FRAME_COUNT, TOTAL_MEMORY, Process


def proc(name, memory):
    return Process(name, 0, 10, memory)


def test_empty_memory_fits_at_start():
    assert ContiguousMemory().find_start(100) == 0


def test_allocation_moves_next_fit():
    memory = ContiguousMemory()
    first = proc("A", 300)
    memory.allocate(first, memory.find_start(first.memory))
    assert first.address == 0
    assert memory.find_start(50) == 300
    assert memory.used == 300


def test_request_over_total_is_refused():
    memory = ContiguousMemory()
    memory.allocate(proc("A", 2000), 0)
    assert memory.find_start(TOTAL_MEMORY - 2000 + 1) is None
    assert memory.find_start(TOTAL_MEMORY - 2000) == 2000


def test_fragmented_memory_has_no_room():
    memory = ContiguousMemory()
    a, b, c = proc("A", 1000), proc("B", 500), proc("C", 500)
    memory.allocate(a, 0)
    memory.allocate(b, 1000)
    memory.allocate(c, 1500)
    memory.deallocate(b)
    assert memory.used == 1500
    assert memory.find_start(548) is None
    assert memory.find_start(500) == 1000


def test_deallocate_frees_block():
    memory = ContiguousMemory()
    a = proc("A", 2048)
    memory.allocate(a, 0)
    memory.deallocate(a)
    assert memory.used == 0
    assert a.address is None
    assert memory.find_start(2048) == 0


def test_deallocate_unallocated_raises():
    with pytest.raises(ValueError):
        ContiguousMemory().deallocate(proc("A", 10))


def test_allocate_outside_raises():
    with pytest.raises(ValueError):
        ContiguousMemory().allocate(proc("A", 10), TOTAL_MEMORY - 5)


def test_contiguous_usage_half():
    memory = ContiguousMemory()
    memory.allocate(proc("A", TOTAL_MEMORY // 2), 0)
    assert memory.usage_percent() == 50.0


def test_page_allocation_takes_lowest_frames():
    frames = PageFrames()
    a = proc("A", 12)
    granted = frames.allocate(a, a.frames_needed())
    assert granted == [0, 1, 2]
    assert a.frames == [0, 1, 2]
    assert frames.free_count() == FRAME_COUNT - 3


def test_page_release_round_trip():
    frames = PageFrames()
    a, b = proc("A", 8), proc("B", 8)
    frames.allocate(a, 2)
    frames.allocate(b, 2)
    assert frames.release(a) == [0, 1]
    assert a.frames == []
    assert frames.free_count() == FRAME_COUNT - 2
    c = proc("C", 8)
    assert frames.allocate(c, 2) == [0, 1]


def test_allocate_limited_by_free_frames():
    frames = PageFrames(6)
    a = proc("A", 100)
    frames.allocate(a, a.frames_needed())
    assert len(a.frames) == 6
    assert frames.free_count() == 0


def test_page_usage_rounds_up():
    frames = PageFrames()
    frames.allocate(proc("A", 4), 1)
    assert frames.usage_percent() == 1


def test_evict_for_paged_whole_processes():
    frames = PageFrames(8)
    a, empty, c = proc("A", 24), proc("E", 4), proc("C", 8)
    frames.allocate(a, 6)
    frames.allocate(c, 2)
    victims = frames.evict_for_paged([a, empty, c], 7)
    assert victims == [[0, 1, 2, 3, 4, 5], [6, 7]]
    assert frames.free_count() == 8
    assert a.frames == [] and c.frames == []


def test_evict_for_paged_stops_when_enough():
    frames = PageFrames(8)
    a, c = proc("A", 24), proc("C", 8)
    frames.allocate(a, 6)
    frames.allocate(c, 2)
    victims = frames.evict_for_paged([a, c], 3)
    assert victims == [[0, 1, 2, 3, 4, 5]]
    assert c.frames == [6, 7]


def test_evict_for_virtual_takes_only_what_is_needed():
    frames = PageFrames(8)
    a = proc("A", 32)
    frames.allocate(a, 8)
    target = proc("T", 16)
    evicted = frames.evict_for_virtual([a], target)
    assert evicted == [0, 1, 2, 3]
    assert a.frames == [4, 5, 6, 7]
    assert frames.free_count() == MIN_RUNNING_FRAMES


def test_evict_for_virtual_counts_held_frames():
    frames = PageFrames(8)
    target = proc("T", 16)
    frames.allocate(target, 2)
    a, b = proc("A", 4), proc("B", 20)
    frames.allocate(a, 1)
    frames.allocate(b, 5)
    evicted = frames.evict_for_virtual([a, b], target)
    assert evicted == [2, 3]
    assert a.frames == []
    assert b.frames == [4, 5, 6, 7]
    assert len(target.frames) + frames.free_count() == MIN_RUNNING_FRAMES


def test_evict_for_virtual_nothing_when_satisfied():
    frames = PageFrames(8)
    a = proc("A", 16)
    frames.allocate(a, 4)
    assert frames.evict_for_virtual([a], proc("T", 16)) == []
    assert a.frames == [0, 1, 2, 3]