import operator
from collections import defaultdict
from itertools import islice

import numpy as np
import suite
from gen import Generator, reference_merge, CountingIterator, CountingInsertion
from weavy import (
    Interleaver, interleave, Insertion, InterleaveOptions, EndOfStreamPolicy,
    OutOfRangeOffset, InvalidInsertion
)

# --- setup ---
test = suite.test
assert_that = suite.assert_that
assert_equal = suite.assert_equal
assert_raises = suite.assert_raises

letters = ['a', 'b', 'c']


# --- worked examples ---

@test("inserts at the front and in the middle")
def test_front_and_middle():
    result = list(Interleaver(letters, [(0, 'x'), (2, 'y')]))
    assert_equal(result, ['x', 'a', 'b', 'y', 'c'])


@test("offset equal to the source length appends")
def test_offset_at_end():
    result = list(Interleaver(letters, [(3, 'z')]))
    assert_equal(result, ['a', 'b', 'c', 'z'])


@test("empty source emits offset-0 insertions in input order")
def test_empty_source():
    result = list(Interleaver([], [(0, 'x'), (0, 'y')]))
    assert_equal(result, ['x', 'y'])


@test("same-offset insertions keep their input order")
def test_same_offset_stable():
    result = list(Interleaver(['a', 'b'], [(1, 'x'), (1, 'y')]))
    assert_equal(result, ['a', 'x', 'y', 'b'])


@test("offset past a known length is rejected before any output")
def test_known_length_out_of_range():
    with assert_raises(OutOfRangeOffset) as caught:
        Interleaver(['a', 'b'], [(5, 'x')])
    error = caught['error']
    assert_equal(error.offset, 5, "offset")
    assert_equal(error.source_length, 2, "source_length")
    assert_that(isinstance(error, IndexError), "out of range errors should also be IndexErrors")

    # an explicit length makes an iterator source checkable upfront too
    source = CountingIterator(['a', 'b'])
    with assert_raises(OutOfRangeOffset):
        Interleaver(source, [(5, 'x')], source_length=2)
    assert_equal(source.pulls, 0, "source pulls before the error")


@test("unsorted requests are ordered by offset before merging")
def test_unsorted_requests():
    result = list(Interleaver('abcd', [(3, 'z'), (0, 'x'), (2, 'y')]))
    assert_equal(result, ['x', 'a', 'b', 'y', 'c', 'z', 'd'])


@test("dict requests map offsets to items")
def test_dict_requests():
    result = list(Interleaver('abc', {2: 'y', 0: 'x'}))
    assert_equal(result, ['x', 'a', 'b', 'y', 'c'])


@test("functional shorthand matches the class")
def test_interleave_function():
    assert_equal(list(interleave(letters, [Insertion(1, 'x')])), ['a', 'x', 'b', 'c'])


# --- laws ---

@test("zero insertions pass the source through unchanged")
def test_no_op():
    source = Generator(seed=1).source(50)
    assert_equal(list(Interleaver(iter(source), [])), source)
    assert_equal(list(Interleaver(source, {})), source)


@test("random merges match the quadratic reference")
def test_matches_reference():
    for seed in range(5):
        gen = Generator(seed=seed)
        n = 30 + seed * 7
        source = gen.source(n)
        requests = gen.insertions(n, 20)
        result = list(Interleaver(source, requests))
        assert_equal(result, reference_merge(source, requests), f"seed {seed}")


@test("length, order, placement and stability laws hold for clustered insertions")
def test_laws_clustered():
    gen = Generator(seed=7)
    n = 100
    source = gen.source(n)
    requests = gen.clustered_insertions(n, 60, clusters=4)
    result = list(Interleaver(source, requests))

    assert_equal(len(result), n + len(requests), "length")

    source_set = set(source)
    assert_equal([x for x in result if x in source_set], source, "source order")

    position = {value: i for i, value in enumerate(result)}
    groups = defaultdict(list)
    for offset, item in requests:
        groups[offset].append(item)
    for offset, items in groups.items():
        end = position[source[offset]] if offset < n else len(result)
        assert_equal(result[end - len(items):end], items, f"group at offset {offset}")


@test("source is pulled once per element and output work stays linear")
def test_linear_pulls():
    n, k = 20000, 20000
    gen = Generator(seed=3)
    source = CountingIterator(range(n))
    requests = [Insertion(int(offset), -1 - j) for j, offset in enumerate(gen.offsets(n, k))]

    merged = Interleaver(source, requests)
    produced = sum(1 for _ in merged)

    assert_equal(produced, n + k, "emissions")
    # one pull per element plus the pull that discovers the end
    assert_equal(source.pulls, n + 1, "source pulls")
    assert_equal(merged.emitted, n + k, "emitted counter")


@test("request offsets are read a bounded number of times per emitted element")
def test_linear_offset_reads():
    n, k = 5000, 5000
    gen = Generator(seed=5)
    requests = [CountingInsertion(int(offset), -1 - j) for j, offset in enumerate(gen.offsets(n, k))]

    CountingInsertion.reset()
    merged = Interleaver(CountingIterator(range(n)), requests)
    produced = sum(1 for _ in merged)
    reads = CountingInsertion.reads

    assert_equal(produced, n + k, "emissions")
    # validation and sort touch each offset a constant number of times, the merge
    # at most twice per step; rescanning the requests would take ~n * k reads
    assert_that(reads <= 5 * (n + k), f"{reads} offset reads for n={n}, k={k}")

    # doubling the input roughly doubles the work
    CountingInsertion.reset()
    bigger = [CountingInsertion(int(offset), -1 - j) for j, offset in enumerate(gen.offsets(2 * n, 2 * k))]
    sum(1 for _ in Interleaver(CountingIterator(range(2 * n)), bigger))
    assert_that(CountingInsertion.reads <= 2.5 * reads, f"{CountingInsertion.reads} reads after doubling vs {reads}")


# --- laziness and iterator protocol ---

@test("output is produced lazily, one source pull at a time")
def test_lazy_pulls():
    source = CountingIterator(['a', 'b', 'c'])
    merged = Interleaver(source, [(1, 'x')])
    assert_equal(source.pulls, 0, "pulls after construction")
    assert_equal(next(merged), 'a')
    assert_equal(source.pulls, 1, "pulls after first element")
    assert_equal(next(merged), 'x')
    assert_equal(source.pulls, 1, "an insertion needs no pull")
    assert_equal(next(merged), 'b')
    assert_equal(source.pulls, 2, "pulls after third element")


@test("has_next looks one element ahead without losing it")
def test_has_next():
    merged = Interleaver('ab', [(2, 'z')])
    assert_that(merged.has_next(), "should have a first element")
    assert_that(merged.has_next(), "asking twice must not skip anything")
    assert_equal(merged.emitted, 0, "lookahead is not handed out yet")
    assert_equal(list(merged), ['a', 'b', 'z'])
    assert_that(not merged.has_next(), "nothing left after exhaustion")


@test("an exhausted interleaver stays exhausted")
def test_not_reusable():
    merged = Interleaver('ab', [(0, 'x')])
    assert_equal(list(merged), ['x', 'a', 'b'])
    assert_equal(list(merged), [], "second pass")
    assert_that(merged.exhausted, "should report exhaustion")
    with assert_raises(StopIteration):
        next(merged)


@test("dropping a partially consumed interleaver pulls nothing more")
def test_early_drop():
    source = CountingIterator(range(1000))
    merged = Interleaver(source, [(500, 'x')])
    head = list(islice(merged, 10))
    del merged
    assert_equal(head, list(range(10)))
    assert_equal(source.pulls, 10, "pulls")


@test("length hint tracks remaining output for sized sources")
def test_length_hint():
    merged = Interleaver([1, 2, 3], [(0, 0), (3, 4)])
    assert_equal(operator.length_hint(merged), 5, "before")
    next(merged)
    assert_equal(operator.length_hint(merged), 4, "after one")
    list(merged)
    assert_equal(operator.length_hint(merged), 0, "after all")


@test("state properties report both cursors")
def test_state_properties():
    merged = Interleaver('ab', [(1, 'x')])
    next(merged), next(merged)
    assert_equal(merged.source_index, 1, "source_index")
    assert_equal(merged.insertion_index, 1, "insertion_index")
    assert_equal(merged.emitted, 2, "emitted")
    assert_equal(merged.pending, 0, "pending")
    assert_equal(merged.source_length, 2, "known source_length")

    unsized = Interleaver(iter('ab'), [])
    assert_that(unsized.source_length is None, "iterator length is unknown upfront")
    list(unsized)
    assert_equal(unsized.source_length, 2, "length discovered at exhaustion")


# --- end of stream policy ---

@test("reject is the default end-of-stream policy")
def test_default_policy():
    options = InterleaveOptions()
    assert_that(options.end_of_stream_policy is EndOfStreamPolicy.REJECT, "default policy")
    assert_that(options.trust_sorted_input is False, "sorting is on by default")


@test("unknown-length source rejects offsets past its end at the exhausting pull")
def test_lazy_reject():
    merged = Interleaver(iter('ab'), [(1, 'x'), (2, 'y'), (5, 'z')])
    produced = [next(merged) for _ in range(4)]
    assert_equal(produced, ['a', 'x', 'b', 'y'], "output before the error")

    with assert_raises(OutOfRangeOffset) as caught:
        next(merged)
    assert_equal(caught['error'].offset, 5, "offset")
    assert_equal(caught['error'].source_length, 2, "discovered length")

    with assert_raises(StopIteration):
        next(merged)


@test("clamp policy appends unreached offsets at the end in offset order")
def test_lazy_clamp():
    requests = [(5, 'z'), (1, 'x'), (9, 'w'), (2, 'y')]
    result = list(Interleaver(iter('ab'), requests, end_of_stream_policy='clamp'))
    assert_equal(result, ['a', 'x', 'b', 'y', 'z', 'w'])


@test("clamp policy with a known length rewrites offsets to the end")
def test_known_clamp():
    result = list(Interleaver('ab', [(7, 'z'), (2, 'y')], end_of_stream_policy=EndOfStreamPolicy.CLAMP))
    assert_equal(result, ['a', 'b', 'y', 'z'])


@test("a source shorter than its declared length falls back to the policy")
def test_short_declared_source():
    with assert_raises(OutOfRangeOffset):
        list(Interleaver(iter('ab'), [(3, 'x')], source_length=3))
    clamped = list(Interleaver(iter('ab'), [(3, 'x')], source_length=3, end_of_stream_policy='clamp'))
    assert_equal(clamped, ['a', 'b', 'x'])


# --- trusted order ---

@test("trusted sorted input merges like sorted input")
def test_trusted_sorted():
    gen = Generator(seed=11)
    source = gen.source(40)
    requests = gen.insertions(40, 25, sort=True)
    result = list(Interleaver(source, requests, trust_sorted_input=True))
    assert_equal(result, reference_merge(source, requests))


@test("a broken sort promise still emits every element exactly once")
def test_trusted_unsorted():
    result = list(Interleaver(letters, [(2, 'y'), (0, 'x')], trust_sorted_input=True))
    assert_equal(len(result), 5, "length")
    assert_equal(sorted(result), ['a', 'b', 'c', 'x', 'y'], "multiset")
    assert_equal([x for x in result if x in letters], letters, "source order")


# --- composition ---

@test("interleavers chain as sources for a second pass")
def test_chaining():
    first = Interleaver('abc', [(1, 'x')])
    second = Interleaver(first, [(0, '<'), (4, '>')])
    assert_equal(list(second), ['<', 'a', 'x', 'b', 'c', '>'])


# --- columns ---

@test("numpy offset columns are sorted stably")
def test_columns():
    offsets = np.array([2, 0, 2, 0])
    result = list(Interleaver.from_columns('ab', offsets, ['p', 'q', 'r', 's']))
    assert_equal(result, ['q', 's', 'a', 'b', 'p', 'r'])


@test("numpy offset columns are validated")
def test_columns_invalid():
    with assert_raises(InvalidInsertion):
        Interleaver.from_columns('ab', np.array([[0]]), ['x'])
    with assert_raises(InvalidInsertion) as caught:
        Interleaver.from_columns('ab', np.array([0, -1]), ['x', 'y'])
    assert_equal(caught['error'].position, 1, "position of the bad offset")
    with assert_raises(InvalidInsertion):
        Interleaver.from_columns('ab', np.array([0, 1]), ['x'])
    with assert_raises(InvalidInsertion):
        Interleaver.from_columns('ab', np.array([0.5]), ['x'])
    with assert_raises(OutOfRangeOffset):
        Interleaver.from_columns('ab', np.array([0, 3]), ['x', 'y'])


if __name__ == "__main__":
    suite.main("weavy interleaver test suite")
