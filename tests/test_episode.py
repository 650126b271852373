"""Tests for episode sampling."""

import numpy as np
import pytest

from helpers.dataset import Sample
from helpers.episode import Episode, class_index, sample_episode


def test_class_index_first_seen_order(make_corpus):
    corpus = make_corpus([("b",), ("a", "b"), ("c",)])
    classes, by_class = class_index(corpus)
    assert classes == ["b", "a", "c"]
    assert by_class["b"] == [corpus[0], corpus[1]]
    assert by_class["a"] == [corpus[1]]


def test_two_of_three_classes_in_four_steps(abc_corpus):
    for seed in range(50):
        ep = sample_episode(abc_corpus, 2, 4, np.random.default_rng(seed))
        assert len(ep) <= 4
        assert sorted(set(ep.labels)) == [0, 1]
        assert len(ep.classes) == 2
        assert set(ep.classes) <= {"a", "b", "c"}


def test_labels_point_at_sample_classes(abc_corpus, rng):
    for _ in range(20):
        ep = sample_episode(abc_corpus, 2, 10, rng)
        for sample, label in ep:
            assert ep.classes[label] in sample.classes


def test_dense_labels_without_truncation(abc_corpus, rng):
    ep = sample_episode(abc_corpus, 3, 100, rng)
    assert sorted(set(ep.labels)) == [0, 1, 2]
    assert len(ep) == len(abc_corpus)
    assert ep.num_classes == 3


def test_class_count_clamped(abc_corpus, rng):
    ep = sample_episode(abc_corpus, 10, 100, rng)
    assert len(ep.classes) == 3
    assert max(ep.labels) == 2


def test_step_budget_truncates(abc_corpus, rng):
    ep = sample_episode(abc_corpus, 3, 2, rng)
    assert len(ep) == 2
    assert len(ep.samples) == len(ep.labels)


def test_empty_corpus(rng):
    ep = sample_episode([], 5, 10, rng)
    assert isinstance(ep, Episode)
    assert len(ep) == 0
    assert ep.classes == []


def test_unlabeled_corpus(rng):
    ep = sample_episode([Sample(path="x.wav")], 5, 10, rng)
    assert len(ep) == 0


def test_multi_label_sample_repeats_per_class(rng):
    shared = Sample(path="both.wav", classes=("a", "b"))
    ep = sample_episode([shared], 2, 10, rng)
    assert ep.samples == [shared, shared]
    assert sorted(ep.labels) == [0, 1]


def test_seeded_episodes_repeat(abc_corpus):
    a = sample_episode(abc_corpus, 2, 4, np.random.default_rng(3))
    b = sample_episode(abc_corpus, 2, 4, np.random.default_rng(3))
    assert a == b


def test_shuffle_mixes_classes(abc_corpus):
    orders = set()
    for seed in range(30):
        ep = sample_episode(abc_corpus, 3, 6, np.random.default_rng(seed))
        orders.add(tuple(ep.labels))
    assert len(orders) > 1


def test_negative_arguments(abc_corpus, rng):
    with pytest.raises(ValueError):
        sample_episode(abc_corpus, -1, 4, rng)
    with pytest.raises(ValueError):
        sample_episode(abc_corpus, 2, -4, rng)
