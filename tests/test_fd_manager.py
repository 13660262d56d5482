import math
import os

import pytest

from nutsdb.fd_manager import DEFAULT_MAX_FILE_NUMS, DoubleLinkedList, FdInfo, FdManager


@pytest.fixture
def base_path(tmp_path):
    return os.path.normpath(str(tmp_path / "data-"))


@pytest.fixture
def fdm():
    manager = FdManager(20, 0.5)
    yield manager
    manager.close()


def _assert_chain(fdm, base_path, seq):
    expected = [f"{base_path}{i}" for i in seq]
    assert fdm.fd_list.paths_from_head() == expected
    assert fdm.fd_list.paths_from_tail() == list(reversed(expected))
    assert all(node.fd is not None for node in fdm.fd_list)
    assert fdm.size == len(seq)


def _fill(fdm, base_path):
    for i in range(1, 11):
        fd = fdm.get_fd(f"{base_path}{i}")
        assert fd is not None


def test_init():
    fdm = FdManager(20, 0.5)
    assert fdm.max_fd_nums == 20
    assert fdm.clean_threshold_nums == math.floor(0.5 * 20)


def test_init_defaults():
    fdm = FdManager()
    assert fdm.max_fd_nums == DEFAULT_MAX_FILE_NUMS
    assert fdm.clean_threshold_nums == 128


def test_threshold_computed_from_default_max_when_not_given():
    fdm = FdManager(20)
    assert fdm.max_fd_nums == 20
    assert fdm.clean_threshold_nums == 128


def test_full_lifecycle(fdm, base_path):
    _fill(fdm, base_path)
    _assert_chain(fdm, base_path, [10, 9, 8, 7, 6, 5, 4, 3, 2, 1])

    fd = fdm.get_fd(fdm.fd_list.head.next.path)
    assert fd is fdm.fd_list.head.next.fd
    _assert_chain(fdm, base_path, [10, 9, 8, 7, 6, 5, 4, 3, 2, 1])

    fd = fdm.get_fd(fdm.fd_list.tail.prev.path)
    assert fd is fdm.fd_list.head.next.fd
    _assert_chain(fdm, base_path, [1, 10, 9, 8, 7, 6, 5, 4, 3, 2])

    fd = fdm.get_fd(f"{base_path}5")
    assert fd is fdm.fd_list.head.next.fd
    _assert_chain(fdm, base_path, [5, 1, 10, 9, 8, 7, 6, 4, 3, 2])

    path5 = f"{base_path}5"
    fdm.get_fd(path5)
    using = fdm.fd_list.head.next.using
    fdm.get_fd(path5)
    assert fdm.fd_list.head.next.using == using + 1
    fdm.reduce_using(path5)
    assert fdm.fd_list.head.next.using == using

    for num in [2, 3, 4, 6, 7, 8]:
        fdm.reduce_using(f"{base_path}{num}")
    fd = fdm.get_fd(f"{base_path}11")
    assert fd is not None
    _assert_chain(fdm, base_path, [11, 5, 1, 10, 9])

    fdm.close()
    assert len(fdm.cache) == 0
    assert fdm.size == 0
    assert fdm.fd_list.paths_from_head() == []


def test_close_closes_handles(fdm, base_path):
    fd = fdm.get_fd(f"{base_path}1")
    fdm.close()
    assert fd.closed is True


def test_get_fd_creates_file_and_writes(fdm, base_path):
    path = f"{base_path}x"
    fd = fdm.get_fd(path)
    fd.write(b"hello")
    fd.flush()
    with open(path, "rb") as handle:
        assert handle.read() == b"hello"


def test_reduce_using_unknown_path(fdm, base_path):
    with pytest.raises(KeyError):
        fdm.reduce_using(f"{base_path}missing")


def test_over_max_not_cached(base_path):
    with FdManager(2) as fdm:
        fdm.get_fd(f"{base_path}1")
        fdm.get_fd(f"{base_path}2")
        extra = fdm.get_fd(f"{base_path}3")
        try:
            assert fdm.size == 2
            assert f"{base_path}3" not in fdm.cache
        finally:
            extra.close()


def test_close_by_path(fdm, base_path):
    _fill(fdm, base_path)
    fd = fdm.cache[f"{base_path}5"].fd
    fdm.close_by_path(f"{base_path}5")
    assert fd.closed is True
    assert f"{base_path}5" not in fdm.cache
    _assert_chain(fdm, base_path, [10, 9, 8, 7, 6, 4, 3, 2, 1])
    fdm.close_by_path(f"{base_path}missing")
    assert fdm.size == 9


def test_clean_useless_fd_only_unused(fdm, base_path):
    _fill(fdm, base_path)
    fdm.reduce_using(f"{base_path}1")
    fdm.reduce_using(f"{base_path}10")
    fdm.clean_useless_fd()
    _assert_chain(fdm, base_path, [9, 8, 7, 6, 5, 4, 3, 2])


def _paths(list_):
    return list_.paths_from_head(), list_.paths_from_tail()


def test_double_linked_list():
    lst = DoubleLinkedList()
    nodes = {}
    for i in range(1, 11):
        node = FdInfo(path=str(i))
        lst.add_node(node)
        nodes[i] = node
    assert _paths(lst) == (
        [str(i) for i in range(10, 0, -1)],
        [str(i) for i in range(1, 11)],
    )

    lst.remove_node(nodes[10])
    assert _paths(lst) == (
        ["9", "8", "7", "6", "5", "4", "3", "2", "1"],
        ["1", "2", "3", "4", "5", "6", "7", "8", "9"],
    )
    lst.remove_node(nodes[1])
    assert _paths(lst) == (
        ["9", "8", "7", "6", "5", "4", "3", "2"],
        ["2", "3", "4", "5", "6", "7", "8", "9"],
    )
    lst.remove_node(nodes[5])
    assert _paths(lst) == (
        ["9", "8", "7", "6", "4", "3", "2"],
        ["2", "3", "4", "6", "7", "8", "9"],
    )

    lst.move_node_to_front(nodes[9])
    assert _paths(lst) == (
        ["9", "8", "7", "6", "4", "3", "2"],
        ["2", "3", "4", "6", "7", "8", "9"],
    )
    lst.move_node_to_front(nodes[2])
    assert _paths(lst) == (
        ["2", "9", "8", "7", "6", "4", "3"],
        ["3", "4", "6", "7", "8", "9", "2"],
    )
    lst.move_node_to_front(nodes[6])
    assert _paths(lst) == (
        ["6", "2", "9", "8", "7", "4", "3"],
        ["3", "4", "7", "8", "9", "2", "6"],
    )
    assert len(lst) == 7