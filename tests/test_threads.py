import threading

import pytest

import genz
from tests import harness

pytestmark = pytest.mark.extent


def _in_thread(fn):
    box = {}

    def _run():
        try:
            box["value"] = fn()
        except Exception as exc:
            box["error"] = exc

    t = threading.Thread(target=_run)
    t.start()
    t.join()
    return box


def test_extent_is_rejected_off_its_owning_thread():
    def _body(extent):
        return _in_thread(lambda: genz.require_live(extent))

    box = genz.open_extent(_body)
    assert isinstance(box.get("error"), genz.ExtentThreadError)
    assert "owning thread" in str(box["error"])


def test_thread_guard_can_be_disabled():
    cfg = genz.GenzConfig(thread_guard=False)

    def _body(extent):
        return _in_thread(lambda: genz.require_live(extent, cfg=cfg))

    assert genz.open_extent(_body, cfg=cfg) == {"value": None}


def test_root_extent_is_usable_from_any_thread():
    assert _in_thread(lambda: genz.require_live(genz.ROOT_EXTENT)) == {"value": None}


def test_threads_open_their_own_extents():
    idents = []
    lock = threading.Lock()

    def _worker():
        for _ in range(50):
            ident = genz.with_single_type(harness.U8, lambda m: m.extent._ident)
            with lock:
                idents.append(ident)

    threads = [threading.Thread(target=_worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(idents) == 200
    assert len(set(idents)) == 200


def test_marker_extent_honours_mint_config_off_thread():
    cfg = genz.GenzConfig(thread_guard=False)

    def _body(marker):
        return _in_thread(lambda: marker.extent.live)

    assert genz.with_single_type(harness.U8, _body, cfg=cfg) == {"value": True}


def test_marker_extent_is_guarded_off_thread_by_default():
    def _body(marker):
        return _in_thread(lambda: marker.extent)

    box = genz.with_single_type(harness.U8, _body)
    assert isinstance(box.get("error"), genz.ExtentThreadError)
