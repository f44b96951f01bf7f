"""
Tests for notes2quote.forms.photos.PhotoLoader.

Completion order is forced with threading.Event so both in-order and
out-of-order arrivals are exercised deterministically.
"""
import threading

import pytest

from notes2quote.forms.photos import PhotoLoader, decode_image

TIMEOUT = 5


def _gated(data, gate):
    """Source that blocks until `gate` is set."""
    def source():
        assert gate.wait(TIMEOUT)
        return data
    return source


class _Arrivals:
    """on_change recorder that lets a test wait for the Nth arrival."""

    def __init__(self):
        self.snapshots = []
        self._cond = threading.Condition()

    def __call__(self, images):
        with self._cond:
            self.snapshots.append(images)
            self._cond.notify_all()

    def wait_for(self, n):
        with self._cond:
            return self._cond.wait_for(lambda: len(self.snapshots) >= n, TIMEOUT)


# ═══════════════════════════════════════════════════════════════════════════════
# Decoding
# ═══════════════════════════════════════════════════════════════════════════════

class TestDecode:

    def test_png(self, png_bytes):
        img = decode_image(png_bytes)
        assert img.size == (64, 48)
        assert img.mode == "RGB"

    def test_greyscale_converted(self):
        import io
        from PIL import Image
        buf = io.BytesIO()
        Image.new("L", (8, 8), 128).save(buf, format="PNG")
        assert decode_image(buf.getvalue()).mode == "RGB"

    def test_garbage(self):
        with pytest.raises(OSError):
            decode_image(b"definitely not an image")


# ═══════════════════════════════════════════════════════════════════════════════
# Loading
# ═══════════════════════════════════════════════════════════════════════════════

class TestPhotoLoader:

    def test_empty_selection(self):
        loader = PhotoLoader()
        loader.load([])
        assert loader.wait(TIMEOUT)
        assert loader.images == ()

    def test_loads_all(self, make_png):
        loader = PhotoLoader()
        loader.load([lambda: make_png(size=(10, 10)), lambda: make_png(size=(20, 20))])
        assert loader.wait(TIMEOUT)
        assert sorted(img.size for img in loader.images) == [(10, 10), (20, 20)]

    def test_in_order_completion(self, make_png):
        arrivals = _Arrivals()
        loader = PhotoLoader(on_change=arrivals)
        first, second = threading.Event(), threading.Event()
        loader.load([_gated(make_png(size=(10, 10)), first),
                     _gated(make_png(size=(20, 20)), second)])
        first.set()
        assert arrivals.wait_for(1)
        second.set()
        assert loader.wait(TIMEOUT)
        assert [img.size for img in loader.images] == [(10, 10), (20, 20)]

    def test_out_of_order_completion(self, make_png):
        arrivals = _Arrivals()
        loader = PhotoLoader(on_change=arrivals)
        first, second = threading.Event(), threading.Event()
        loader.load([_gated(make_png(size=(10, 10)), first),
                     _gated(make_png(size=(20, 20)), second)])
        second.set()
        assert arrivals.wait_for(1)
        first.set()
        assert loader.wait(TIMEOUT)
        # completion order, not selection order
        assert [img.size for img in loader.images] == [(20, 20), (10, 10)]

    def test_on_change_gets_snapshots(self, make_png):
        arrivals = _Arrivals()
        loader = PhotoLoader(on_change=arrivals)
        gate_a, gate_b = threading.Event(), threading.Event()
        loader.load([_gated(make_png(), gate_a), _gated(make_png(), gate_b)])
        gate_a.set()
        assert arrivals.wait_for(1)
        gate_b.set()
        assert arrivals.wait_for(2)
        assert [len(s) for s in arrivals.snapshots] == [1, 2]

    def test_bad_bytes_omitted(self, png_bytes):
        loader = PhotoLoader()
        loader.load([lambda: b"junk", lambda: png_bytes])
        assert loader.wait(TIMEOUT)
        assert len(loader.images) == 1

    def test_failing_source_omitted(self, png_bytes):
        def broken():
            raise RuntimeError("picker gone")
        loader = PhotoLoader()
        loader.load([broken, lambda: png_bytes])
        assert loader.wait(TIMEOUT)
        assert len(loader.images) == 1


class TestSupersession:

    def test_new_load_clears_images(self, png_bytes):
        loader = PhotoLoader()
        loader.load([lambda: png_bytes])
        assert loader.wait(TIMEOUT)
        gate = threading.Event()
        loader.load([_gated(png_bytes, gate)])
        assert loader.images == ()
        gate.set()
        assert loader.wait(TIMEOUT)

    def test_generation_increments(self):
        loader = PhotoLoader()
        assert loader.load([]) == 1
        assert loader.load([]) == 2
        assert loader.generation == 2

    def test_stale_result_discarded(self, make_png):
        arrivals = _Arrivals()
        loader = PhotoLoader(on_change=arrivals)
        old_gate = threading.Event()
        gen1 = loader.load([_gated(make_png(size=(10, 10)), old_gate)])
        stale = [t for t in threading.enumerate() if t.name.startswith(f"photo-load-{gen1}-")]

        loader.load([lambda: make_png(size=(30, 30))])
        assert loader.wait(TIMEOUT)

        old_gate.set()
        for t in stale:
            t.join(TIMEOUT)
        assert [img.size for img in loader.images] == [(30, 30)]
        assert len(arrivals.snapshots) == 1

    def test_stale_finishing_first_still_discarded(self, make_png):
        loader = PhotoLoader()
        old_gate, new_gate = threading.Event(), threading.Event()
        gen1 = loader.load([_gated(make_png(size=(10, 10)), old_gate)])
        stale = [t for t in threading.enumerate() if t.name.startswith(f"photo-load-{gen1}-")]
        loader.load([_gated(make_png(size=(30, 30)), new_gate)])

        old_gate.set()
        for t in stale:
            t.join(TIMEOUT)
        assert loader.images == ()

        new_gate.set()
        assert loader.wait(TIMEOUT)
        assert [img.size for img in loader.images] == [(30, 30)]
