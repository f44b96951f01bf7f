"""
Photo loading for the document's photos block.

The picker hands over zero or more sources; each source is a zero-argument
callable returning raw image bytes (it may block or raise). PhotoLoader
fetches and decodes every source on its own daemon thread and collects the
decoded Pillow images in completion order.

Supersession: every load() starts a new generation and clears the list.
Workers from an older generation are not cancelled; when they finish, their
image is dropped because the generation no longer matches.
"""

import io
import logging
import threading

from PIL import Image

log = logging.getLogger("notes2quote.photos")


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into a fully loaded RGB(A) image."""
    img = Image.open(io.BytesIO(data))
    img.load()
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
    return img


class PhotoLoader:

    def __init__(self, on_change=None):
        self._lock = threading.Lock()
        self._generation = 0
        self._images = []
        self._threads = []
        self._on_change = on_change

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def images(self) -> tuple:
        with self._lock:
            return tuple(self._images)

    def load(self, sources) -> int:
        """Replace the current selection with `sources`. Returns the generation."""
        with self._lock:
            self._generation += 1
            gen = self._generation
            self._images = []
            self._threads = [
                threading.Thread(target=self._worker, args=(gen, idx, src),
                                 daemon=True, name=f"photo-load-{gen}-{idx}")
                for idx, src in enumerate(sources)
            ]
            threads = list(self._threads)
        log.info("Loading %d photo(s), generation %d", len(threads), gen)
        for t in threads:
            t.start()
        return gen

    def wait(self, timeout=None) -> bool:
        """Join the current generation's workers. True if all finished."""
        with self._lock:
            threads = list(self._threads)
        for t in threads:
            t.join(timeout)
        return not any(t.is_alive() for t in threads)

    def _worker(self, gen, idx, source):
        try:
            img = decode_image(source())
        except (OSError, ValueError) as e:
            log.warning("Photo %d (generation %d) skipped: %s", idx, gen, e)
            return
        except Exception as e:
            log.warning("Photo %d (generation %d) fetch failed: %s", idx, gen, e)
            return

        with self._lock:
            if gen != self._generation:
                log.debug("Dropping stale photo %d from generation %d", idx, gen)
                return
            self._images.append(img)
            snapshot = tuple(self._images)
        if self._on_change:
            self._on_change(snapshot)
