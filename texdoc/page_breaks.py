"""
Page Break Reconstructor
========================
Maps every page TeX shipped out to the source file that was active when the
page counter first appeared in the log.
"""

from __future__ import annotations

import logging

from .file_tracker import FileNestingTracker
from .log_scanner import scan_log
from .models import EventType, PageRecord

logger = logging.getLogger(__name__)


class PageBreakReconstructor:
    """
    Single forward pass over a log. The first attribution of a page number
    wins; TeX reprints counters (e.g. on overfull box recovery) and later
    sightings are dropped.
    """

    def __init__(self, main_file: str):
        self.main_file = main_file

    def reconstruct(self, log_text: str) -> list[PageRecord]:
        tracker = FileNestingTracker(self.main_file)
        pages: dict[int, str] = {}
        repeats = 0

        for _line, events in scan_log(log_text):
            for event in events:
                if event.type == EventType.PAGE_EMITTED:
                    if event.page in pages:
                        repeats += 1
                    else:
                        pages[event.page] = tracker.current
                else:
                    tracker.apply(event)

        tracker.finish()
        if repeats:
            logger.debug(f"Ignored {repeats} repeated page counter(s)")

        return [
            PageRecord(page=page, file=pages[page])
            for page in sorted(pages)
        ]
