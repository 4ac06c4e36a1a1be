from catalog.scraper.dedup import Deduplicator


def test_marks_keys_as_seen() -> None:
    dedup = Deduplicator()
    assert not dedup.seen("A1")

    dedup.mark_seen("A1")
    dedup.mark_seen("A1")

    assert dedup.seen("A1")
    assert "A1" in dedup
    assert not dedup.seen("A2")
    assert len(dedup) == 1
