"""
Tests for the batch orchestrator ("Apply to all images").

Covers:
- Group-by-group scheduling bounded by the concurrency limit
- Partial-failure isolation and input-order results
- Batch size limit, square cropping, cancellation (before and during a run) and progress
"""
import asyncio

import pytest

import services.batch_orchestrator as batch_module
from services.batch_orchestrator import BatchOrchestrator, partition, square_crop
from services.compositor import CompositeResult, composite_sync
from utils.cancellation import CancellationToken

from conftest import make_element, png_bytes, solid_image

WHITE = (255, 255, 255, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture
def elements():
    return [
        make_element("logo", png_bytes((80, 40), BLUE), x=200, y=150, rotation=15, opacity=0.9),
        make_element("wm", png_bytes((300, 300), (0, 0, 0, 255)), opacity=0.3),
    ]


def run(orchestrator, targets, config, **kwargs):
    return asyncio.run(orchestrator.run(targets, config, **kwargs))


class TestScheduling:

    def test_seven_images_two_groups(self, monkeypatch):
        events = []

        async def fake_composite(target, elements, canvas_size, cancel_token=None, executor=None):
            events.append(('start', target))
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            events.append(('end', target))
            return CompositeResult(solid_image((4, 4)))

        monkeypatch.setattr(batch_module, 'composite', fake_composite)
        orchestrator = BatchOrchestrator(concurrency=6)
        results = run(orchestrator, list(range(7)), [])

        assert all(r.ok for r in results)
        assert orchestrator.peak_in_flight == 6
        first_group_starts = [events.index(('start', i)) for i in range(6)]
        first_group_ends = [events.index(('end', i)) for i in range(6)]
        # Group 1 runs concurrently: every start precedes every end
        assert max(first_group_starts) < min(first_group_ends)
        # Image 7 only starts after the whole first group settled
        assert events.index(('start', 6)) > max(first_group_ends)

    def test_real_composites_never_exceed_limit(self, elements):
        orchestrator = BatchOrchestrator(concurrency=2)
        targets = [solid_image((120, 90), WHITE) for _ in range(5)]
        results = run(orchestrator, targets, elements)
        assert len(results) == 5
        assert 1 <= orchestrator.peak_in_flight <= 2

    def test_partition(self):
        assert partition([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
        assert partition([], 3) == []

    @pytest.mark.parametrize("kwargs", [{'concurrency': 0}, {'max_images': 0}])
    def test_invalid_limits(self, kwargs):
        with pytest.raises(ValueError):
            BatchOrchestrator(**kwargs)


class TestIsolation:

    def test_one_failure_does_not_affect_siblings(self, elements):
        targets = [
            png_bytes((400, 300), WHITE),
            b"definitely not an image",
            png_bytes((1000, 1000), (20, 40, 60, 255)),
        ]
        results = run(BatchOrchestrator(), targets, elements)

        assert [r.ok for r in results] == [True, False, True]
        assert [r.index for r in results] == [0, 1, 2]
        assert results[1].image is None
        assert results[1].error

        for index in (0, 2):
            solo = composite_sync(targets[index], elements).image
            assert results[index].image.tobytes() == solo.tobytes()

    def test_skipped_overlay_reported_per_image(self, tmp_path):
        broken = make_element("broken", str(tmp_path / "gone.png"))
        results = run(BatchOrchestrator(), [solid_image((50, 50))], [broken])
        assert results[0].ok
        assert results[0].skipped[0][0] == "broken"

    def test_edits_after_start_do_not_leak(self, elements):
        target = png_bytes((200, 200), WHITE)
        original = [e.copy() for e in elements]

        async def scenario():
            task = asyncio.ensure_future(BatchOrchestrator().run([target], elements))
            await asyncio.sleep(0)  # let run() take its snapshot
            elements[0].set_position(0, 0)
            return await task

        results = asyncio.run(scenario())
        expected = composite_sync(target, original).image
        assert results[0].image.tobytes() == expected.tobytes()


class TestLimitsAndOptions:

    def test_too_many_images_rejected(self, monkeypatch):
        started = []

        async def fake_composite(target, elements, canvas_size, cancel_token=None, executor=None):
            started.append(target)
            return CompositeResult(solid_image((2, 2)))

        monkeypatch.setattr(batch_module, 'composite', fake_composite)
        results = run(BatchOrchestrator(max_images=10), [solid_image((2, 2))] * 11, [])

        assert started == []
        assert len(results) == 11
        assert not any(r.ok for r in results)
        assert "At most 10" in results[0].error

    def test_square_crop_option(self, elements):
        results = run(BatchOrchestrator(), [solid_image((300, 200), WHITE)], elements, auto_square_crop=True)
        assert results[0].image.size == (200, 200)

    def test_square_crop_centred(self):
        image = solid_image((10, 4), WHITE)
        image.putpixel((3, 0), BLUE)
        cropped = square_crop(image)
        assert cropped.size == (4, 4)
        assert cropped.getpixel((0, 0)) == BLUE

    def test_cancelled_batch(self, elements):
        token = CancellationToken()
        token.cancel()
        progress = []
        results = run(BatchOrchestrator(concurrency=2), [solid_image((10, 10))] * 3, elements,
                      cancel_token=token, progress=lambda done, total: progress.append((done, total)))
        assert [r.error for r in results] == ['cancelled'] * 3
        assert progress[-1] == (3, 3)

    def test_progress_reported(self, elements):
        progress = []
        run(BatchOrchestrator(concurrency=2), [solid_image((10, 10))] * 3, elements,
            progress=lambda done, total: progress.append((done, total)))
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_cancel_after_first_group(self, monkeypatch):
        token = CancellationToken()

        async def fake_composite(target, elements, canvas_size, cancel_token=None, executor=None):
            # Session closes while the first group is running
            token.cancel()
            await asyncio.sleep(0)
            return CompositeResult(solid_image((4, 4)))

        monkeypatch.setattr(batch_module, 'composite', fake_composite)
        progress = []
        results = run(BatchOrchestrator(concurrency=2), list(range(3)), [],
                      cancel_token=token, progress=lambda done, total: progress.append((done, total)))

        assert [r.ok for r in results] == [True, True, False]
        assert results[2].error == 'cancelled'
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_failing_progress_callback_keeps_results(self, elements):
        def broken(done, total):
            raise RuntimeError("listener gone")

        results = run(BatchOrchestrator(concurrency=2), [solid_image((10, 10))] * 3, elements,
                      progress=broken)
        assert [r.ok for r in results] == [True, True, True]
