import unittest
from typing import List, Sequence, Tuple

from asciidonut.driver import AnimationDriver, DragState
from asciidonut.renderer.engine import RenderEngine
from asciidonut.renderer.geometry import RotationState, ScreenGeometry
from asciidonut.renderer.terminal import InputEvent


class FakeDisplay:
    def __init__(
        self,
        sizes: Sequence[Tuple[int, int]],
        events: Sequence[Sequence[InputEvent]] = (),
    ) -> None:
        self._sizes = list(sizes)
        self._events = [list(batch) for batch in events]
        self.frames: List[str] = []

    def size_tuple(self) -> Tuple[int, int]:
        if len(self._sizes) > 1:
            return self._sizes.pop(0)
        return self._sizes[0]

    def draw(self, frame: str) -> None:
        self.frames.append(frame)

    def poll_events(self) -> List[InputEvent]:
        if self._events:
            return self._events.pop(0)
        return []


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        self.now += 0.01
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class DragTests(unittest.TestCase):
    def setUp(self) -> None:
        self.driver = AnimationDriver(RenderEngine(20, 10))

    def test_drag_deltas_compose(self) -> None:
        self.driver.press(10, 10)
        self.driver.move(13, 10)
        self.driver.move(13, 14)
        rotation = self.driver.rotation
        self.assertAlmostEqual(rotation.b, 0.03, places=12)
        self.assertAlmostEqual(rotation.a, 0.04, places=12)

    def test_drag_composes_with_ticks(self) -> None:
        self.driver.tick()
        self.driver.press(0, 0)
        self.driver.move(3, 0)
        self.driver.tick()
        self.driver.move(3, 4)
        self.driver.release()
        rotation = self.driver.rotation
        self.assertAlmostEqual(rotation.a, 2 * 0.04 + 0.04, places=12)
        self.assertAlmostEqual(rotation.b, 2 * 0.02 + 0.03, places=12)

    def test_moves_are_relative_to_previous_event(self) -> None:
        self.driver.press(0, 0)
        self.driver.move(5, 0)
        self.driver.move(5, 0)
        self.assertAlmostEqual(self.driver.rotation.b, 0.05, places=12)
        self.assertEqual(self.driver.rotation.a, 0.0)

    def test_moves_while_idle_are_ignored(self) -> None:
        self.driver.move(50, 50)
        self.assertEqual(self.driver.rotation, RotationState(0.0, 0.0))
        self.assertIs(self.driver.drag_state, DragState.IDLE)

    def test_release_and_leave_end_drag(self) -> None:
        self.driver.press(1, 1)
        self.assertIs(self.driver.drag_state, DragState.DRAGGING)
        self.driver.release()
        self.assertIs(self.driver.drag_state, DragState.IDLE)

        self.driver.press(1, 1)
        self.driver.leave()
        self.assertIs(self.driver.drag_state, DragState.IDLE)
        self.driver.move(40, 40)
        self.assertEqual(self.driver.rotation, RotationState(0.0, 0.0))

    def test_new_press_reanchors(self) -> None:
        self.driver.press(0, 0)
        self.driver.release()
        self.driver.press(100, 100)
        self.driver.move(101, 100)
        self.assertAlmostEqual(self.driver.rotation.b, 0.01, places=12)

    def test_custom_divisor(self) -> None:
        driver = AnimationDriver(RenderEngine(20, 10), drag_divisor=50.0)
        driver.press(0, 0)
        driver.move(1, 2)
        self.assertAlmostEqual(driver.rotation.b, 0.02, places=12)
        self.assertAlmostEqual(driver.rotation.a, 0.04, places=12)

    def test_rejects_non_positive_divisor(self) -> None:
        with self.assertRaises(ValueError):
            AnimationDriver(RenderEngine(20, 10), drag_divisor=0.0)


class EventTests(unittest.TestCase):
    def setUp(self) -> None:
        self.driver = AnimationDriver(RenderEngine(20, 10), nudge_step=0.5)

    def test_pointer_events_dispatch(self) -> None:
        for event in (
            InputEvent("press", 4, 4),
            InputEvent("move", 6, 5),
            InputEvent("leave"),
            InputEvent("move", 60, 50),
        ):
            self.assertFalse(self.driver.handle(event))
        rotation = self.driver.rotation
        self.assertAlmostEqual(rotation.b, 0.02, places=12)
        self.assertAlmostEqual(rotation.a, 0.01, places=12)

    def test_arrow_keys_nudge(self) -> None:
        self.driver.handle(InputEvent("key", key="RIGHT"))
        self.driver.handle(InputEvent("key", key="DOWN"))
        self.driver.handle(InputEvent("key", key="DOWN"))
        self.driver.handle(InputEvent("key", key="UP"))
        self.assertEqual(self.driver.rotation, RotationState(0.5, 0.5))

    def test_quit_key(self) -> None:
        self.assertTrue(self.driver.handle(InputEvent("key", key="q")))
        self.assertFalse(self.driver.handle(InputEvent("key", key="x")))


class TickTests(unittest.TestCase):
    def test_tick_renders_before_advancing(self) -> None:
        driver = AnimationDriver(RenderEngine(40, 20))
        frame = driver.tick()
        self.assertEqual(frame, RenderEngine(40, 20).render(RotationState()))
        self.assertEqual(driver.rotation, RotationState(0.04, 0.02))

    def test_ticks_match_cold_start(self) -> None:
        driver = AnimationDriver(RenderEngine(80, 40))
        first = driver.tick()
        second = driver.tick()
        cold = RenderEngine(80, 40).render(RotationState(0.04, 0.02))
        self.assertNotEqual(first, second)
        self.assertEqual(second, cold)

    def test_resize_is_idempotent(self) -> None:
        driver = AnimationDriver(RenderEngine(20, 10))
        self.assertTrue(driver.resize(30, 12))
        _, first = driver.snapshot()
        self.assertFalse(driver.resize(30, 12))
        _, second = driver.snapshot()
        self.assertEqual(first, second)
        self.assertEqual(second, ScreenGeometry.for_size(30, 12))

    def test_degenerate_tick_does_not_raise(self) -> None:
        driver = AnimationDriver(RenderEngine(0, 10))
        with self.assertLogs("asciidonut.renderer.engine", level="WARNING"):
            frame = driver.tick()
        self.assertEqual(frame, RenderEngine.PLACEHOLDER)
        self.assertEqual(driver.rotation, RotationState(0.04, 0.02))


class RunLoopTests(unittest.TestCase):
    def test_runs_fixed_number_of_frames(self) -> None:
        clock = FakeClock()
        display = FakeDisplay([(20, 8)])
        driver = AnimationDriver(RenderEngine(20, 8))
        drawn = driver.run(display, interval=0.05, frames=3, clock=clock, sleep=clock.sleep)
        self.assertEqual(drawn, 3)
        self.assertEqual(len(display.frames), 3)
        self.assertEqual(len(clock.sleeps), 2)
        for frame in display.frames:
            self.assertEqual(frame.count("\n"), 8)
        self.assertEqual(driver.rotation, RotationState(0.04 + 0.04 + 0.04, 0.02 + 0.02 + 0.02))

    def test_applies_resizes_between_frames(self) -> None:
        clock = FakeClock()
        display = FakeDisplay([(20, 8), (0, 8), (12, 5)])
        driver = AnimationDriver(RenderEngine(20, 8))
        with self.assertLogs("asciidonut.renderer.engine", level="WARNING"):
            driver.run(display, frames=3, clock=clock, sleep=clock.sleep)
        self.assertEqual(display.frames[0].count("\n"), 8)
        self.assertEqual(display.frames[1], RenderEngine.PLACEHOLDER)
        self.assertEqual(display.frames[2].count("\n"), 5)
        self.assertEqual(driver.snapshot()[1], ScreenGeometry.for_size(12, 5))

    def test_drag_events_applied_before_render(self) -> None:
        clock = FakeClock()
        display = FakeDisplay(
            [(20, 8)],
            events=[[InputEvent("press", 0, 0), InputEvent("move", 3, 4)]],
        )
        driver = AnimationDriver(RenderEngine(20, 8))
        driver.run(display, frames=1, clock=clock, sleep=clock.sleep)
        expected = RenderEngine(20, 8).render(RotationState(0.04, 0.03))
        self.assertEqual(display.frames[0], expected)

    def test_quit_key_stops_loop(self) -> None:
        clock = FakeClock()
        display = FakeDisplay([(20, 8)], events=[[], [InputEvent("key", key="q")]])
        driver = AnimationDriver(RenderEngine(20, 8))
        drawn = driver.run(display, clock=clock, sleep=clock.sleep)
        self.assertEqual(drawn, 1)
        self.assertEqual(len(display.frames), 1)

    def test_show_fps_overlays_readout(self) -> None:
        clock = FakeClock()
        display = FakeDisplay([(40, 10)])
        driver = AnimationDriver(RenderEngine(40, 10))
        driver.run(display, frames=1, show_fps=True, clock=clock, sleep=clock.sleep)
        self.assertIn("FPS", display.frames[0].split("\n")[1])

    def test_rejects_non_positive_interval(self) -> None:
        driver = AnimationDriver(RenderEngine(20, 8))
        with self.assertRaises(ValueError):
            driver.run(FakeDisplay([(20, 8)]), interval=0.0)


if __name__ == "__main__":
    unittest.main()
