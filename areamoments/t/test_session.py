
import threading
from unittest import TestCase

from numpy.testing import assert_allclose as numpy_allclose

from areamoments.core.config import Settings
from areamoments.core.face import FacetFace
from areamoments.core.session import ComputeWorker, MomentsSession


def assert_allclose(actual, desired, err_msg=''):
    numpy_allclose(actual, desired, err_msg=err_msg, atol=1e-10, rtol=1e-7)


SQUARE = [0, 0, 0, 1, 0, 0, 1, 1, 0,
          0, 0, 0, 1, 1, 0, 0, 1, 0]


class CountingFace:

    def __init__(self, data=SQUARE, surface_type='cylinder', fail=0):
        self.data = data
        self.surface_type = surface_type
        self.fail = fail
        self.calls = 0

    def facet_data(self, tolerance):
        self.calls += 1
        if self.calls <= self.fail:
            raise RuntimeError('tessellation failed')
        return self.data


class LockProbeFace(CountingFace):

    def __init__(self, session):
        super().__init__()
        self.session = session
        self.locked = None

    def facet_data(self, tolerance):
        self.locked = self.session.lock.locked()
        return super().facet_data(tolerance)


class TestMomentsSession(TestCase):

    def test_naming(self):
        session = MomentsSession()
        session.set_selection([
            FacetFace(SQUARE, 'planar'), CountingFace(), FacetFace(SQUARE)
        ])
        self.assertEqual(
            [item.name for item in session.items()],
            ['Planar Face 1', 'Cylindrical Face 2', 'Face 3'],
            'Faces are named after their type and selection position.'
        )

    def test_auto_calculate(self):
        session = MomentsSession()
        session.set_selection([FacetFace(SQUARE, 'planar')])
        (name, record), = session.results()
        self.assertEqual(name, 'Planar Face 1')
        assert_allclose((record.area, record.ix), (1.0, 1 / 12))

    def test_manual_calculate(self):
        face = CountingFace()
        session = MomentsSession(Settings(auto_calculate=False,
                                          tessellation_tolerance=0.01))
        session.set_selection([face])
        self.assertEqual(session.results(), [])
        self.assertEqual(face.calls, 0)
        self.assertEqual(session.calculate(), 1)
        self.assertEqual(session.calculate(), 0,
                         'Faces with a result are not calculated again.')
        self.assertEqual(face.calls, 1)

    def test_failed_face_is_retried(self):
        good, bad = CountingFace(), CountingFace(fail=1)
        session = MomentsSession()
        session.set_selection([good, bad])
        items = session.items()
        self.assertTrue(items[0].has_result)
        self.assertFalse(items[1].has_result,
                         'A failing face stays without result.')
        self.assertEqual(session.calculate(), 1)
        self.assertEqual((good.calls, bad.calls), (1, 2))
        self.assertEqual(len(session.results()), 2)

    def test_items_are_copies(self):
        session = MomentsSession()
        session.set_selection([CountingFace()])
        session.items()[0].result = None
        self.assertTrue(session.items()[0].has_result)

    def test_add_and_clear(self):
        session = MomentsSession(Settings(auto_calculate=False))
        session.add_selection(CountingFace())
        item = session.add_selection(CountingFace(), name='web')
        self.assertEqual(item.name, 'web')
        self.assertEqual(session.items()[0].name, 'Cylindrical Face 1')
        self.assertEqual(len(session), 2)
        session.clear()
        self.assertEqual(len(session), 0)

    def test_calculation_holds_lock(self):
        session = MomentsSession()
        face = LockProbeFace(session)
        session.set_selection([face])
        self.assertTrue(face.locked)
        self.assertFalse(session.lock.locked())

    def test_overflowing_face_does_not_stop_selection(self):
        huge = [1e308, 0, 0, -1e308, 0, 0, 0, 1e308, 0]
        session = MomentsSession()
        session.set_selection([FacetFace(huge), FacetFace(SQUARE, 'planar')])
        results = session.results()
        self.assertEqual(len(results), 2)
        self.assertEqual(results[0][1].area, 0.0)
        name, record = results[1]
        self.assertEqual(name, 'Planar Face 2')
        assert_allclose(record.area, 1.0)

    def test_settings_type(self):
        with self.assertRaises(TypeError):
            MomentsSession(settings={'auto_calculate': False})


class FailingSession:

    def set_selection(self, faces):
        raise RuntimeError('selection rejected')

    def calculate(self):
        return 0


class BlockingSession:

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def set_selection(self, faces):
        self.entered.set()
        self.release.wait(5)

    def calculate(self):
        return 0


class TestComputeWorker(TestCase):

    def test_select_and_calculate(self):
        session = MomentsSession(Settings(auto_calculate=False))
        worker = ComputeWorker(session)
        worker.start()
        self.assertTrue(worker.running)
        worker.select([FacetFace(SQUARE, 'planar'), CountingFace()])
        worker.join()
        self.assertEqual(session.results(), [])
        worker.request_calculation()
        worker.join()
        self.assertEqual(
            [name for name, _ in session.results()],
            ['Planar Face 1', 'Cylindrical Face 2']
        )
        worker.close(timeout=5)
        self.assertFalse(worker.running)
        self.assertEqual(worker.failures, [])

    def test_runs_on_worker_thread(self):
        threads = []

        class ThreadFace(CountingFace):
            def facet_data(self, tolerance):
                threads.append(threading.current_thread().name)
                return super().facet_data(tolerance)

        worker = ComputeWorker(MomentsSession())
        worker.start()
        worker.select([ThreadFace()])
        worker.close(timeout=5)
        self.assertEqual(threads, ['areamoments-worker'])

    def test_failure_keeps_worker_alive(self):
        worker = ComputeWorker(FailingSession())
        worker.start()
        worker.select([])
        worker.request_calculation()
        worker.join()
        self.assertTrue(worker.running)
        self.assertEqual(len(worker.failures), 1)
        self.assertIsInstance(worker.failures[0], RuntimeError)
        worker.close(timeout=5)

    def test_close_without_start(self):
        worker = ComputeWorker(MomentsSession())
        worker.close()
        self.assertFalse(worker.running)

    def test_close_timeout_keeps_busy_thread(self):
        session = BlockingSession()
        worker = ComputeWorker(session)
        worker.start()
        thread = worker._thread
        worker.select([])
        self.assertTrue(session.entered.wait(5))
        worker.close(timeout=0.05)
        self.assertTrue(worker.running,
                        'A busy thread must not be dropped on timeout.')
        worker.start()
        self.assertIs(worker._thread, thread,
                      'start() must not spawn a second queue reader.')
        session.release.set()
        worker.close(timeout=5)
        self.assertFalse(worker.running)
        self.assertFalse(thread.is_alive())
