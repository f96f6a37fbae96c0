
import queue
import threading
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Iterable, List, Optional, Tuple

from areamoments.core.config import Settings
from areamoments.core.face import FaceSource, calculate_face
from areamoments.core.logger_mixin import LoggerMixin
from areamoments.core.postprocessing.report import ReportRecord
from areamoments.core.preprocessing.surface import SurfaceType


@dataclass(eq=False)
class SelectionItem:
    """One selected face and, once calculated, its result.

    Parameters
    ----------
    name : :any:`str`
        Display name, e.g. ``'Planar Face 1'``.
    face : :py:class:`FaceSource`
        The face to measure.
    result : :py:class:`ReportRecord` or None, default=None
        Filled in by :py:meth:`MomentsSession.calculate`.
    """

    name: str
    face: FaceSource
    result: Optional[ReportRecord] = None

    @property
    def has_result(self) -> bool:
        return self.result is not None


def _surface_label(face) -> str:
    try:
        return SurfaceType.from_name(face.surface_type).label
    except Exception:
        return SurfaceType.UNKNOWN.label


@dataclass(eq=False)
class MomentsSession(LoggerMixin):
    """Selection of faces and their results.

    The selection list is shared between whoever changes the selection and
    whoever calculates, possibly on different threads; every access goes
    through :py:attr:`lock`.

    Parameters
    ----------
    settings : :py:class:`Settings`, default=Settings()
        Tessellation tolerance, auto-calculation and weld tolerance.
    debug : bool, default=False
        Enables debug logging, also for every calculation.

    Examples
    --------
    >>> from areamoments.core.face import FacetFace
    >>> square = [0, 0, 0, 1, 0, 0, 1, 1, 0, 0, 0, 0, 1, 1, 0, 0, 1, 0]
    >>> session = MomentsSession()
    >>> session.set_selection([FacetFace(square, 'planar')])
    >>> [(name, round(r.area, 6)) for name, r in session.results()]
    [('Planar Face 1', 1.0)]
    """

    settings: Settings = field(default_factory=Settings)
    debug: bool = False

    def __post_init__(self):
        if not isinstance(self.settings, Settings):
            raise TypeError('"settings" must be an instance of Settings.')
        self.lock = threading.Lock()
        self._items: List[SelectionItem] = []
        self.logger.debug("Session created with %s", self.settings)

    def set_selection(self, faces: Iterable[FaceSource]) -> None:
        """Replace the selection.

        Faces are named after their surface type and their position in the
        selection, counting from 1. With ``auto_calculate`` enabled, the new
        selection is calculated right away.
        """
        with self.lock:
            self._items = [
                SelectionItem(f'{_surface_label(face)} {i}', face)
                for i, face in enumerate(faces, start=1)
            ]
            self.logger.info("Selection changed: %d faces.",
                             len(self._items))
        if self.settings.auto_calculate:
            self.calculate()

    def add_selection(self, face: FaceSource,
                      name: Optional[str] = None) -> SelectionItem:
        """Append a single face to the selection."""
        with self.lock:
            if name is None:
                name = f'{_surface_label(face)} {len(self._items) + 1}'
            item = SelectionItem(name, face)
            self._items.append(item)
        return item

    def clear(self) -> None:
        with self.lock:
            self._items = []
        self.logger.debug("Selection cleared.")

    def calculate(self) -> int:
        """Calculate every selected face that has no result yet.

        Faces whose facet data cannot be acquired stay without result; a new
        calculation request retries them.

        Returns
        -------
        int
            Number of faces that received a result.
        """
        done = 0
        with self.lock:
            for item in self._items:
                if item.has_result:
                    continue
                item.result = calculate_face(
                    item.face,
                    tolerance=self.settings.tessellation_tolerance,
                    weld_tolerance=self.settings.weld_tolerance,
                    debug=self.debug,
                )
                if item.has_result:
                    done += 1
                else:
                    self.logger.warning("No result for %s.", item.name)
        self.logger.info("Calculated %d faces.", done)
        return done

    def items(self) -> List[SelectionItem]:
        """Snapshot of the selection; the items are copies."""
        with self.lock:
            return [replace(item) for item in self._items]

    def results(self) -> List[Tuple[str, ReportRecord]]:
        """``(name, record)`` of every face with a result, in order."""
        with self.lock:
            return [(item.name, item.result) for item in self._items
                    if item.has_result]

    def __len__(self) -> int:
        with self.lock:
            return len(self._items)


class Message(Enum):
    SELECT = auto()
    CALCULATE = auto()
    CLOSE = auto()


@dataclass(eq=False)
class ComputeWorker(LoggerMixin):
    """Runs a :py:class:`MomentsSession` on a background thread.

    Requests are posted as messages and handled strictly in order, so the
    thread posting selections never waits for a calculation.

    Parameters
    ----------
    session : :py:class:`MomentsSession`
        The session that receives the requests.
    debug : bool, default=False
        Enables debug logging.

    Examples
    --------
    >>> worker = ComputeWorker(MomentsSession())
    >>> worker.start()
    >>> worker.select([])
    >>> worker.close()
    """

    session: MomentsSession
    debug: bool = False

    def __post_init__(self):
        self._queue: 'queue.Queue[Tuple[Message, Any]]' = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self.failures: List[BaseException] = []

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(
            target=self._run, name='areamoments-worker', daemon=True
        )
        self._thread.start()
        self.logger.debug("Worker thread started.")

    def select(self, faces: Iterable[FaceSource]) -> None:
        """Post a selection change."""
        self._queue.put((Message.SELECT, list(faces)))

    def request_calculation(self) -> None:
        self._queue.put((Message.CALCULATE, None))

    def join(self) -> None:
        """Block until every posted message has been handled."""
        self._queue.join()

    def close(self, timeout: Optional[float] = None) -> None:
        """Handle the pending messages, then stop the thread.

        If the thread is still busy when ``timeout`` expires it is kept, so
        :py:meth:`start` cannot spawn a second reader of the same queue.
        """
        if self._thread is None:
            return
        self._queue.put((Message.CLOSE, None))
        self._thread.join(timeout)
        if self._thread.is_alive():
            self.logger.warning("Worker thread still busy after %s s.",
                                timeout)
            return
        self._thread = None
        self.logger.debug("Worker thread stopped.")

    def _run(self) -> None:
        while True:
            message, payload = self._queue.get()
            try:
                if message is Message.CLOSE:
                    return
                if message is Message.SELECT:
                    self.session.set_selection(payload)
                elif message is Message.CALCULATE:
                    self.session.calculate()
            except Exception as e:
                self.logger.error("%s request failed: %s", message.name, e,
                                  exc_info=True)
                self.failures.append(e)
            finally:
                self._queue.task_done()
