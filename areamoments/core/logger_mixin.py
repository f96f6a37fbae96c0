
import logging
from tabulate import tabulate

from typing import Any, Iterable


class LoggerMixin:
    """
    A mixin class providing a configurable logger to any subclass.

    Every subclass gets its own logger named after its module and class,
    e.g. ``areamoments.core.solution.integrator.MomentIntegrator``. The
    logger is silent by default (a ``NullHandler`` at level WARNING) so that
    a host application embedding the calculator is not flooded with output.
    Passing ``debug=True`` attaches a ``StreamHandler`` and lowers the level
    to DEBUG.

    Parameters
    ----------
    *args : Any
        Positional arguments passed to the parent class (if any).
    debug : bool, optional
        Enables debug-level logging output if True. Default is False.
    **kwargs : Any
        Additional keyword arguments passed to the parent class (if any).

    Attributes
    ----------
    logger : logging.Logger
        A logger instance configured for the specific subclass.
    """

    _formatter = logging.Formatter(
        fmt=(
            "%(asctime)s [%(levelname)s] %(name)s.%(funcName)s():%(lineno)d "
            "- %(message)s"
        ),
        datefmt="%H:%M:%S",
    )

    def __init__(self, *args: Any, debug: bool = False, **kwargs: Any):
        self._logger = logging.getLogger(
            f"{self.__class__.__module__}.{self.__class__.__name__}"
        )
        self._logger.propagate = False

        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

        self._logger.setLevel(logging.WARNING)

        if debug:
            # only one StreamHandler per logger
            if not any(isinstance(h, logging.StreamHandler)
                       for h in self._logger.handlers):
                sh = logging.StreamHandler()
                sh.setFormatter(self._formatter)
                self._logger.addHandler(sh)
            self._logger.setLevel(logging.DEBUG)

        self._logger.debug(
            "Instantiated %s(debug=%s)", self.__class__.__name__, debug
        )

    @property
    def logger(self) -> logging.Logger:
        """
        Returns the logger instance associated with this object.

        Returns
        -------
        logging.Logger
            The configured logger.
        """
        if not hasattr(self, "_logger"):
            LoggerMixin.__init__(self)
        return self._logger

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        has_debug = "debug" in getattr(cls, "__annotations__", {})

        # Dataclasses: set up the logger right before __post_init__ runs.
        orig_post = getattr(cls, "__post_init__", None)
        if orig_post is not None and has_debug:
            def wrapped_post(self, *a, **k):
                LoggerMixin.__init__(self, debug=getattr(self, "debug", False))
                return orig_post(self, *a, **k)

            cls.__post_init__ = wrapped_post
            return

        # Plain classes: set up the logger before the wrapped __init__.
        orig_init = getattr(cls, "__init__", None)
        if orig_init is not LoggerMixin.__init__:

            def wrapped_init(self, *a, **k):
                LoggerMixin.__init__(self, debug=k.get("debug", False))
                if orig_init is not None:
                    return orig_init(self, *a, **k)

            cls.__init__ = wrapped_init


def table_report(record, decimals: int = 6) -> str:
    """Render a report record as a two column grid table.

    Parameters
    ----------
    record : :py:class:`ReportRecord`
        The record to render. Every entry of :py:meth:`ReportRecord.as_dict`
        becomes one row.
    decimals : int, default=6
        Number of decimals used for floating point values.

    Returns
    -------
    str
        The table, ready to be written to a log.
    """
    rows = [[key, value] for key, value in record.as_dict().items()]
    return tabulate(rows, headers=["Quantity", "Value"], tablefmt="grid",
                    floatfmt=f".{decimals}f")


def table_vertices(coords: Iterable, columns, decimals: int = 6) -> str:
    """Render a vertex buffer with one numbered row per vertex."""
    data = [[i] + list(row) for i, row in enumerate(coords)]
    return tabulate(data, headers=["Vertex nr."] + list(columns),
                    tablefmt="grid", floatfmt=f".{decimals}f")
