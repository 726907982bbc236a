"""Qt bridge that drives gravity ticks from the Qt event loop."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6.QtCore import QObject, QTimer, pyqtSignal, pyqtSlot

if TYPE_CHECKING:
    from chesstris.game.controller import GameEngine


class GravityTimer(QObject):
    """:class:`~chesstris.game.interfaces.IGravityTimer` backed by a ``QTimer``.

    Emits ``ticked`` once per interval; :meth:`attach` routes the signal to
    :meth:`GameEngine.gravity_tick`.  Stopping discards the running interval,
    so a restart never replays missed ticks.
    """

    ticked = pyqtSignal()

    __slots__ = ("_timer",)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timer = QTimer(self)
        self._timer.setSingleShot(False)
        self._timer.timeout.connect(self._on_timeout)

    # ── IGravityTimer implementation ─────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    @pyqtSlot(int)
    def start(self, interval_ms: int) -> None:
        self._timer.start(max(1, interval_ms))

    @pyqtSlot()
    def stop(self) -> None:
        self._timer.stop()

    @pyqtSlot(int)
    def set_interval(self, interval_ms: int) -> None:
        """Retune the tick period; an active timer restarts its countdown."""
        self._timer.setInterval(max(1, interval_ms))

    # ── Extra helpers ────────────────────────────────────────────────────

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def attach(self, engine: GameEngine) -> None:
        """Deliver every tick to *engine*."""
        self.ticked.connect(engine.gravity_tick)

    @pyqtSlot()
    def _on_timeout(self) -> None:
        self.ticked.emit()
