"""Runtime adapters that drive the engine from a Qt event loop."""

from chesstris.runtime.qt_bridge import GravityTimer

__all__ = ["GravityTimer"]
