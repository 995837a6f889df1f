"""Runtime owner of the view state."""

from typing import Callable

from scanboard.loader import RemoteDataLoader
from scanboard.navigation import Mounted, ViewState, initial_state, transition


class Dashboard:
    """Holds the current ``ViewState`` and executes fetch effects.

    By default each effect is loaded immediately and its completion event
    dispatched right away. Pass ``runner`` to schedule effects some other
    way; completions must then be fed back through ``dispatch``.
    """

    def __init__(self, loader: RemoteDataLoader, runner: Callable | None = None):
        self.loader = loader
        self.state: ViewState = initial_state(fetch_enabled=loader.enabled)
        self._runner = runner or self._run_now

    def start(self) -> ViewState:
        return self.dispatch(Mounted())

    def dispatch(self, event) -> ViewState:
        result = transition(self.state, event)
        self.state = result.state
        for effect in result.effects:
            self._runner(effect)
        return self.state

    def _run_now(self, effect) -> None:
        self.dispatch(self.loader.run(effect))
