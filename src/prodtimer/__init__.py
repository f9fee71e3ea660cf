"""prodtimer: Pomodoro-style countdown timer with saved timers and daily stats."""

__version__ = "0.1.0"
