"""Runtime coordination: debouncing, option loading, submission and event wiring."""
