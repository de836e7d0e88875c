"""Building blocks for combat-log addons: singletons, ordered event dispatch, localization and an HTTP request queue."""

__version__ = "0.1.0"

__all__ = [
    "singleton",
    "event_sequencer",
    "localization",
    "combat_event_handler",
    "network_stack",
]