from homewatch.notify.notifier import LogNotifier, Notifier, PushoverRelayNotifier, build_notifier

__all__ = ["LogNotifier", "Notifier", "PushoverRelayNotifier", "build_notifier"]
