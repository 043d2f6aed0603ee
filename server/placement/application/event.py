from placement.domain.shared.event import Event


class ServerStarted(Event):
    """Emitted once per process start, after workers and schedules are registered."""
